"""Tests for threshold classification."""

from __future__ import annotations

import pytest

from smartcb.core.evaluator import Status, classify
from smartcb.models import (
    CurrentThreshold,
    FrequencyThreshold,
    PowerFactorThreshold,
    Reading,
    Thresholds,
    VoltageThreshold,
)


@pytest.fixture
def thresholds() -> Thresholds:
    return Thresholds(
        voltage=VoltageThreshold(min=200, max=240),
        current=CurrentThreshold(max=16, enabled=True),
        frequency=FrequencyThreshold(min=49, max=51, enabled=True),
        power_factor=PowerFactorThreshold(min=0.85, enabled=True),
    )


def _reading(**overrides: float) -> Reading:
    values = {"voltage": 225, "current": 14.5, "frequency": 50.0, "power_factor": 0.92}
    values.update(overrides)
    return Reading(**values)


def test_nominal_reading_is_all_normal(thresholds):
    result = classify(_reading(), thresholds)

    assert result.voltage is Status.NORMAL
    assert result.current is Status.NORMAL
    assert result.frequency is Status.NORMAL
    assert result.power_factor is Status.NORMAL
    assert result.needs_attention is False
    assert result.breaches() == {}


def test_voltage_above_configured_max_needs_attention(thresholds):
    result = classify(_reading(voltage=245), thresholds)

    assert result.voltage is Status.CRITICAL
    assert result.needs_attention is True
    assert result.breaches() == {"voltage": Status.CRITICAL}


@pytest.mark.parametrize(
    ("voltage", "expected"),
    [
        (210, Status.NORMAL),
        (230, Status.NORMAL),
        (205, Status.WARNING),
        (235, Status.WARNING),
        (240, Status.WARNING),
        (199.9, Status.CRITICAL),
    ],
)
def test_voltage_bands(thresholds, voltage, expected):
    assert classify(_reading(voltage=voltage), thresholds).voltage is expected


def test_normal_band_is_clipped_to_configured_band():
    thresholds = Thresholds(voltage=VoltageThreshold(min=215, max=225))

    assert classify(_reading(voltage=212), thresholds).voltage is Status.CRITICAL
    assert classify(_reading(voltage=220), thresholds).voltage is Status.NORMAL


@pytest.mark.parametrize(
    ("current", "expected"),
    [
        (0.0, Status.NORMAL),
        (14.99, Status.NORMAL),
        (15.0, Status.WARNING),
        (16.0, Status.WARNING),
        (16.5, Status.CRITICAL),
    ],
)
def test_current_bands(thresholds, current, expected):
    assert classify(_reading(current=current), thresholds).current is expected


@pytest.mark.parametrize("current", [15.0, 16.0, 100.0, 1e6])
def test_disabled_current_is_always_normal(current):
    thresholds = Thresholds(current=CurrentThreshold(max=16, enabled=False))

    result = classify(_reading(current=current), thresholds)

    assert result.current is Status.NORMAL
    assert result.needs_attention is False


def test_frequency_limits_are_inclusive(thresholds):
    assert classify(_reading(frequency=49.0), thresholds).frequency is Status.NORMAL
    assert classify(_reading(frequency=51.0), thresholds).frequency is Status.NORMAL
    assert classify(_reading(frequency=51.2), thresholds).frequency is Status.WARNING
    assert classify(_reading(frequency=48.9), thresholds).frequency is Status.WARNING


def test_power_factor_below_minimum_is_warning(thresholds):
    assert classify(_reading(power_factor=0.85), thresholds).power_factor is Status.NORMAL
    assert classify(_reading(power_factor=0.7), thresholds).power_factor is Status.WARNING


def test_disabled_dimensions_never_need_attention():
    thresholds = Thresholds(
        frequency=FrequencyThreshold(enabled=False),
        power_factor=PowerFactorThreshold(enabled=False),
    )

    result = classify(_reading(frequency=40.0, power_factor=0.1), thresholds)

    assert result.frequency is Status.NORMAL
    assert result.power_factor is Status.NORMAL
    assert result.needs_attention is False


def test_dimensions_are_independent(thresholds):
    result = classify(_reading(current=20.0, frequency=52.0), thresholds)

    assert result.voltage is Status.NORMAL
    assert result.power_factor is Status.NORMAL
    assert result.breaches() == {
        "current": Status.CRITICAL,
        "frequency": Status.WARNING,
    }
