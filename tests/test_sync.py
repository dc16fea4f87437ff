"""Tests for configuration and clock synchronization."""

from __future__ import annotations

from datetime import datetime

import pytest
from pydantic import ValidationError

from smartcb.core.sync import (
    ClockSynchronizer,
    ConfigSynchronizer,
    DeviceSettings,
    parse_schedules,
    reconcile_thresholds,
    weekday_index,
)
from smartcb.errors import DeviceResponseError, DeviceTransportError
from smartcb.models import (
    CurrentThreshold,
    DeviceConfig,
    DeviceEndpoint,
    FrequencyThreshold,
    PowerFactorThreshold,
    Schedule,
    SyncSession,
    Thresholds,
    VoltageThreshold,
)


class FakeClient:
    def __init__(self, settings=None, schedules=None, time_ok=True):
        self.endpoint = DeviceEndpoint(host="10.0.0.2")
        self._settings = settings
        self._schedules = schedules
        self._time_ok = time_ok
        self.time_calls: list[tuple[int, int, int]] = []

    @staticmethod
    def _answer(value):
        if isinstance(value, Exception):
            raise value
        return value

    def get_settings(self):
        return self._answer(self._settings)

    def get_schedules(self):
        return self._answer(self._schedules)

    def set_time(self, hour, minute, day):
        self.time_calls.append((hour, minute, day))
        return self._answer(self._time_ok)


@pytest.fixture
def local() -> DeviceConfig:
    return DeviceConfig(
        thresholds=Thresholds(
            voltage=VoltageThreshold(min=195.5, max=245),
            current=CurrentThreshold(max=20, enabled=False),
            frequency=FrequencyThreshold(min=49.5, max=50.5, enabled=True),
            power_factor=PowerFactorThreshold(min=0.9, enabled=True),
        ),
        schedules=[
            Schedule(id=1, on_time="06:00", off_time="07:00", days=[1]),
            Schedule(id=2, on_time="18:00", off_time="23:00", days=[0, 6]),
        ],
    )


def test_reconcile_keeps_local_value_for_omitted_fields(local):
    settings = DeviceSettings.model_validate({"maxVoltage": 240, "protectionEnabled": True})

    merged = reconcile_thresholds(local.thresholds, settings)

    assert merged.voltage.max == 240
    assert merged.voltage.min == 195.5
    assert merged.current.enabled is True
    assert merged.current.max == 20
    assert merged.frequency == local.thresholds.frequency
    assert merged.power_factor == local.thresholds.power_factor
    assert merged.energy == local.thresholds.energy


def test_reconcile_with_empty_settings_is_identity(local):
    assert reconcile_thresholds(local.thresholds, DeviceSettings()) == local.thresholds


def test_reconcile_treats_explicit_zero_as_a_value(local):
    settings = DeviceSettings.model_validate(
        {"minPowerFactor": 0, "powerFactorProtection": False}
    )

    merged = reconcile_thresholds(local.thresholds, settings)

    assert merged.power_factor.min == 0
    assert merged.power_factor.enabled is False


def test_reconcile_rejects_inconsistent_device_limits(local):
    settings = DeviceSettings.model_validate({"minVoltage": 260})

    with pytest.raises(ValidationError):
        reconcile_thresholds(local.thresholds, settings)


def test_parse_schedules_assigns_stable_ids():
    payload = {
        "schedules": [
            {"onTime": "08:00", "offTime": "09:00", "days": [1], "enabled": True},
            {"id": 1, "onTime": "10:00", "offTime": "11:00", "days": [2]},
            {"onTime": "12:00", "offTime": "13:00", "days": [3], "enabled": False},
        ]
    }

    first = parse_schedules(payload)
    second = parse_schedules(payload)

    assert [schedule.id for schedule in first] == [2, 1, 3]
    assert first == second
    assert first[2].enabled is False


def test_parse_schedules_accepts_bare_list():
    schedules = parse_schedules([{"onTime": "08:00", "offTime": "09:00", "days": []}])

    assert len(schedules) == 1
    assert schedules[0].id == 1


def test_parse_schedules_respects_string_ids():
    schedules = parse_schedules(
        [
            {"onTime": "08:00", "offTime": "09:00"},
            {"id": "1", "onTime": "10:00", "offTime": "11:00"},
        ]
    )

    assert [schedule.id for schedule in schedules] == [2, 1]


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"schedules": "none"},
        {"schedules": [{"onTime": "25:00", "offTime": "09:00", "days": [1]}]},
        {"schedules": [1, 2]},
        {
            "schedules": [
                {"id": 3, "onTime": "08:00", "offTime": "09:00"},
                {"id": 3, "onTime": "10:00", "offTime": "11:00"},
            ]
        },
    ],
)
def test_parse_schedules_rejects_malformed_payloads(payload):
    with pytest.raises(ValueError):
        parse_schedules(payload)


def test_pull_processes_schedules_when_settings_fail(local):
    client = FakeClient(
        settings=DeviceTransportError("timed out"),
        schedules={"schedules": [{"onTime": "05:00", "offTime": "05:30", "days": [2]}]},
    )
    session = SyncSession(endpoint=client.endpoint)
    synchronizer = ConfigSynchronizer(client)

    result = synchronizer.pull(local, session)
    merged = synchronizer.apply(local, result)

    assert result.thresholds is None
    assert result.schedules is not None
    assert merged.thresholds == local.thresholds
    assert [schedule.on_time for schedule in merged.schedules] == ["05:00"]
    assert session.thresholds_synced is False
    assert session.schedules_synced is True
    assert len(session.errors) == 1
    assert session.errors[0].startswith("settings:")


def test_pull_keeps_local_schedules_when_schedules_are_malformed(local):
    client = FakeClient(
        settings={"maxCurrent": 10},
        schedules=DeviceResponseError("HTTP 500"),
    )
    synchronizer = ConfigSynchronizer(client)

    result = synchronizer.pull(local)
    merged = synchronizer.apply(local, result)

    assert merged.thresholds.current.max == 10
    assert merged.schedules == local.schedules
    assert result.errors == ["schedules: HTTP 500"]


def test_pull_replaces_schedule_list_wholesale(local):
    client = FakeClient(
        settings={},
        schedules={
            "schedules": [{"id": 2, "onTime": "19:00", "offTime": "20:00", "days": [4]}]
        },
    )
    synchronizer = ConfigSynchronizer(client)

    merged = synchronizer.apply(local, synchronizer.pull(local))

    assert merged.schedules == [
        Schedule(id=2, on_time="19:00", off_time="20:00", days=[4])
    ]


@pytest.mark.parametrize(
    ("moment", "expected"),
    [
        (datetime(2026, 10, 18, 12, 0), 0),
        (datetime(2026, 10, 19, 12, 0), 1),
        (datetime(2026, 10, 24, 12, 0), 6),
    ],
)
def test_weekday_index_counts_from_sunday(moment, expected):
    assert weekday_index(moment) == expected


def test_clock_push_sends_hour_minute_and_weekday():
    client = FakeClient()
    session = SyncSession(endpoint=client.endpoint)

    assert ClockSynchronizer(client).push(datetime(2026, 10, 18, 14, 5), session)
    assert client.time_calls == [(14, 5, 0)]
    assert session.clock_synced is True


@pytest.mark.parametrize("answer", [False, DeviceTransportError("refused")])
def test_clock_push_failure_is_reported_not_raised(answer):
    client = FakeClient(time_ok=answer)
    session = SyncSession(endpoint=client.endpoint)

    assert ClockSynchronizer(client).push(datetime(2026, 10, 18, 14, 5), session) is False
    assert session.clock_synced is False
    assert len(client.time_calls) == 1
    assert session.errors
