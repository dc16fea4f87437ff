"""Tests for data models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from smartcb.models import (
    DeviceConfig,
    DeviceEndpoint,
    DeviceInfo,
    FrequencyThreshold,
    Reading,
    Schedule,
    Thresholds,
    VoltageThreshold,
)


def test_endpoint_defaults_to_port_80():
    endpoint = DeviceEndpoint(host="192.168.1.100")

    assert endpoint.port == "80"
    assert endpoint.base_url == "http://192.168.1.100:80"
    assert str(endpoint) == "192.168.1.100:80"


@pytest.mark.parametrize("host", ["esp32.local", "300.1.1.1", "", "10.0.0"])
def test_endpoint_rejects_non_ipv4_hosts(host):
    with pytest.raises(ValidationError):
        DeviceEndpoint(host=host)


@pytest.mark.parametrize("port", ["0", "65536", "http", "-1"])
def test_endpoint_rejects_bad_ports(port):
    with pytest.raises(ValidationError):
        DeviceEndpoint(host="10.0.0.1", port=port)


def test_endpoints_are_hashable_and_immutable():
    a = DeviceEndpoint(host="10.0.0.2")
    b = DeviceEndpoint(host="10.0.0.2", port="80")

    assert {a, b} == {a}
    with pytest.raises(ValidationError):
        a.host = "10.0.0.3"


def test_device_info_family_match_is_case_insensitive():
    info = DeviceInfo.model_validate({"model": "SmartCB-esp32", "firmwareVersion": "4.0"})

    assert info.matches_family("ESP32")
    assert info.firmware_version == "4.0"
    assert not info.matches_family("ESP8266")


def test_default_thresholds_match_factory_table():
    thresholds = Thresholds()

    assert (thresholds.voltage.min, thresholds.voltage.max) == (180, 250)
    assert thresholds.current.max == 16
    assert (thresholds.frequency.min, thresholds.frequency.max) == (49.0, 51.0)
    assert thresholds.power_factor.min == 0.85


def test_thresholds_reject_inverted_limits():
    with pytest.raises(ValidationError):
        VoltageThreshold(min=250, max=200)
    with pytest.raises(ValidationError):
        FrequencyThreshold(min=51, max=49)


def test_schedule_accepts_camel_case_and_normalizes_days():
    schedule = Schedule.model_validate(
        {"id": 1, "onTime": "07:30", "offTime": "23:00", "days": [5, 1, 1, 3]}
    )

    assert schedule.on_time == "07:30"
    assert schedule.days == [1, 3, 5]
    assert schedule.enabled is True


@pytest.mark.parametrize("clock", ["24:00", "7:30", "12:60", "noon"])
def test_schedule_rejects_malformed_times(clock):
    with pytest.raises(ValidationError):
        Schedule(id=1, on_time=clock, off_time="22:00")


def test_schedule_rejects_out_of_range_days():
    with pytest.raises(ValidationError):
        Schedule(id=1, on_time="08:00", off_time="22:00", days=[0, 7])


def test_reading_parses_device_keys():
    reading = Reading.model_validate(
        {
            "voltage": 221.5,
            "current": 1.4,
            "powerFactor": 0.95,
            "relayState": True,
            "protectionTriggered": True,
            "protectionReason": "overcurrent",
        }
    )

    assert reading.power_factor == 0.95
    assert reading.relay_state is True
    assert reading.protection_reason == "overcurrent"
    assert reading.power_outage is None


def test_device_config_defaults():
    config = DeviceConfig()

    assert config.thresholds == Thresholds()
    assert config.schedules == []
