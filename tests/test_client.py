"""Tests for the device HTTP client against the mock breaker."""

from __future__ import annotations

import pytest

from smartcb.api import DeviceClient
from smartcb.errors import DeviceResponseError, DeviceTransportError
from smartcb.models import DeviceEndpoint, Schedule, Thresholds


def test_get_info(device_endpoint):
    with DeviceClient(device_endpoint) as client:
        info = client.get_info()

    assert info.model == "SmartCB-ESP32"
    assert info.firmware_version == "4.0.0"


def test_get_status_uses_local_timestamp(device_endpoint):
    with DeviceClient(device_endpoint) as client:
        reading = client.get_status()

    assert 200 < reading.voltage < 240
    assert reading.relay_state is True
    assert reading.timestamp.year >= 2024


def test_relay_command_reaches_device(mock_device, device_endpoint):
    with DeviceClient(device_endpoint) as client:
        assert client.set_relay(False) is True

    assert mock_device.relay_state is False


def test_update_settings_sends_device_field_names(mock_device, device_endpoint):
    thresholds = Thresholds.model_validate(
        {"current": {"max": 12, "enabled": False}}
    )

    with DeviceClient(device_endpoint) as client:
        assert client.update_settings(thresholds, reconnect_delay=45) is True

    assert mock_device.settings["maxCurrent"] == 12
    assert mock_device.settings["protectionEnabled"] is False
    assert mock_device.settings["voltageProtection"] is True
    assert mock_device.settings["autoResetDelay"] == 45


def test_update_schedules_round_trips(mock_device, device_endpoint):
    schedules = [Schedule(id=4, on_time="06:15", off_time="06:45", days=[1, 2])]

    with DeviceClient(device_endpoint) as client:
        assert client.update_schedules(schedules) is True
        payload = client.get_schedules()

    assert payload == {
        "schedules": [
            {
                "id": 4,
                "onTime": "06:15",
                "offTime": "06:45",
                "days": [1, 2],
                "enabled": True,
            }
        ]
    }


def test_set_time(mock_device, device_endpoint):
    with DeviceClient(device_endpoint) as client:
        assert client.set_time(7, 30, 3) is True

    assert mock_device.clock == {"hour": 7, "minute": 30, "day": 3}


def test_error_status_raises_response_error(mock_device, device_endpoint):
    mock_device.failing.add("/api/settings")

    with DeviceClient(device_endpoint) as client, pytest.raises(DeviceResponseError):
        client.get_settings()


def test_refused_connection_raises_transport_error(closed_port):
    endpoint = DeviceEndpoint(host="127.0.0.1", port=str(closed_port))

    with DeviceClient(endpoint, timeout=0.5) as client, pytest.raises(
        DeviceTransportError
    ):
        client.get_info()


def test_silent_device_times_out(silent_port):
    endpoint = DeviceEndpoint(host="127.0.0.1", port=str(silent_port))

    with DeviceClient(endpoint, timeout=0.2) as client, pytest.raises(
        DeviceTransportError, match="timed out"
    ):
        client.get_info()
