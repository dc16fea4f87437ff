"""Tests for internal modules."""

from __future__ import annotations

import pytest

from smartcb.config import (
    ReconnectionConfig,
    ScanningConfig,
    Settings,
    get_settings,
    load_settings,
    write_settings,
)
from smartcb.models import (
    CurrentThreshold,
    DeviceConfig,
    DeviceEndpoint,
    ProbeResult,
    Schedule,
    Thresholds,
)
from smartcb.storage import Database
from smartcb.utils.redaction import Redactor


def test_config_roundtrip(tmp_path):
    path = tmp_path / "config.toml"
    settings = Settings(
        scanning=ScanningConfig(
            port="8080", extra_candidates=["10.0.0.7"], full_subnet=True
        ),
        reconnection=ReconnectionConfig(delay=45, enabled=False),
    )
    write_settings(settings, path)

    loaded = load_settings(path)
    assert loaded == settings


def test_invalid_config_is_reported(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[scanning]\nport = \"http\"\n")

    with pytest.raises(ValueError, match="Invalid config file"):
        load_settings(path)


def test_missing_config_env_file_is_an_error(tmp_path, monkeypatch):
    monkeypatch.setenv("SMARTCB_CONFIG", str(tmp_path / "nope.toml"))

    with pytest.raises(FileNotFoundError):
        get_settings()


def test_defaults_without_config_file():
    settings = get_settings()

    assert settings.device.host == "192.168.4.1"
    assert settings.scanning.timeout == 1.0
    assert settings.reconnection.delay == 30


def test_device_config_roundtrip(tmp_path):
    db = Database(tmp_path)
    assert db.load_config() == DeviceConfig()

    config = DeviceConfig(
        thresholds=Thresholds(current=CurrentThreshold(max=10.0)),
        schedules=[Schedule(id=1, on_time="07:00", off_time="19:30", days=[1, 3])],
    )
    db.save_config(config)

    assert db.load_config() == config


def test_corrupt_device_config_is_reported(tmp_path):
    db = Database(tmp_path)
    db.ensure_dirs()
    db.config_path.write_text("{not json")

    with pytest.raises(ValueError, match="Invalid JSON"):
        db.load_config()


def test_endpoint_save_and_clear(tmp_path):
    db = Database(tmp_path)
    endpoint = DeviceEndpoint(host="192.168.1.100", port="8080")

    assert db.load_endpoint() is None
    db.save_endpoint(endpoint)
    assert db.load_endpoint() == endpoint

    assert db.clear_endpoint() is True
    assert db.clear_endpoint() is False
    assert db.load_endpoint() is None


def test_scan_roundtrip(tmp_path):
    db = Database(tmp_path)
    found = [
        ProbeResult(
            endpoint=DeviceEndpoint(host="192.168.1.100"),
            present=True,
            model="SmartCB-ESP32",
        )
    ]
    db.save_scan(found, candidates=9)

    result = db.load_current_scan()
    assert result is not None
    assert result.candidates == 9
    assert result.devices == found


def test_init_creates_layout(tmp_path):
    db = Database(tmp_path / "data")
    db.init()

    assert db.config_path.exists()
    assert db.current_scan_path.parent.is_dir()


def test_redactor_hides_network_prefix():
    redactor = Redactor()

    assert redactor.redact_ip("192.168.1.100") == "x.x.x.100"
    assert Redactor(enabled=False).redact_ip("10.0.0.1") == "10.0.0.1"
