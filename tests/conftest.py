from __future__ import annotations

import socket
from pathlib import Path

import pytest

from smartcb.config import (
    DatabaseConfig,
    DeviceConnectionConfig,
    ScanningConfig,
    Settings,
    get_settings,
    write_settings,
)
from smartcb.core import MockBreakerDevice
from smartcb.models import DeviceEndpoint


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.delenv("SMARTCB_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_device():
    device = MockBreakerDevice()
    device.start()
    yield device
    device.stop()


@pytest.fixture
def device_endpoint(mock_device: MockBreakerDevice) -> DeviceEndpoint:
    return DeviceEndpoint(host="127.0.0.1", port=str(mock_device.port))


@pytest.fixture
def closed_port() -> int:
    """A localhost port nothing listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def silent_port():
    """A localhost port that accepts connections but never answers."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        sock.listen(16)
        yield sock.getsockname()[1]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database=DatabaseConfig(path=str(tmp_path / "data")),
        device=DeviceConnectionConfig(timeout=1.0),
        scanning=ScanningConfig(timeout=0.5, scan_local_subnet=False),
    )


@pytest.fixture
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, settings: Settings) -> Path:
    config_path = tmp_path / "config.toml"
    write_settings(settings, config_path)
    monkeypatch.setenv("SMARTCB_CONFIG", str(config_path))
    get_settings.cache_clear()
    return Path(settings.database.path)
