"""smartcb - discover, connect to and stay in sync with a SmartCB circuit breaker."""

from __future__ import annotations

from importlib.metadata import version

from .config import ScanningConfig, Settings, get_settings
from .core import ConnectionManager, classify
from .models import (
    ConnectionState,
    ConnectResult,
    DeviceConfig,
    DeviceEndpoint,
    Reading,
    ScanResult,
    Schedule,
    Thresholds,
)
from .storage import Database

__all__ = [
    "ConnectResult",
    "ConnectionManager",
    "ConnectionState",
    "Database",
    "DeviceConfig",
    "DeviceEndpoint",
    "Reading",
    "ScanResult",
    "ScanningConfig",
    "Schedule",
    "Settings",
    "Thresholds",
    "__version__",
    "classify",
    "get_settings",
]

__version__ = version("smartcb")
