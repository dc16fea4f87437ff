"""Data models for SmartCB."""

from smartcb.models.connection import ConnectionState, ConnectResult, SyncSession
from smartcb.models.device import (
    DEFAULT_PORT,
    DeviceEndpoint,
    DeviceInfo,
    ProbeResult,
    ScanResult,
)
from smartcb.models.event import Event, EventStatistics, EventType
from smartcb.models.reading import Reading
from smartcb.models.thresholds import (
    CurrentThreshold,
    DeviceConfig,
    EnergyThreshold,
    FrequencyThreshold,
    PowerFactorThreshold,
    Schedule,
    Thresholds,
    VoltageThreshold,
)

__all__ = [
    "DEFAULT_PORT",
    "ConnectResult",
    "ConnectionState",
    "CurrentThreshold",
    "DeviceConfig",
    "DeviceEndpoint",
    "DeviceInfo",
    "EnergyThreshold",
    "Event",
    "EventStatistics",
    "EventType",
    "FrequencyThreshold",
    "PowerFactorThreshold",
    "ProbeResult",
    "Reading",
    "ScanResult",
    "Schedule",
    "SyncSession",
    "Thresholds",
    "VoltageThreshold",
]
