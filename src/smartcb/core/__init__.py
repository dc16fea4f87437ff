from __future__ import annotations

from .connection import ConnectionManager
from .evaluator import Classification, Status, classify
from .events import (
    EventRange,
    EventRecorder,
    detect_events,
    event_statistics,
    filter_events,
    range_start,
)
from .mock_device import MockBreakerDevice, run_mock_device
from .probe import probe
from .scanner import build_candidates, detect_local_ip, detect_local_network, scan
from .sync import (
    ClockSynchronizer,
    ConfigSynchronizer,
    DeviceSettings,
    PullResult,
    PushResult,
    parse_schedules,
    reconcile_thresholds,
    weekday_index,
)

__all__ = [
    "Classification",
    "ClockSynchronizer",
    "ConfigSynchronizer",
    "ConnectionManager",
    "DeviceSettings",
    "EventRange",
    "EventRecorder",
    "MockBreakerDevice",
    "PullResult",
    "PushResult",
    "Status",
    "build_candidates",
    "classify",
    "detect_local_ip",
    "detect_events",
    "detect_local_network",
    "event_statistics",
    "filter_events",
    "parse_schedules",
    "probe",
    "range_start",
    "reconcile_thresholds",
    "run_mock_device",
    "scan",
    "weekday_index",
]
