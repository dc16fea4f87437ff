from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from .device import DeviceEndpoint, DeviceInfo


class ConnectionState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


@dataclass
class SyncSession:
    """Bookkeeping for one connect attempt.

    Owned by the connection manager; synchronizers record their outcome here
    and never keep a reference after returning.
    """

    endpoint: DeviceEndpoint
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    device_info: DeviceInfo | None = None
    thresholds_synced: bool = False
    schedules_synced: bool = False
    clock_synced: bool = False
    errors: list[str] = field(default_factory=list)


@dataclass
class ConnectResult:
    state: ConnectionState
    endpoint: DeviceEndpoint
    device_info: DeviceInfo | None = None
    thresholds_synced: bool = False
    schedules_synced: bool = False
    clock_synced: bool = False
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    @property
    def partial_sync_failure(self) -> bool:
        return self.ok and not (
            self.thresholds_synced and self.schedules_synced and self.clock_synced
        )

    @classmethod
    def from_session(
        cls, session: SyncSession, state: ConnectionState
    ) -> ConnectResult:
        return cls(
            state=state,
            endpoint=session.endpoint,
            device_info=session.device_info,
            thresholds_synced=session.thresholds_synced,
            schedules_synced=session.schedules_synced,
            clock_synced=session.clock_synced,
            errors=list(session.errors),
        )
