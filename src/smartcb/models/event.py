"""Protection events derived from successive readings."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from .reading import Reading


class EventType(str, Enum):
    MANUAL_ON = "manual_on"
    MANUAL_OFF = "manual_off"
    OUTAGE = "outage"
    RESTORE = "restore"
    OVERVOLTAGE = "overvoltage"
    UNDERVOLTAGE = "undervoltage"
    OVERLOAD = "overload"
    UNDERLOAD = "underload"
    FREQUENCY_MIN = "frequency_min"
    FREQUENCY_MAX = "frequency_max"
    POWER_FACTOR_MIN = "power_factor_min"


class Event(BaseModel):
    """One entry of the event log.

    ``duration`` is only set on outages, once the matching restore is seen.
    """

    model_config = {"extra": "forbid"}

    id: str
    type: EventType
    timestamp: datetime
    description: str
    reading: Reading | None = None
    duration: float | None = None


class EventStatistics(BaseModel):
    model_config = {"frozen": True}

    total_events: int = 0
    total_outages: int = 0
    average_outage_duration: float = 0.0
    total_downtime: float = 0.0
