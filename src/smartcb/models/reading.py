from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class Reading(BaseModel):
    """One electrical sample as reported by ``GET /api/status``.

    ``timestamp`` is assigned on receipt; the firmware only knows its uptime.
    """

    model_config = {
        "frozen": True,
        "extra": "ignore",
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    voltage: float = 0.0
    current: float = 0.0
    power: float = 0.0
    energy: float = 0.0
    frequency: float = 0.0
    power_factor: float = 0.0
    apparent_power: float = 0.0
    reactive_power: float = 0.0
    relay_state: bool = False
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    protection_triggered: bool | None = None
    protection_reason: str | None = None
    manual_mode: bool | None = None
    power_outage: bool | None = None
    reconnection_pending: bool | None = None
