"""Protection thresholds and on/off schedules."""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

_CAMEL = {"alias_generator": to_camel, "populate_by_name": True}

_CLOCK_RE = re.compile(r"^(?:[01]\d|2[0-3]):[0-5]\d$")


class VoltageThreshold(BaseModel):
    model_config = {"frozen": True, "extra": "forbid", **_CAMEL}

    min: float = 180.0
    max: float = 250.0
    # factory "normal" band, narrower than the protection band
    normal_min: float = 210.0
    normal_max: float = 230.0

    @model_validator(mode="after")
    def check_bounds(self) -> VoltageThreshold:
        if self.min > self.max:
            raise ValueError(f"voltage min {self.min} exceeds max {self.max}")
        if self.normal_min > self.normal_max:
            raise ValueError(
                f"voltage normal_min {self.normal_min} exceeds normal_max {self.normal_max}"
            )
        return self


class CurrentThreshold(BaseModel):
    model_config = {"frozen": True, "extra": "forbid", **_CAMEL}

    max: float = Field(default=16.0, gt=0)
    enabled: bool = True


class FrequencyThreshold(BaseModel):
    model_config = {"frozen": True, "extra": "forbid", **_CAMEL}

    min: float = 49.0
    max: float = 51.0
    enabled: bool = True

    @model_validator(mode="after")
    def check_bounds(self) -> FrequencyThreshold:
        if self.min > self.max:
            raise ValueError(f"frequency min {self.min} exceeds max {self.max}")
        return self


class PowerFactorThreshold(BaseModel):
    model_config = {"frozen": True, "extra": "forbid", **_CAMEL}

    min: float = Field(default=0.85, ge=0, le=1)
    enabled: bool = True


class EnergyThreshold(BaseModel):
    model_config = {"frozen": True, "extra": "forbid", **_CAMEL}

    max: float = Field(default=100.0, gt=0)
    enabled: bool = True


class Thresholds(BaseModel):
    """Safe operating limits, one sub-limit per electrical dimension.

    The defaults double as the fallback table used before any configuration
    has been pulled from a device.
    """

    model_config = {"frozen": True, "extra": "forbid", **_CAMEL}

    voltage: VoltageThreshold = Field(default_factory=VoltageThreshold)
    current: CurrentThreshold = Field(default_factory=CurrentThreshold)
    frequency: FrequencyThreshold = Field(default_factory=FrequencyThreshold)
    power_factor: PowerFactorThreshold = Field(default_factory=PowerFactorThreshold)
    energy: EnergyThreshold = Field(default_factory=EnergyThreshold)


class Schedule(BaseModel):
    """Recurring daily on/off program. Days use 0 = Sunday."""

    model_config = {"frozen": True, "extra": "ignore", **_CAMEL}

    id: int = Field(ge=0)
    on_time: str
    off_time: str
    days: list[int] = Field(default_factory=list)
    enabled: bool = True

    @field_validator("on_time", "off_time")
    @classmethod
    def check_clock(cls, value: str) -> str:
        if not _CLOCK_RE.match(value):
            raise ValueError(f"expected HH:MM (24h), got {value!r}")
        return value

    @field_validator("days")
    @classmethod
    def check_days(cls, value: list[int]) -> list[int]:
        for day in value:
            if not 0 <= day <= 6:
                raise ValueError(f"weekday index out of range: {day}")
        return sorted(set(value))


class DeviceConfig(BaseModel):
    """Configuration kept locally and reconciled with the device."""

    model_config = {"extra": "forbid"}

    thresholds: Thresholds = Field(default_factory=Thresholds)
    schedules: list[Schedule] = Field(default_factory=list)
