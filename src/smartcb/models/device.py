"""Device addressing and discovery models."""

from __future__ import annotations

import ipaddress
from datetime import datetime

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_PORT = "80"


class DeviceEndpoint(BaseModel):
    """Address of a candidate or connected breaker."""

    model_config = {"frozen": True, "extra": "forbid"}

    host: str
    port: str = DEFAULT_PORT

    @field_validator("host")
    @classmethod
    def check_host(cls, value: str) -> str:
        value = value.strip()
        try:
            ipaddress.IPv4Address(value)
        except ValueError as exc:
            raise ValueError(f"not a dotted-quad IPv4 address: {value!r}") from exc
        return value

    @field_validator("port")
    @classmethod
    def check_port(cls, value: str) -> str:
        value = value.strip()
        if not value.isdigit() or not 1 <= int(value) <= 65535:
            raise ValueError(f"invalid port: {value!r}")
        return value

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def sort_key(self) -> tuple[int, int]:
        return int(ipaddress.IPv4Address(self.host)), int(self.port)

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class DeviceInfo(BaseModel):
    """Identification block served by ``GET /api/info``."""

    model_config = {
        "extra": "ignore",
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    model: str
    name: str | None = None
    firmware_version: str | None = None
    mac: str | None = None

    def matches_family(self, family: str) -> bool:
        return family.lower() in self.model.lower()


class ProbeResult(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    endpoint: DeviceEndpoint
    present: bool
    model: str | None = None


class ScanResult(BaseModel):
    """Outcome of one scan; replaced by the next one."""

    model_config = {"extra": "forbid"}

    scan_timestamp: datetime
    candidates: int
    devices: list[ProbeResult] = Field(default_factory=list)

    @property
    def endpoints(self) -> set[DeviceEndpoint]:
        return {device.endpoint for device in self.devices}
