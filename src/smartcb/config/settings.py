from __future__ import annotations

import ipaddress
import json
import os
import tomllib
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from .paths import default_config_path, default_data_dir, expand_path

CONFIG_ENV_VAR = "SMARTCB_CONFIG"

# Addresses SmartCB units historically end up on (DHCP reservations from the
# setup guide, and the firmware's own access point).
COMMON_DEVICE_HOSTS = (
    "192.168.1.100",
    "192.168.0.100",
    "192.168.4.1",
    "192.168.1.10",
    "192.168.0.10",
    "10.0.0.100",
)


def _check_port(value: str) -> str:
    if not value.isdigit() or not 1 <= int(value) <= 65535:
        raise ValueError(f"invalid port: {value!r}")
    return value


class DatabaseConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    path: str = Field(default_factory=lambda: str(default_data_dir()))


class DeviceConnectionConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    host: str = "192.168.4.1"
    port: str = "80"
    timeout: float = Field(default=3.0, gt=0)

    @field_validator("host")
    @classmethod
    def check_host(cls, value: str) -> str:
        ipaddress.IPv4Address(value)
        return value

    @field_validator("port")
    @classmethod
    def check_port(cls, value: str) -> str:
        return _check_port(value)


class ScanningConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    port: str = "80"
    timeout: float = Field(default=1.0, gt=0)
    parallel_probes: int = Field(default=24, ge=1, le=255)
    model_family: str = "ESP32"
    extra_candidates: list[str] = Field(default_factory=list)
    scan_local_subnet: bool = True
    full_subnet: bool = False
    max_hosts: int = Field(default=254, ge=1, le=65534)

    @field_validator("port")
    @classmethod
    def check_port(cls, value: str) -> str:
        return _check_port(value)


class ReconnectionConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    delay: int = Field(default=30, ge=0)
    enabled: bool = True


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    device: DeviceConnectionConfig = Field(default_factory=DeviceConnectionConfig)
    scanning: ScanningConfig = Field(default_factory=ScanningConfig)
    reconnection: ReconnectionConfig = Field(default_factory=ReconnectionConfig)


def resolve_config_path(allow_missing: bool = False) -> tuple[Path, bool]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = expand_path(env_path)
        if not allow_missing and not path.exists():
            raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
        return path, path.exists()

    path = default_config_path()
    return path, path.exists()


def load_settings(path: Path) -> Settings:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in config file: {path}\n{exc}") from exc

    try:
        return Settings.model_validate(data or {})
    except ValidationError as exc:
        raise ValueError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    path, exists = resolve_config_path(allow_missing=False)
    if exists:
        return load_settings(path)
    return Settings()


def data_dir_from_settings(settings: Settings) -> Path:
    return expand_path(settings.database.path)


def _toml_value(value: object) -> str:
    # JSON scalars and arrays of strings are valid TOML literals
    if isinstance(value, bool):
        return "true" if value else "false"
    return json.dumps(value)


def render_settings_toml(settings: Settings) -> str:
    lines = ["# SmartCB configuration", ""]
    for section, model in (
        ("database", settings.database),
        ("device", settings.device),
        ("scanning", settings.scanning),
        ("reconnection", settings.reconnection),
    ):
        lines.append(f"[{section}]")
        for key, value in model.model_dump().items():
            lines.append(f"{key} = {_toml_value(value)}")
        lines.append("")
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))
