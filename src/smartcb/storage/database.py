from __future__ import annotations

import json
import tomllib
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from smartcb.models import DeviceConfig, DeviceEndpoint, Event, ProbeResult, ScanResult

CONFIG_FILE = "config.json"
ENDPOINT_FILE = "device.toml"
SCAN_DIR = "scan"
CURRENT_SCAN_FILE = "current.json"
EVENTS_FILE = "events.json"
# oldest entries beyond this are dropped
MAX_EVENTS = 500


def _render_endpoint_toml(endpoint: DeviceEndpoint) -> str:
    lines = [
        "# SmartCB device this machine last connected to",
        "",
        "[device]",
        f"host = {json.dumps(endpoint.host)}",
        f"port = {json.dumps(endpoint.port)}",
        "",
    ]
    return "\n".join(lines)


class Database:
    """Local store for device configuration, the active endpoint and scans."""

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir
        self._scan_dir = data_dir / SCAN_DIR
        self._config_path = data_dir / CONFIG_FILE
        self._endpoint_path = data_dir / ENDPOINT_FILE
        self._current_scan_path = self._scan_dir / CURRENT_SCAN_FILE
        self._events_path = data_dir / EVENTS_FILE

    @property
    def path(self) -> Path:
        return self._data_dir

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def endpoint_path(self) -> Path:
        return self._endpoint_path

    @property
    def current_scan_path(self) -> Path:
        return self._current_scan_path

    @property
    def events_path(self) -> Path:
        return self._events_path

    def ensure_dirs(self) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._scan_dir.mkdir(parents=True, exist_ok=True)

    def init(self) -> None:
        self.ensure_dirs()
        if not self._config_path.exists():
            self.save_config(DeviceConfig())

    def load_config(self) -> DeviceConfig:
        if not self._config_path.exists():
            return DeviceConfig()

        try:
            data = json.loads(self._config_path.read_text())
        except json.JSONDecodeError as exc:
            raise ValueError(
                f"Invalid JSON in config file: {self._config_path}\n{exc}"
            ) from exc

        try:
            return DeviceConfig.model_validate(data)
        except ValidationError as exc:
            raise ValueError(
                f"Invalid device config file: {self._config_path}\n{exc}"
            ) from exc

    def save_config(self, config: DeviceConfig) -> None:
        self.ensure_dirs()
        self._config_path.write_text(
            json.dumps(config.model_dump(mode="json"), indent=2) + "\n"
        )

    def load_endpoint(self) -> DeviceEndpoint | None:
        if not self._endpoint_path.exists():
            return None

        try:
            with self._endpoint_path.open("rb") as handle:
                data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(
                f"Invalid TOML in device file: {self._endpoint_path}\n{exc}"
            ) from exc

        try:
            return DeviceEndpoint.model_validate(data.get("device", {}))
        except ValidationError as exc:
            raise ValueError(
                f"Invalid device file: {self._endpoint_path}\n{exc}"
            ) from exc

    def save_endpoint(self, endpoint: DeviceEndpoint) -> None:
        self.ensure_dirs()
        self._endpoint_path.write_text(_render_endpoint_toml(endpoint))

    def clear_endpoint(self) -> bool:
        if not self._endpoint_path.exists():
            return False
        self._endpoint_path.unlink()
        return True

    def save_scan(self, devices: list[ProbeResult], candidates: int) -> ScanResult:
        scan = ScanResult(
            scan_timestamp=datetime.now(timezone.utc),
            candidates=candidates,
            devices=devices,
        )
        self.ensure_dirs()
        with self._current_scan_path.open("w") as handle:
            json.dump(scan.model_dump(mode="json"), handle, indent=2)
        return scan

    def load_current_scan(self) -> ScanResult | None:
        if not self._current_scan_path.exists():
            return None

        with self._current_scan_path.open() as handle:
            data = json.load(handle)

        return ScanResult.model_validate(data)

    def load_events(self) -> list[Event]:
        """Event log, newest first."""
        if not self._events_path.exists():
            return []

        try:
            data = json.loads(self._events_path.read_text())
            return [Event.model_validate(item) for item in data]
        except (json.JSONDecodeError, TypeError, ValidationError) as exc:
            raise ValueError(f"Invalid events file: {self._events_path}\n{exc}") from exc

    def save_events(self, events: list[Event]) -> None:
        self.ensure_dirs()
        data = [event.model_dump(mode="json") for event in events[:MAX_EVENTS]]
        self._events_path.write_text(json.dumps(data, indent=2) + "\n")

    def clear_events(self) -> bool:
        if not self._events_path.exists():
            return False
        self._events_path.unlink()
        return True
