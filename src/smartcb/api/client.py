"""HTTP client for the SmartCB firmware API."""

from __future__ import annotations

import logging
from typing import Any

import requests

from smartcb.errors import DeviceResponseError, DeviceTransportError
from smartcb.models import DeviceEndpoint, DeviceInfo, Reading, Schedule, Thresholds

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 3.0

INFO_PATH = "/api/info"
STATUS_PATH = "/api/status"
SETTINGS_PATH = "/api/settings"
SCHEDULES_PATH = "/api/schedules"
TIME_PATH = "/api/time"
RELAY_PATH = "/api/relay"


def create_session() -> requests.Session:
    """Create a plain session; the device API is retried by callers, not here."""
    session = requests.Session()
    session.headers.update({"Accept": "application/json"})
    return session


class DeviceClient:
    """One method per firmware endpoint.

    Raises :class:`DeviceTransportError` when the device cannot be reached and
    :class:`DeviceResponseError` when it answers with an error status or a body
    that is not a JSON object.
    """

    def __init__(
        self,
        endpoint: DeviceEndpoint,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self._session = session or create_session()

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> DeviceClient:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def _request(
        self, method: str, path: str, payload: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        url = f"{self.endpoint.base_url}{path}"
        try:
            response = self._session.request(
                method, url, json=payload, timeout=self.timeout
            )
        except requests.Timeout as exc:
            raise DeviceTransportError(f"{method} {url} timed out") from exc
        except requests.RequestException as exc:
            raise DeviceTransportError(f"{method} {url} failed: {exc}") from exc

        if not response.ok:
            raise DeviceResponseError(
                f"{method} {url} returned HTTP {response.status_code}"
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise DeviceResponseError(f"{method} {url} returned invalid JSON") from exc
        if not isinstance(body, dict):
            raise DeviceResponseError(
                f"{method} {url} returned {type(body).__name__}, expected an object"
            )
        return body

    def _command(self, path: str, payload: dict[str, Any]) -> bool:
        body = self._request("POST", path, payload)
        return body.get("success") is True

    def get_info(self) -> DeviceInfo:
        body = self._request("GET", INFO_PATH)
        try:
            return DeviceInfo.model_validate(body)
        except ValueError as exc:
            raise DeviceResponseError(f"unexpected /api/info body: {exc}") from exc

    def get_status(self) -> Reading:
        body = self._request("GET", STATUS_PATH)
        # the device reports uptime millis here, not wall-clock time
        body.pop("timestamp", None)
        try:
            return Reading.model_validate(body)
        except ValueError as exc:
            raise DeviceResponseError(f"unexpected /api/status body: {exc}") from exc

    def get_settings(self) -> dict[str, Any]:
        return self._request("GET", SETTINGS_PATH)

    def update_settings(
        self,
        thresholds: Thresholds,
        *,
        reconnect_delay: int | None = None,
        reconnect_enabled: bool | None = None,
    ) -> bool:
        payload: dict[str, Any] = {
            "minVoltage": thresholds.voltage.min,
            "maxVoltage": thresholds.voltage.max,
            "maxCurrent": thresholds.current.max,
            "protectionEnabled": thresholds.current.enabled,
            "minFrequency": thresholds.frequency.min,
            "maxFrequency": thresholds.frequency.max,
            "frequencyProtection": thresholds.frequency.enabled,
            "minPowerFactor": thresholds.power_factor.min,
            "powerFactorProtection": thresholds.power_factor.enabled,
            "maxEnergy": thresholds.energy.max,
            "energyProtection": thresholds.energy.enabled,
            # the firmware refuses to run with voltage protection off
            "voltageProtection": True,
        }
        if reconnect_delay is not None:
            payload["autoResetDelay"] = reconnect_delay
        if reconnect_enabled is not None:
            payload["autoReconnectEnabled"] = reconnect_enabled
        return self._command(SETTINGS_PATH, payload)

    def get_schedules(self) -> dict[str, Any]:
        return self._request("GET", SCHEDULES_PATH)

    def update_schedules(self, schedules: list[Schedule]) -> bool:
        payload = {
            "schedules": [
                schedule.model_dump(mode="json", by_alias=True)
                for schedule in schedules
            ]
        }
        return self._command(SCHEDULES_PATH, payload)

    def set_time(self, hour: int, minute: int, day: int) -> bool:
        return self._command(TIME_PATH, {"hour": hour, "minute": minute, "day": day})

    def set_relay(self, state: bool) -> bool:
        logger.info("Switching relay %s at %s", "on" if state else "off", self.endpoint)
        return self._command(RELAY_PATH, {"state": state})
