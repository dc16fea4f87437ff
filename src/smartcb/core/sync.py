"""Configuration and clock synchronization with a connected breaker."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from smartcb.api import DeviceClient
from smartcb.config import ReconnectionConfig
from smartcb.errors import DeviceResponseError, DeviceTransportError
from smartcb.models import DeviceConfig, Schedule, SyncSession, Thresholds

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class DeviceSettings(BaseModel):
    """Threshold fields of ``GET /api/settings``.

    Every field is optional: ``None`` means the device did not report it,
    which is different from reporting zero.
    """

    model_config = {
        "extra": "ignore",
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    min_voltage: float | None = None
    max_voltage: float | None = None
    max_current: float | None = None
    protection_enabled: bool | None = None
    min_frequency: float | None = None
    max_frequency: float | None = None
    frequency_protection: bool | None = None
    min_power_factor: float | None = None
    power_factor_protection: bool | None = None
    max_energy: float | None = None
    energy_protection: bool | None = None


def _merge(local: M, updates: dict[str, Any]) -> M:
    present = {key: value for key, value in updates.items() if value is not None}
    return type(local).model_validate({**local.model_dump(), **present})


def reconcile_thresholds(local: Thresholds, settings: DeviceSettings) -> Thresholds:
    """Overlay device-reported values on ``local``.

    Fields the device omitted keep their local value. Raises
    ``ValidationError`` if the merged limits are inconsistent (min > max).
    """
    return Thresholds(
        voltage=_merge(
            local.voltage, {"min": settings.min_voltage, "max": settings.max_voltage}
        ),
        current=_merge(
            local.current,
            {"max": settings.max_current, "enabled": settings.protection_enabled},
        ),
        frequency=_merge(
            local.frequency,
            {
                "min": settings.min_frequency,
                "max": settings.max_frequency,
                "enabled": settings.frequency_protection,
            },
        ),
        power_factor=_merge(
            local.power_factor,
            {
                "min": settings.min_power_factor,
                "enabled": settings.power_factor_protection,
            },
        ),
        energy=_merge(
            local.energy,
            {"max": settings.max_energy, "enabled": settings.energy_protection},
        ),
    )


def parse_schedules(payload: Any) -> list[Schedule]:
    """Parse a ``GET /api/schedules`` body into schedules.

    Entries without an ``id`` get the lowest free positive ids in list order,
    so the same payload always yields the same ids. One bad entry rejects the
    whole list.
    """
    entries = payload.get("schedules") if isinstance(payload, dict) else payload
    if not isinstance(entries, list):
        raise ValueError("schedule payload has no 'schedules' list")
    if not all(isinstance(entry, dict) for entry in entries):
        raise ValueError("schedule entries must be objects")

    # explicit ids are validated (and coerced) before any id is handed out
    explicit: list[Schedule | None] = []
    used: set[int] = set()
    for entry in entries:
        if entry.get("id") is None:
            explicit.append(None)
            continue
        schedule = Schedule.model_validate(entry)
        if schedule.id in used:
            raise ValueError(f"duplicate schedule id: {schedule.id}")
        used.add(schedule.id)
        explicit.append(schedule)

    next_id = 1
    schedules: list[Schedule] = []
    for entry, parsed in zip(entries, explicit):
        if parsed is None:
            while next_id in used:
                next_id += 1
            parsed = Schedule.model_validate({**entry, "id": next_id})
            used.add(next_id)
        schedules.append(parsed)
    return schedules


@dataclass
class PullResult:
    thresholds: Thresholds | None = None
    schedules: list[Schedule] | None = None
    errors: list[str] = field(default_factory=list)


@dataclass
class PushResult:
    settings: bool = False
    schedules: bool = False
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.settings and self.schedules


class ConfigSynchronizer:
    def __init__(self, client: DeviceClient) -> None:
        self._client = client

    def pull(
        self, local: DeviceConfig, session: SyncSession | None = None
    ) -> PullResult:
        """Fetch settings and schedules; a failure in one does not stop the other."""
        result = PullResult()
        endpoint = self._client.endpoint

        try:
            settings = DeviceSettings.model_validate(self._client.get_settings())
            result.thresholds = reconcile_thresholds(local.thresholds, settings)
        except (DeviceTransportError, DeviceResponseError, ValueError) as exc:
            result.errors.append(f"settings: {exc}")
            logger.warning("Could not pull settings from %s: %s", endpoint, exc)
        else:
            logger.info("Settings synced from %s", endpoint)

        try:
            result.schedules = parse_schedules(self._client.get_schedules())
        except (DeviceTransportError, DeviceResponseError, ValueError) as exc:
            result.errors.append(f"schedules: {exc}")
            logger.warning("Could not pull schedules from %s: %s", endpoint, exc)
        else:
            logger.info(
                "Synced %d schedule(s) from %s", len(result.schedules), endpoint
            )

        if session is not None:
            session.thresholds_synced = result.thresholds is not None
            session.schedules_synced = result.schedules is not None
            session.errors.extend(result.errors)
        return result

    @staticmethod
    def apply(local: DeviceConfig, result: PullResult) -> DeviceConfig:
        """Fold a pull into the local configuration.

        Schedules are replaced as a whole list, never merged entry by entry.
        """
        return DeviceConfig(
            thresholds=result.thresholds
            if result.thresholds is not None
            else local.thresholds,
            schedules=list(result.schedules)
            if result.schedules is not None
            else list(local.schedules),
        )

    def push(
        self, config: DeviceConfig, reconnection: ReconnectionConfig | None = None
    ) -> PushResult:
        """Send local thresholds and schedules to the device."""
        result = PushResult()
        endpoint = self._client.endpoint

        try:
            result.settings = self._client.update_settings(
                config.thresholds,
                reconnect_delay=reconnection.delay if reconnection else None,
                reconnect_enabled=reconnection.enabled if reconnection else None,
            )
        except (DeviceTransportError, DeviceResponseError) as exc:
            result.errors.append(f"settings: {exc}")
        if not result.settings:
            logger.warning("Device at %s did not accept settings", endpoint)

        try:
            result.schedules = self._client.update_schedules(config.schedules)
        except (DeviceTransportError, DeviceResponseError) as exc:
            result.errors.append(f"schedules: {exc}")
        if not result.schedules:
            logger.warning("Device at %s did not accept schedules", endpoint)

        return result


def weekday_index(moment: datetime) -> int:
    """Weekday with 0 = Sunday, as the firmware counts."""
    return (moment.weekday() + 1) % 7


class ClockSynchronizer:
    """Push the wall-clock time to the device once per connection."""

    def __init__(self, client: DeviceClient) -> None:
        self._client = client

    def push(self, now: datetime | None = None, session: SyncSession | None = None) -> bool:
        now = now or datetime.now()
        day = weekday_index(now)
        try:
            success = self._client.set_time(now.hour, now.minute, day)
        except (DeviceTransportError, DeviceResponseError) as exc:
            logger.warning("Error syncing time to %s: %s", self._client.endpoint, exc)
            success = False
            if session is not None:
                session.errors.append(f"clock: {exc}")
        else:
            if success:
                logger.info(
                    "Time synced to %s: %02d:%02d day %d",
                    self._client.endpoint,
                    now.hour,
                    now.minute,
                    day,
                )
            else:
                logger.warning("Device at %s rejected time sync", self._client.endpoint)
                if session is not None:
                    session.errors.append("clock: device rejected time sync")

        if session is not None:
            session.clock_synced = success
        return success
