"""Event log: breaches, outages and relay changes seen in successive readings."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum

from smartcb.models import Event, EventStatistics, EventType, Reading, Thresholds
from smartcb.storage import Database

logger = logging.getLogger(__name__)

# below this the supply is considered gone
OUTAGE_VOLTAGE = 100.0
UNDERLOAD_CURRENT = 0.1
# power factor readings are noise at very low load
POWER_FACTOR_MIN_CURRENT = 0.5
STATISTICS_WINDOW = timedelta(days=30)


class EventRange(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


def _event(kind: EventType, reading: Reading, description: str) -> Event:
    millis = int(reading.timestamp.timestamp() * 1000)
    return Event(
        id=f"evt-{millis}-{kind.value}",
        type=kind,
        timestamp=reading.timestamp,
        description=description,
        reading=reading,
    )


def detect_events(
    reading: Reading, previous: Reading | None, thresholds: Thresholds
) -> list[Event]:
    """Events raised by ``reading``.

    Outage, restore and relay changes are only seen with a ``previous`` reading.
    """
    events: list[Event] = []

    voltage = thresholds.voltage
    if reading.voltage > voltage.max:
        events.append(
            _event(
                EventType.OVERVOLTAGE,
                reading,
                f"High voltage detected: {reading.voltage:.1f}V (Max: {voltage.max:g}V)",
            )
        )
    elif 0 < reading.voltage < voltage.min:
        events.append(
            _event(
                EventType.UNDERVOLTAGE,
                reading,
                f"Low voltage detected: {reading.voltage:.1f}V (Min: {voltage.min:g}V)",
            )
        )

    current = thresholds.current
    if current.enabled and reading.current > current.max:
        events.append(
            _event(
                EventType.OVERLOAD,
                reading,
                f"Overload detected: {reading.current:.2f}A (Max: {current.max:g}A)",
            )
        )
    elif 0 < reading.current < UNDERLOAD_CURRENT and reading.voltage > 0:
        events.append(
            _event(
                EventType.UNDERLOAD,
                reading,
                f"Very low current: {reading.current:.3f}A",
            )
        )

    if previous is not None:
        if previous.voltage > OUTAGE_VOLTAGE and reading.voltage < OUTAGE_VOLTAGE:
            events.append(_event(EventType.OUTAGE, reading, "Power outage detected"))
        elif previous.voltage < OUTAGE_VOLTAGE and reading.voltage > OUTAGE_VOLTAGE:
            events.append(_event(EventType.RESTORE, reading, "Power restored"))

    frequency = thresholds.frequency
    if frequency.enabled:
        if reading.frequency > frequency.max:
            events.append(
                _event(
                    EventType.FREQUENCY_MAX,
                    reading,
                    f"High frequency: {reading.frequency:.1f}Hz "
                    f"(Max: {frequency.max:g}Hz)",
                )
            )
        elif 0 < reading.frequency < frequency.min:
            events.append(
                _event(
                    EventType.FREQUENCY_MIN,
                    reading,
                    f"Low frequency: {reading.frequency:.1f}Hz "
                    f"(Min: {frequency.min:g}Hz)",
                )
            )

    power_factor = thresholds.power_factor
    if (
        power_factor.enabled
        and 0 < reading.power_factor < power_factor.min
        and reading.current > POWER_FACTOR_MIN_CURRENT
    ):
        events.append(
            _event(
                EventType.POWER_FACTOR_MIN,
                reading,
                f"Low power factor: {reading.power_factor:.2f} "
                f"(Min: {power_factor.min:g})",
            )
        )

    if previous is not None and previous.relay_state != reading.relay_state:
        kind = EventType.MANUAL_ON if reading.relay_state else EventType.MANUAL_OFF
        events.append(
            _event(kind, reading, f"Relay turned {'ON' if reading.relay_state else 'OFF'}")
        )

    return events


def close_outage(events: list[Event], restored_at: datetime) -> Event | None:
    """Set the duration of the newest open outage in a newest-first log."""
    for event in events:
        if event.type is EventType.OUTAGE:
            if event.duration is not None:
                return None
            event.duration = (restored_at - event.timestamp).total_seconds()
            return event
    return None


def range_start(period: EventRange, now: datetime | None = None) -> datetime | None:
    now = now or datetime.now(timezone.utc)
    if period is EventRange.TODAY:
        return now.astimezone().replace(hour=0, minute=0, second=0, microsecond=0)
    if period is EventRange.WEEK:
        return now - timedelta(days=7)
    if period is EventRange.MONTH:
        return now - timedelta(days=30)
    return None


def filter_events(
    events: list[Event],
    *,
    since: datetime | None = None,
    event_type: EventType | None = None,
) -> list[Event]:
    return [
        event
        for event in events
        if (since is None or event.timestamp >= since)
        and (event_type is None or event.type is event_type)
    ]


def event_statistics(
    events: list[Event], now: datetime | None = None
) -> EventStatistics:
    """Totals over the last 30 days; durations are in seconds."""
    now = now or datetime.now(timezone.utc)
    recent = filter_events(events, since=now - STATISTICS_WINDOW)
    outages = [event for event in recent if event.type is EventType.OUTAGE]
    downtime = sum(event.duration or 0.0 for event in outages)
    return EventStatistics(
        total_events=len(recent),
        total_outages=len(outages),
        average_outage_duration=downtime / len(outages) if outages else 0.0,
        total_downtime=downtime,
    )


class EventRecorder:
    """Feeds successive readings through :func:`detect_events` into the log."""

    def __init__(self, database: Database, thresholds: Thresholds) -> None:
        self._database = database
        self._thresholds = thresholds
        self._previous: Reading | None = None

    def record(self, reading: Reading) -> list[Event]:
        events = detect_events(reading, self._previous, self._thresholds)
        self._previous = reading
        if not events:
            return events

        log = self._database.load_events()
        for event in events:
            logger.info("Event %s: %s", event.type.value, event.description)
            if event.type is EventType.RESTORE:
                close_outage(log, event.timestamp)
        # newest first, like the stored log
        self._database.save_events([*reversed(events), *log])
        return events
