from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from smartcb.models import Reading, Thresholds

# fraction of the current ceiling where the warning band starts (15 A of 16 A)
CURRENT_WARNING_RATIO = 0.9375


class Status(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Classification:
    voltage: Status
    current: Status
    frequency: Status
    power_factor: Status

    def breaches(self) -> dict[str, Status]:
        """Dimensions outside their normal band."""
        return {
            name: status
            for name, status in (
                ("voltage", self.voltage),
                ("current", self.current),
                ("frequency", self.frequency),
                ("power_factor", self.power_factor),
            )
            if status is not Status.NORMAL
        }

    @property
    def needs_attention(self) -> bool:
        return bool(self.breaches())


def classify_voltage(voltage: float, thresholds: Thresholds) -> Status:
    limits = thresholds.voltage
    normal_min = max(limits.normal_min, limits.min)
    normal_max = min(limits.normal_max, limits.max)
    if normal_min <= voltage <= normal_max:
        return Status.NORMAL
    if limits.min <= voltage <= limits.max:
        return Status.WARNING
    return Status.CRITICAL


def classify_current(current: float, thresholds: Thresholds) -> Status:
    limits = thresholds.current
    if not limits.enabled:
        return Status.NORMAL
    if current < limits.max * CURRENT_WARNING_RATIO:
        return Status.NORMAL
    if current <= limits.max:
        return Status.WARNING
    return Status.CRITICAL


def classify_frequency(frequency: float, thresholds: Thresholds) -> Status:
    limits = thresholds.frequency
    if not limits.enabled or limits.min <= frequency <= limits.max:
        return Status.NORMAL
    return Status.WARNING


def classify_power_factor(power_factor: float, thresholds: Thresholds) -> Status:
    limits = thresholds.power_factor
    if not limits.enabled or power_factor >= limits.min:
        return Status.NORMAL
    return Status.WARNING


def classify(reading: Reading, thresholds: Thresholds) -> Classification:
    """Classify each dimension of ``reading`` independently."""
    return Classification(
        voltage=classify_voltage(reading.voltage, thresholds),
        current=classify_current(reading.current, thresholds),
        frequency=classify_frequency(reading.frequency, thresholds),
        power_factor=classify_power_factor(reading.power_factor, thresholds),
    )
