"""Time units used to scale reported rates and durations."""

from enum import Enum
from typing import Union


class TimeUnit(str, Enum):
    """Time granularities, named the way they appear in metric names."""
    NANOSECONDS = "NANOSECONDS"
    MICROSECONDS = "MICROSECONDS"
    MILLISECONDS = "MILLISECONDS"
    SECONDS = "SECONDS"
    MINUTES = "MINUTES"
    HOURS = "HOURS"
    DAYS = "DAYS"

    def __str__(self) -> str:
        return self.value

    @property
    def rate_name(self) -> str:
        """Singular lower-case name used in rate keys, e.g. "second"."""
        return self.name.lower()[:-1]

    @property
    def nanos(self) -> int:
        """Number of nanoseconds in one unit."""
        return _NANOS[self]

    @property
    def seconds(self) -> float:
        """Number of seconds in one unit."""
        return self.nanos / _NANOS[TimeUnit.SECONDS]

    @classmethod
    def parse(cls, value: Union["TimeUnit", str]) -> "TimeUnit":
        """Accept a TimeUnit or its name, in any case."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        choices = ", ".join(u.value for u in cls)
        raise ValueError(f"Unknown time unit {value!r} (expected one of: {choices})")


_NANOS = {
    TimeUnit.NANOSECONDS: 1,
    TimeUnit.MICROSECONDS: 1_000,
    TimeUnit.MILLISECONDS: 1_000_000,
    TimeUnit.SECONDS: 1_000_000_000,
    TimeUnit.MINUTES: 60 * 1_000_000_000,
    TimeUnit.HOURS: 60 * 60 * 1_000_000_000,
    TimeUnit.DAYS: 24 * 60 * 60 * 1_000_000_000,
}


def convert_rate(rate_per_second: float, rate_unit: TimeUnit) -> float:
    """Scale a per-second rate to events per ``rate_unit``."""
    return rate_per_second * rate_unit.seconds


def convert_duration(nanoseconds: float, duration_unit: TimeUnit) -> float:
    """Express a duration given in nanoseconds in ``duration_unit``."""
    return nanoseconds / duration_unit.nanos
