"""Interfaces of the metrics registry the reporter reads from.

The registry and its instruments live outside this package. Anything that
exposes these methods (a Dropwizard-style registry port, an adapter over an
existing metrics library, a test double) can be reported.
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Protocol, runtime_checkable


@runtime_checkable
class Gauge(Protocol):
    """A named arbitrary value."""

    def get_value(self) -> Any:
        ...


@runtime_checkable
class Counter(Protocol):
    """A monotonic integer count."""

    def get_count(self) -> int:
        ...


class Snapshot(Protocol):
    """A frozen read of a distribution."""

    def get_min(self) -> float:
        ...

    def get_max(self) -> float:
        ...

    def get_mean(self) -> float:
        ...

    def get_std_dev(self) -> float:
        ...

    def get_median(self) -> float:
        ...

    def get_75th_percentile(self) -> float:
        ...

    def get_95th_percentile(self) -> float:
        ...

    def get_98th_percentile(self) -> float:
        ...

    def get_99th_percentile(self) -> float:
        ...

    def get_999th_percentile(self) -> float:
        ...


class Histogram(Protocol):
    """A distribution of values."""

    def get_count(self) -> int:
        ...

    def get_snapshot(self) -> Snapshot:
        ...


class Metered(Protocol):
    """Something that tracks a count and per-second rates."""

    def get_count(self) -> int:
        ...

    def get_mean_rate(self) -> float:
        ...

    def get_one_minute_rate(self) -> float:
        ...

    def get_five_minute_rate(self) -> float:
        ...

    def get_fifteen_minute_rate(self) -> float:
        ...


Meter = Metered


class Timer(Metered, Protocol):
    """A meter of calls plus a histogram of their durations in nanoseconds."""

    def get_snapshot(self) -> Snapshot:
        ...


MetricFilter = Callable[[str, Any], bool]


def ALL(name: str, metric: Any) -> bool:
    """Filter that accepts every metric."""
    return True


class MetricSource(Protocol):
    """
    A registry of named metrics.

    Each getter returns the metrics of one kind accepted by ``metric_filter``.
    """

    def get_gauges(self, metric_filter: MetricFilter = ALL) -> Mapping[str, Gauge]:
        ...

    def get_counters(self, metric_filter: MetricFilter = ALL) -> Mapping[str, Counter]:
        ...

    def get_histograms(self, metric_filter: MetricFilter = ALL) -> Mapping[str, Histogram]:
        ...

    def get_meters(self, metric_filter: MetricFilter = ALL) -> Mapping[str, Meter]:
        ...

    def get_timers(self, metric_filter: MetricFilter = ALL) -> Mapping[str, Timer]:
        ...


@dataclass(frozen=True)
class MetricRecord:
    """A single flat value ready to be sent to a sink."""

    name: str
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}
