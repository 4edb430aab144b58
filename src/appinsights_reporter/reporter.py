"""App Insights reporter - turns registry metrics into flat named values."""

import logging
import math
import numbers
from decimal import Decimal
from dataclasses import dataclass, replace
from typing import Any, Iterator, Mapping, Optional, TYPE_CHECKING

import numpy as np

from .metrics import (
    ALL,
    Counter,
    Gauge,
    Histogram,
    Metered,
    MetricFilter,
    MetricRecord,
    MetricSource,
    Snapshot,
    Timer,
)
from .sinks import TelemetryClient, TelemetrySink, create_sink
from .units import TimeUnit, convert_duration, convert_rate

if TYPE_CHECKING:
    from .config import ReporterConfig

logger = logging.getLogger(__name__)

# Suffix of each snapshot statistic, in reporting order
SNAPSHOT_FIELDS = (
    ("min", "get_min"),
    ("max", "get_max"),
    ("mean", "get_mean"),
    ("stdDev", "get_std_dev"),
    ("median", "get_median"),
    ("75th", "get_75th_percentile"),
    ("95th", "get_95th_percentile"),
    ("98th", "get_98th_percentile"),
    ("99th", "get_99th_percentile"),
    ("99.9th", "get_999th_percentile"),
)

RATE_FIELDS = (
    ("meanRate", "get_mean_rate"),
    ("1MinuteRate", "get_one_minute_rate"),
    ("5MinuteRate", "get_five_minute_rate"),
    ("15MinuteRate", "get_fifteen_minute_rate"),
)


def to_float32(value: Any) -> float:
    """Narrow a number to single precision; overflow becomes infinity."""
    try:
        with np.errstate(over="ignore"):
            return float(np.float32(float(value)))
    except OverflowError:
        # ints beyond the double range
        return math.inf if value > 0 else -math.inf


class ReportError(Exception):
    """One or more values could not be pushed to the sink."""

    def __init__(self, failed: list[str]):
        self.failed = failed
        shown = ", ".join(failed[:5])
        if len(failed) > 5:
            shown += ", ..."
        super().__init__(f"Failed to report {len(failed)} metric(s): {shown}")


@dataclass(frozen=True)
class ReporterOptions:
    """Reporter settings; every field has a usable default."""

    name: str = "App Insights reporter"
    metric_filter: MetricFilter = ALL
    rate_unit: TimeUnit = TimeUnit.SECONDS
    duration_unit: TimeUnit = TimeUnit.MILLISECONDS
    metric_name_prefix: str = ""

    def __post_init__(self):
        object.__setattr__(self, "rate_unit", TimeUnit.parse(self.rate_unit))
        object.__setattr__(self, "duration_unit", TimeUnit.parse(self.duration_unit))
        if self.metric_name_prefix is None:
            object.__setattr__(self, "metric_name_prefix", "")


class AppInsightsReporter:
    """
    Reports the metrics of a registry to Application Insights.

    Every metric is flattened into named float values:

    - gauge ``name``: ``name`` (numeric, finite values only)
    - counter ``name``: ``name/count``
    - histogram ``name``: ``name/min`` ... ``name/99.9th``
    - meter ``name``: ``name/count`` and ``name/<rate>/<rateUnit>`` (e.g. ``second``)
    - timer ``name``: meter values plus ``name/min/<durationUnit>`` ...

    The reporter keeps no state between reports. Scheduling is left to the
    caller, which invokes ``report_now()`` at its own interval.
    """

    def __init__(
        self,
        source: MetricSource,
        options: Optional[ReporterOptions] = None,
        sink: Optional[TelemetrySink] = None,
    ):
        self.source = source
        self.options = options or ReporterOptions()
        self.sink = sink if sink is not None else TelemetryClient.from_env()

        filter_name = getattr(self.options.metric_filter, "__qualname__", type(self.options.metric_filter).__name__)
        logger.info(
            f"Initialized {type(self).__name__} with name '{self.options.name}', "
            f"filter '{filter_name}', rate unit {self.rate_unit}, "
            f"duration unit {self.duration_unit} and name prefix '{self.prefix}'"
        )

    @classmethod
    def for_source(
        cls,
        source: MetricSource,
        sink: Optional[TelemetrySink] = None,
        **options: Any,
    ) -> "AppInsightsReporter":
        """Build a reporter, overriding any of the ReporterOptions defaults."""
        return cls(source, replace(ReporterOptions(), **options), sink=sink)

    @classmethod
    def from_config(
        cls,
        source: MetricSource,
        config: "ReporterConfig",
        metric_filter: MetricFilter = ALL,
    ) -> "AppInsightsReporter":
        """Build a reporter and its sink from a loaded configuration."""
        options = ReporterOptions(
            name=config.name,
            metric_filter=metric_filter,
            rate_unit=config.rate_unit,
            duration_unit=config.duration_unit,
            metric_name_prefix=config.metric_name_prefix,
        )
        return cls(source, options, sink=create_sink(config.sink))

    @property
    def name(self) -> str:
        return self.options.name

    @property
    def prefix(self) -> str:
        return self.options.metric_name_prefix

    @property
    def rate_unit(self) -> TimeUnit:
        return self.options.rate_unit

    @property
    def duration_unit(self) -> TimeUnit:
        return self.options.duration_unit

    def convert_rate(self, rate: float) -> float:
        return convert_rate(rate, self.rate_unit)

    def convert_duration(self, duration: float) -> float:
        return convert_duration(duration, self.duration_unit)

    def report_now(self) -> None:
        """Read every metric accepted by the filter, report it and flush the sink."""
        metric_filter = self.options.metric_filter
        self.report(
            self.source.get_gauges(metric_filter),
            self.source.get_counters(metric_filter),
            self.source.get_histograms(metric_filter),
            self.source.get_meters(metric_filter),
            self.source.get_timers(metric_filter),
        )
        self.sink.flush()

    def report(
        self,
        gauges: Mapping[str, Gauge],
        counters: Mapping[str, Counter],
        histograms: Mapping[str, Histogram],
        meters: Mapping[str, Metered],
        timers: Mapping[str, Timer],
    ) -> None:
        """Push one value to the sink per derived record.

        A failing push does not stop the others. Once every record has been
        attempted, failures are raised together as ReportError, chained to
        the first underlying exception.
        """
        logger.debug(
            f"Received report of {len(gauges)} gauges, {len(counters)} counters, "
            f"{len(histograms)} histograms, {len(meters)} meters and {len(timers)} timers"
        )

        failed = []
        first_error: Optional[Exception] = None

        for record in self.records(gauges, counters, histograms, meters, timers):
            try:
                self._push(record)
            except Exception as e:
                logger.warning(f"Failed to report metric {record.name}: {e}")
                failed.append(record.name)
                if first_error is None:
                    first_error = e

        if failed:
            raise ReportError(failed) from first_error

    def records(
        self,
        gauges: Mapping[str, Gauge],
        counters: Mapping[str, Counter],
        histograms: Mapping[str, Histogram],
        meters: Mapping[str, Metered],
        timers: Mapping[str, Timer],
    ) -> Iterator[MetricRecord]:
        """Yield the prefixed records ``report`` would push, in push order."""
        for name in sorted(gauges):
            yield from self._gauge(name, gauges[name])

        for name in sorted(counters):
            yield self._record(f"{name}/count", counters[name].get_count())

        for name in sorted(histograms):
            yield from self._snapshot(name, histograms[name].get_snapshot(), "")

        for name in sorted(meters):
            yield from self._metered(name, meters[name])

        for name in sorted(timers):
            timer = timers[name]
            yield from self._metered(name, timer)
            yield from self._snapshot(name, timer.get_snapshot(), f"/{self.duration_unit}")

    def _gauge(self, name: str, gauge: Gauge) -> Iterator[MetricRecord]:
        value = gauge.get_value()

        if not isinstance(value, (numbers.Real, Decimal)) or isinstance(value, bool):
            logger.info(f"Skipping gauge {name}: value of type {type(value).__name__} is not a number")
            return

        try:
            narrowed = to_float32(value)
        except ValueError:
            # signalling NaN decimals refuse float()
            narrowed = math.nan
        if math.isnan(narrowed) or math.isinf(narrowed):
            logger.info(f"Skipping gauge {name}: value {value} is not finite")
            return

        yield self._record(name, narrowed)

    def _metered(self, name: str, meter: Metered) -> Iterator[MetricRecord]:
        yield self._record(f"{name}/count", meter.get_count())
        for suffix, getter in RATE_FIELDS:
            rate = getattr(meter, getter)()
            yield self._record(f"{name}/{suffix}/{self.rate_unit.rate_name}", self.convert_rate(rate))

    def _snapshot(self, name: str, snapshot: Snapshot, unit_suffix: str) -> Iterator[MetricRecord]:
        for suffix, getter in SNAPSHOT_FIELDS:
            duration = getattr(snapshot, getter)()
            yield self._record(f"{name}/{suffix}{unit_suffix}", self.convert_duration(duration))

    def _record(self, name: str, value: Any) -> MetricRecord:
        return MetricRecord(name=f"{self.prefix}{name}", value=to_float32(value))

    def _push(self, record: MetricRecord) -> None:
        logger.debug(f"Reporting metric {record.name} with value {record.value}")
        self.sink.track_metric(record.name, record.value)

    def close(self) -> None:
        """Flush and release the sink."""
        self.sink.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
