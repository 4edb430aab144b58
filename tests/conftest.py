"""Shared fixtures: an in-memory metric registry and recording sinks."""

from typing import Any, Callable

import pytest

from appinsights_reporter.metrics import ALL
from appinsights_reporter.sinks import MemorySink


class FakeGauge:
    def __init__(self, supplier: Callable[[], Any]):
        self.supplier = supplier

    def get_value(self):
        return self.supplier()


class FakeCounter:
    def __init__(self):
        self.count = 0

    def inc(self, n: int = 1):
        self.count += n

    def get_count(self) -> int:
        return self.count


class FakeSnapshot:
    """Exact statistics over a small list of values."""

    def __init__(self, values):
        self.values = sorted(values)

    def _quantile(self, q: float) -> float:
        if not self.values:
            return 0.0
        index = min(int(q * len(self.values)), len(self.values) - 1)
        return float(self.values[index])

    def get_min(self):
        return self.values[0] if self.values else 0

    def get_max(self):
        return self.values[-1] if self.values else 0

    def get_mean(self):
        return sum(self.values) / len(self.values) if self.values else 0.0

    def get_std_dev(self):
        if len(self.values) < 2:
            return 0.0
        mean = self.get_mean()
        return (sum((v - mean) ** 2 for v in self.values) / (len(self.values) - 1)) ** 0.5

    def get_median(self):
        return self._quantile(0.5)

    def get_75th_percentile(self):
        return self._quantile(0.75)

    def get_95th_percentile(self):
        return self._quantile(0.95)

    def get_98th_percentile(self):
        return self._quantile(0.98)

    def get_99th_percentile(self):
        return self._quantile(0.99)

    def get_999th_percentile(self):
        return self._quantile(0.999)


class FakeHistogram:
    def __init__(self):
        self.values = []

    def update(self, value):
        self.values.append(value)

    def get_count(self):
        return len(self.values)

    def get_snapshot(self):
        return FakeSnapshot(self.values)


class FakeMeter:
    """Meter with fixed per-second rates."""

    def __init__(self, count=0, mean=0.0, m1=0.0, m5=0.0, m15=0.0):
        self.count = count
        self.rates = (mean, m1, m5, m15)

    def mark(self, n: int = 1):
        self.count += n

    def get_count(self):
        return self.count

    def get_mean_rate(self):
        return self.rates[0]

    def get_one_minute_rate(self):
        return self.rates[1]

    def get_five_minute_rate(self):
        return self.rates[2]

    def get_fifteen_minute_rate(self):
        return self.rates[3]


class FakeTimer(FakeMeter):
    """Timer recording durations in nanoseconds."""

    def __init__(self, **rates):
        super().__init__(**rates)
        self.histogram = FakeHistogram()

    def update_ms(self, ms: float):
        self.histogram.update(ms * 1_000_000)
        self.mark()

    def get_snapshot(self):
        return self.histogram.get_snapshot()


class FakeRegistry:
    """Minimal registry implementing the MetricSource protocol."""

    def __init__(self):
        self.gauges = {}
        self.counters = {}
        self.histograms = {}
        self.meters = {}
        self.timers = {}

    def gauge(self, name, supplier):
        self.gauges[name] = FakeGauge(supplier)
        return self.gauges[name]

    def counter(self, name):
        return self.counters.setdefault(name, FakeCounter())

    def histogram(self, name):
        return self.histograms.setdefault(name, FakeHistogram())

    def meter(self, name, **rates):
        return self.meters.setdefault(name, FakeMeter(**rates))

    def timer(self, name, **rates):
        return self.timers.setdefault(name, FakeTimer(**rates))

    @staticmethod
    def _select(metrics, metric_filter):
        return {name: m for name, m in sorted(metrics.items()) if metric_filter(name, m)}

    def get_gauges(self, metric_filter=ALL):
        return self._select(self.gauges, metric_filter)

    def get_counters(self, metric_filter=ALL):
        return self._select(self.counters, metric_filter)

    def get_histograms(self, metric_filter=ALL):
        return self._select(self.histograms, metric_filter)

    def get_meters(self, metric_filter=ALL):
        return self._select(self.meters, metric_filter)

    def get_timers(self, metric_filter=ALL):
        return self._select(self.timers, metric_filter)


class FailingSink(MemorySink):
    """Memory sink that raises for selected names."""

    def __init__(self, fail_on):
        super().__init__()
        self.fail_on = set(fail_on)

    def track_metric(self, name, value):
        if name in self.fail_on:
            raise ConnectionError(f"cannot send {name}")
        super().track_metric(name, value)


@pytest.fixture
def registry():
    """Create an empty registry."""
    return FakeRegistry()


@pytest.fixture
def sink():
    """Create a recording sink."""
    return MemorySink()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep App Insights settings from the host out of the tests."""
    for var in (
        "APPLICATIONINSIGHTS_CONNECTION_STRING",
        "APPINSIGHTS_INSTRUMENTATIONKEY",
        "APPINSIGHTS_METRIC_PREFIX",
    ):
        monkeypatch.delenv(var, raising=False)
