"""Report in-process metrics to Azure Application Insights."""

__version__ = "0.1.0"

from .config import ReporterConfig, load_config
from .metrics import ALL, MetricFilter, MetricRecord, MetricSource
from .reporter import AppInsightsReporter, ReportError, ReporterOptions
from .sinks import ConsoleSink, MemorySink, SinkConfig, TelemetryClient, TelemetrySink
from .units import TimeUnit

__all__ = [
    "__version__",
    "ALL",
    "AppInsightsReporter",
    "ConsoleSink",
    "MemorySink",
    "MetricFilter",
    "MetricRecord",
    "MetricSource",
    "ReportError",
    "ReporterConfig",
    "ReporterOptions",
    "SinkConfig",
    "TelemetryClient",
    "TelemetrySink",
    "TimeUnit",
    "load_config",
]
