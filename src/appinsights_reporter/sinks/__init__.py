"""Telemetry sinks - pluggable destinations for reported metrics."""

from .base import TelemetrySink, SinkConfig
from .registry import SinkRegistry, create_sink, register_sink, list_sinks
from .appinsights import TelemetryClient, TelemetrySendError, parse_connection_string
from .console import ConsoleSink
from .memory import MemorySink

__all__ = [
    "TelemetrySink",
    "SinkConfig",
    "SinkRegistry",
    "create_sink",
    "register_sink",
    "list_sinks",
    "TelemetryClient",
    "TelemetrySendError",
    "parse_connection_string",
    "ConsoleSink",
    "MemorySink",
]
