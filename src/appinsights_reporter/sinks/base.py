"""Base interface for all telemetry sinks."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class SinkConfig:
    """Configuration for a telemetry sink."""

    type: str = "appinsights"  # e.g., "appinsights", "console", "memory"

    # Connection settings
    instrumentation_key: Optional[str] = None
    endpoint: Optional[str] = None
    timeout: float = 10.0

    # Buffering
    developer_mode: bool = False
    max_queue_length: int = 500

    # Extra options specific to the sink type
    options: dict[str, Any] = field(default_factory=dict)


class TelemetrySink(ABC):
    """
    Abstract base class for all telemetry sinks.

    Implement this interface to send reported metrics somewhere new.

    Example:
        @register_sink("statsd")
        class StatsdSink(TelemetrySink):

            def track_metric(self, name: str, value: float) -> None:
                self._socket.sendto(f"{name}:{value}|g".encode(), self._address)
    """

    # Override in subclass - used for registration
    sink_type: str = "base"

    def __init__(self, config: Optional[SinkConfig] = None):
        self.config = config or SinkConfig(type=self.sink_type)

    @abstractmethod
    def track_metric(self, name: str, value: float) -> None:
        """
        Send one named value.

        Args:
            name: Fully prefixed metric name
            value: Metric value
        """
        pass

    def flush(self) -> None:
        """Send anything buffered. Override if the sink buffers."""
        pass

    def close(self) -> None:
        """Clean up resources. Override if needed."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
