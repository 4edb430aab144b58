"""In-memory sink - keeps every reported value."""

import threading
from typing import Optional

from .base import TelemetrySink, SinkConfig
from .registry import register_sink


@register_sink("memory")
class MemorySink(TelemetrySink):
    """Collect ``(name, value)`` pairs in a list, in the order they arrive."""

    sink_type = "memory"

    def __init__(self, config: Optional[SinkConfig] = None):
        super().__init__(config)
        self.metrics: list[tuple[str, float]] = []
        self.flushes = 0
        self._lock = threading.Lock()

    def track_metric(self, name: str, value: float) -> None:
        with self._lock:
            self.metrics.append((name, value))

    def flush(self) -> None:
        with self._lock:
            self.flushes += 1

    def as_dict(self) -> dict[str, float]:
        """Latest value per name."""
        with self._lock:
            return dict(self.metrics)

    def clear(self) -> None:
        with self._lock:
            self.metrics.clear()
