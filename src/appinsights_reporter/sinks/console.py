"""Console sink - prints reported metrics as a table."""

import threading
from typing import Optional

from rich.console import Console
from rich.table import Table

from .base import TelemetrySink, SinkConfig
from .registry import register_sink


@register_sink("console")
class ConsoleSink(TelemetrySink):
    """
    Print metrics to the terminal.

    Values are buffered and printed as one table per flush.

    Config options:
        title: str - Table title (default: "Reported Metrics")
    """

    sink_type = "console"

    def __init__(self, config: Optional[SinkConfig] = None, console: Optional[Console] = None):
        super().__init__(config)
        self.console = console or Console()
        self._rows: list[tuple[str, float]] = []
        self._lock = threading.Lock()

    def track_metric(self, name: str, value: float) -> None:
        with self._lock:
            self._rows.append((name, value))

    def flush(self) -> None:
        with self._lock:
            rows, self._rows = self._rows, []

        if not rows:
            return

        title = self.config.options.get("title", "Reported Metrics")
        table = Table(title=f"{title} ({len(rows)})")
        table.add_column("Name", style="cyan")
        table.add_column("Value", justify="right")

        for name, value in rows:
            table.add_row(name, f"{value:.6g}")

        self.console.print(table)

    def close(self) -> None:
        self.flush()
