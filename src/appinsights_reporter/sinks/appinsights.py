"""Application Insights sink - sends metrics to the App Insights ingestion API."""

import logging
import os
import threading
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from .base import TelemetrySink, SinkConfig
from .registry import register_sink

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://dc.services.visualstudio.com"
TRACK_PATH = "/v2/track"
SDK_VERSION = "py3:appinsights-reporter-0.1.0"


def parse_connection_string(connection_string: str) -> dict[str, str]:
    """Split an App Insights connection string into its key/value parts.

    Keys are normalised to lower case, e.g. "instrumentationkey".
    """
    parts = {}
    for item in connection_string.split(";"):
        if not item.strip():
            continue
        key, sep, value = item.partition("=")
        if not sep:
            raise ValueError(f"Malformed connection string segment: {item!r}")
        parts[key.strip().lower()] = value.strip()
    return parts


class TelemetrySendError(Exception):
    """Metrics were dropped because App Insights rejected or never got them."""

    def __init__(self, dropped: int):
        self.dropped = dropped
        super().__init__(f"Dropped {dropped} metric(s) after failed App Insights requests")


@register_sink("appinsights")
class TelemetryClient(TelemetrySink):
    """
    Client for sending metrics to Azure Application Insights.

    Each tracked value becomes one ``MetricData`` envelope. Envelopes are
    queued and POSTed as a JSON array to ``<endpoint>/v2/track`` on
    ``flush()``, when the queue reaches ``max_queue_length``, or after every
    call in developer mode, so the queue never outgrows ``max_queue_length``.
    A failed request drops its envelopes; ``flush()`` then raises
    TelemetrySendError with the number dropped.

    An empty instrumentation key disables the client: values are accepted
    and dropped.

    Config:
        instrumentation_key: str - App Insights instrumentation key
        endpoint: str - Ingestion endpoint (default: https://dc.services.visualstudio.com)
        timeout: float - HTTP timeout in seconds (default: 10)
        developer_mode: bool - Send every value immediately (default: False)
        max_queue_length: int - Queue size that triggers a flush (default: 500)

    Config options:
        role_name: str - Sent as the ai.cloud.role tag
        properties: dict[str, str] - Custom properties attached to every metric
    """

    sink_type = "appinsights"

    def __init__(
        self,
        config: Optional[SinkConfig] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        super().__init__(config)
        self.instrumentation_key = self.config.instrumentation_key or ""
        self.endpoint = (self.config.endpoint or DEFAULT_ENDPOINT).rstrip("/")
        self._queue: list[dict[str, Any]] = []
        self._dropped = 0
        self._last_error: Optional[httpx.HTTPError] = None
        self._lock = threading.Lock()
        self._client = http_client
        self._owns_client = http_client is None

        if not self.instrumentation_key:
            logger.info("No instrumentation key configured, App Insights telemetry is disabled")

    @classmethod
    def from_env(cls, http_client: Optional[httpx.Client] = None) -> "TelemetryClient":
        """Create a client configured from the standard App Insights variables."""
        config = SinkConfig(type=cls.sink_type)
        connection_string = os.environ.get("APPLICATIONINSIGHTS_CONNECTION_STRING")
        if connection_string:
            parts = parse_connection_string(connection_string)
            config.instrumentation_key = parts.get("instrumentationkey")
            config.endpoint = parts.get("ingestionendpoint")
        if not config.instrumentation_key:
            config.instrumentation_key = os.environ.get("APPINSIGHTS_INSTRUMENTATIONKEY")
        return cls(config, http_client=http_client)

    @property
    def disabled(self) -> bool:
        return not self.instrumentation_key

    def _get_headers(self) -> dict:
        """Get request headers."""
        return {
            "Content-Type": "application/json",
            "User-Agent": "appinsights-reporter/0.1.0",
        }

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                timeout=self.config.timeout,
                headers=self._get_headers(),
            )
            self._owns_client = True
        return self._client

    def _envelope(self, name: str, value: float) -> dict[str, Any]:
        """Build the App Insights envelope for one metric value."""
        tags = {"ai.internal.sdkVersion": SDK_VERSION}
        role_name = self.config.options.get("role_name")
        if role_name:
            tags["ai.cloud.role"] = role_name

        return {
            "name": f"Microsoft.ApplicationInsights.{self.instrumentation_key.replace('-', '')}.Metric",
            "time": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "iKey": self.instrumentation_key,
            "tags": tags,
            "data": {
                "baseType": "MetricData",
                "baseData": {
                    "ver": 2,
                    "metrics": [
                        {"name": name, "kind": 0, "value": value, "count": 1},
                    ],
                    "properties": dict(self.config.options.get("properties", {})),
                },
            },
        }

    def track_metric(self, name: str, value: float) -> None:
        """Queue one metric value.

        Sends triggered here never raise; a failure is reported by the next
        ``flush()``.
        """
        if self.disabled:
            return

        with self._lock:
            self._queue.append(self._envelope(name, value))
            queued = len(self._queue)

        if self.config.developer_mode or queued >= self.config.max_queue_length:
            self._send()

    @property
    def queued(self) -> int:
        """Number of envelopes waiting to be sent."""
        with self._lock:
            return len(self._queue)

    def _send(self) -> None:
        """POST the queue; on failure drop it and remember the error."""
        with self._lock:
            batch, self._queue = self._queue, []

        if not batch:
            return

        client = self._get_client()
        try:
            response = client.post(
                f"{self.endpoint}{TRACK_PATH}",
                json=batch,
                headers=self._get_headers(),
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Dropped {len(batch)} metrics, App Insights request failed: {e}")
            with self._lock:
                self._dropped += len(batch)
                self._last_error = e
            return

        if response.status_code == 206:
            logger.warning(f"App Insights accepted only part of {len(batch)} metrics: {response.text}")
        else:
            logger.debug(f"Successfully sent {len(batch)} metrics")

    def flush(self) -> None:
        """Send queued envelopes.

        Raises:
            TelemetrySendError: if any send since the last flush failed. The
                envelopes of failed requests are dropped, not retried.
        """
        self._send()

        with self._lock:
            dropped, self._dropped = self._dropped, 0
            error, self._last_error = self._last_error, None

        if dropped:
            raise TelemetrySendError(dropped) from error

    def close(self) -> None:
        """Flush and close the HTTP client."""
        try:
            self.flush()
        finally:
            if self._client is not None and self._owns_client:
                self._client.close()
            self._client = None
