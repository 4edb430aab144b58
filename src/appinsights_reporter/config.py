"""Configuration management for the App Insights reporter."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .sinks import SinkConfig, parse_connection_string
from .units import TimeUnit


@dataclass
class ReporterConfig:
    """Main reporter configuration."""

    # Reporter settings
    name: str = "App Insights reporter"
    metric_name_prefix: str = ""
    rate_unit: TimeUnit = TimeUnit.SECONDS
    duration_unit: TimeUnit = TimeUnit.MILLISECONDS
    log_level: str = "INFO"

    # Where metrics go
    sink: SinkConfig = field(default_factory=SinkConfig)

    @classmethod
    def from_file(cls, path: str | Path) -> "ReporterConfig":
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict) -> "ReporterConfig":
        """Create config from dictionary."""
        config = cls()

        # Reporter settings
        config.name = data.get("name", config.name)
        config.metric_name_prefix = data.get("metric_name_prefix") or ""
        config.rate_unit = TimeUnit.parse(data.get("rate_unit", config.rate_unit))
        config.duration_unit = TimeUnit.parse(data.get("duration_unit", config.duration_unit))
        config.log_level = data.get("log_level", config.log_level)

        # Sink
        sink_data = data.get("sink") or {}
        config.sink = SinkConfig(
            type=sink_data.get("type", config.sink.type),
            instrumentation_key=sink_data.get("instrumentation_key"),
            endpoint=sink_data.get("endpoint"),
            timeout=sink_data.get("timeout", config.sink.timeout),
            developer_mode=sink_data.get("developer_mode", config.sink.developer_mode),
            max_queue_length=sink_data.get("max_queue_length", config.sink.max_queue_length),
            options=sink_data.get("options", {}),
        )

        config._apply_env()
        return config

    @classmethod
    def from_env(cls) -> "ReporterConfig":
        """Create config from environment variables."""
        config = cls()
        config._apply_env()
        return config

    def _apply_env(self):
        """Fill in connection settings and overrides from the environment."""
        connection_string = os.environ.get("APPLICATIONINSIGHTS_CONNECTION_STRING")
        if connection_string:
            parts = parse_connection_string(connection_string)
            if not self.sink.instrumentation_key:
                self.sink.instrumentation_key = parts.get("instrumentationkey")
            if not self.sink.endpoint:
                self.sink.endpoint = parts.get("ingestionendpoint")

        if not self.sink.instrumentation_key:
            self.sink.instrumentation_key = os.environ.get("APPINSIGHTS_INSTRUMENTATIONKEY")

        # Override prefix from env
        if os.environ.get("APPINSIGHTS_METRIC_PREFIX") is not None:
            self.metric_name_prefix = os.environ["APPINSIGHTS_METRIC_PREFIX"]


def load_config(config_path: Optional[str] = None) -> ReporterConfig:
    """Load configuration from file or environment."""
    # Try config file first
    if config_path and Path(config_path).exists():
        return ReporterConfig.from_file(config_path)

    # Try default locations
    default_paths = [
        Path("appinsights-reporter.yaml"),
        Path("appinsights-reporter.yml"),
        Path.home() / ".appinsights-reporter" / "config.yaml",
    ]

    for path in default_paths:
        if path.exists():
            return ReporterConfig.from_file(path)

    # Fall back to environment
    return ReporterConfig.from_env()
