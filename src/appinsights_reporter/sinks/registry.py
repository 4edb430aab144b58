"""Sink registry - maps type names from configuration to sink classes."""

from typing import Type, Optional
import logging

from .base import TelemetrySink, SinkConfig

logger = logging.getLogger(__name__)


class SinkRegistry:
    """Registry of sink classes, keyed by the ``type`` used in SinkConfig."""

    _sinks: dict[str, Type[TelemetrySink]] = {}

    @classmethod
    def register(cls, sink_type: str, sink_class: Type[TelemetrySink]):
        """Register a sink class; a type name can only belong to one class."""
        existing = cls._sinks.get(sink_type)
        if existing is not None and existing is not sink_class:
            raise ValueError(f"Sink type {sink_type!r} is already registered by {existing.__name__}")
        cls._sinks[sink_type] = sink_class
        logger.debug(f"Registered telemetry sink: {sink_type}")

    @classmethod
    def get(cls, sink_type: str) -> Optional[Type[TelemetrySink]]:
        return cls._sinks.get(sink_type)

    @classmethod
    def create(cls, config: SinkConfig) -> TelemetrySink:
        """Create a sink instance from config."""
        sink_class = cls._sinks.get(config.type)
        if sink_class is None:
            raise ValueError(
                f"Unknown sink type: {config.type} (available: {', '.join(cls.list_types())})"
            )
        return sink_class(config)

    @classmethod
    def list_types(cls) -> list[str]:
        return sorted(cls._sinks)


def register_sink(sink_type: str):
    """
    Decorator to register a telemetry sink class.

    Usage:
        @register_sink("statsd")
        class StatsdSink(TelemetrySink):
            ...
    """
    def decorator(cls: Type[TelemetrySink]):
        cls.sink_type = sink_type
        SinkRegistry.register(sink_type, cls)
        return cls
    return decorator


def create_sink(config: SinkConfig) -> TelemetrySink:
    """Create a sink instance from config."""
    return SinkRegistry.create(config)


def list_sinks() -> list[str]:
    """List all registered sink types."""
    return SinkRegistry.list_types()


# Built-in sinks register themselves on import
from . import appinsights, console, memory  # noqa: E402,F401
