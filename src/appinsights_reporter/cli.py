"""App Insights reporter CLI - configuration and diagnostics."""

import logging
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import ReporterConfig, load_config
from .metrics import ALL
from .reporter import AppInsightsReporter
from .sinks import SinkRegistry, list_sinks

console = Console()


def setup_logging(level: str):
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
    # basicConfig is a no-op once handlers exist
    logging.getLogger().setLevel(getattr(logging, level.upper()))


class _SingleGaugeSource:
    """Metric source holding one fixed gauge, used by ``send``."""

    def __init__(self, name: str, value: float):
        self.name = name
        self.value = value

    def get_value(self) -> float:
        return self.value

    def get_gauges(self, metric_filter=ALL):
        return {self.name: self} if metric_filter(self.name, self) else {}

    def get_counters(self, metric_filter=ALL):
        return {}

    def get_histograms(self, metric_filter=ALL):
        return {}

    def get_meters(self, metric_filter=ALL):
        return {}

    def get_timers(self, metric_filter=ALL):
        return {}


@click.group()
@click.version_option(version=__version__, prog_name="appinsights-reporter")
@click.option("--log-level", default=None, help="Log level (default: log_level from the config file)")
@click.pass_context
def main(ctx: click.Context, log_level: Optional[str]):
    """App Insights reporter - flat metrics for Azure Application Insights."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    if log_level:
        setup_logging(log_level)


def _load(ctx: click.Context, config_path: Optional[str]) -> ReporterConfig:
    """Load the config and apply its log level unless --log-level was given."""
    config = load_config(config_path)
    if not ctx.obj.get("log_level"):
        setup_logging(config.log_level)
    return config


@main.command()
@click.option("--config", "-c", "config_path", type=click.Path(exists=True), help="Path to config file")
@click.pass_context
def show(ctx: click.Context, config_path: Optional[str]):
    """Show the resolved configuration."""
    config = _load(ctx, config_path)

    table = Table(title="Reporter Configuration", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Name", config.name)
    table.add_row("Metric prefix", repr(config.metric_name_prefix))
    table.add_row("Rate unit", str(config.rate_unit))
    table.add_row("Duration unit", str(config.duration_unit))
    table.add_row("Log level", config.log_level)
    table.add_row("Sink", config.sink.type)
    if config.sink.type == "appinsights":
        key = config.sink.instrumentation_key
        table.add_row("Instrumentation key", f"{key[:8]}..." if key else "[yellow]not set (disabled)[/yellow]")
        table.add_row("Endpoint", config.sink.endpoint or "default")
        table.add_row("Developer mode", str(config.sink.developer_mode))

    console.print(table)


@main.command()
@click.argument("name")
@click.argument("value", type=float)
@click.option("--config", "-c", "config_path", type=click.Path(exists=True), help="Path to config file")
@click.pass_context
def send(ctx: click.Context, name: str, value: float, config_path: Optional[str]):
    """Send a single gauge VALUE named NAME through the configured sink."""
    config = _load(ctx, config_path)
    source = _SingleGaugeSource(name, value)

    try:
        reporter = AppInsightsReporter.from_config(source, config)
    except ValueError as e:
        raise click.ClickException(str(e))

    with reporter:
        if getattr(reporter.sink, "disabled", False):
            raise click.ClickException(
                "App Insights telemetry is disabled (no instrumentation key), nothing sent"
            )

        records = list(reporter.records(source.get_gauges(), {}, {}, {}, {}))
        if not records:
            raise click.ClickException(f"{value} is not a finite single-precision number, nothing sent")

        reporter.report_now()

    console.print(f"[green]+ Sent {records[0].name} = {records[0].value:g} via {config.sink.type}[/green]")


@main.command()
def sinks():
    """List available sink types."""
    table = Table(show_header=True)
    table.add_column("Type", style="cyan")
    table.add_column("Description")

    for sink_type in list_sinks():
        sink_class = SinkRegistry.get(sink_type)
        doc = (sink_class.__doc__ or "").strip().splitlines()
        table.add_row(sink_type, doc[0] if doc else "")

    console.print(table)


@main.command()
@click.option("--output", "-o", type=click.Path(), help="Output file path")
def init(output: Optional[str]):
    """Generate a sample configuration file."""
    sample_config = """# App Insights Reporter Configuration

name: App Insights reporter

# Prepended to every metric name, e.g. "myservice/"
metric_name_prefix: ""

# Units used for rates (events per unit) and durations
rate_unit: SECONDS
duration_unit: MILLISECONDS

log_level: INFO

sink:
  # appinsights, console or memory
  type: appinsights
  # Or set APPLICATIONINSIGHTS_CONNECTION_STRING / APPINSIGHTS_INSTRUMENTATIONKEY
  # instrumentation_key: 00000000-0000-0000-0000-000000000000
  # endpoint: https://dc.services.visualstudio.com
  timeout: 10
  developer_mode: false
  max_queue_length: 500
  # options:
  #   role_name: my-service
  #   properties:
  #     environment: production
"""

    output_path = output or "appinsights-reporter.yaml"

    with open(output_path, "w") as f:
        f.write(sample_config)

    console.print(f"[green]+ Created config file: {output_path}[/green]")
    console.print("\nEdit the file, then check it with:")
    console.print(f"  [cyan]appinsights-reporter show -c {output_path}[/cyan]")


if __name__ == "__main__":
    main()
