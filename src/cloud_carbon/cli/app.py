# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Main CLI application for cloud-carbon."""

from __future__ import annotations

import logging
import time

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from cloud_carbon.bus import EventBus, Topic
from cloud_carbon.calculator import CalculatorHandler
from cloud_carbon.config import AppConfig, load_config
from cloud_carbon.data.models import Provider
from cloud_carbon.errors import CloudCarbonError
from cloud_carbon.factors import FileFactorStore, ModelTier, resolve_instance_model
from cloud_carbon.reporting import TerminalReporter
from cloud_carbon.scheduling import AccountScheduler, new_schedulers

logger = logging.getLogger(__name__)


def _setup_logging(level: str, console: Console) -> None:
    """Route package logs through Rich at *level*."""
    root = logging.getLogger("cloud_carbon")
    root.handlers.clear()
    root.addHandler(RichHandler(console=console, show_path=False, rich_tracebacks=True))
    root.setLevel(level.upper())


def _build_pipeline(
    cfg: AppConfig, console: Console, quiet: bool
) -> tuple[EventBus, TerminalReporter, list[AccountScheduler]]:
    """Wire bus, calculator, reporter and schedulers from *cfg*."""
    bus = EventBus()
    calculator = CalculatorHandler(bus, FileFactorStore(cfg.factors.data_path), cfg.interval)
    reporter = TerminalReporter(console, quiet=quiet)
    bus.subscribe(Topic.metrics_collected, calculator)
    bus.subscribe(Topic.emissions_calculated, reporter)
    return bus, reporter, new_schedulers(cfg, bus)


@click.group()
@click.version_option(version="0.1.0")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--log-level", default=None, help="Override the configured log level")
@click.pass_context
def cli(ctx: click.Context, no_color: bool, log_level: str | None) -> None:
    """cloud-carbon: cloud instance emissions monitor

    Samples instance utilization per provider account, converts it to
    operational and embodied gCO2e, and reports the results.
    """
    ctx.ensure_object(dict)
    ctx.obj["console"] = Console(no_color=no_color)
    ctx.obj["log_level"] = log_level


@cli.command()
@click.option("--config", "-c", type=click.Path(exists=True), required=True,
              help="Path to YAML config file")
@click.option("--once", is_flag=True, help="Run a single collection pass and exit")
@click.option("--duration", "-d", type=float, default=None,
              help="Stop after this many seconds (default: run until interrupted)")
@click.option("--quiet", "-q", is_flag=True, help="Only print the summary table")
@click.pass_context
def run(ctx: click.Context, config: str, once: bool, duration: float | None, quiet: bool) -> None:
    """Collect metrics and calculate emissions for every configured account."""
    console: Console = ctx.obj["console"]
    cfg = load_config(config)
    _setup_logging(ctx.obj["log_level"] or cfg.log_level, console)

    try:
        bus, reporter, schedulers = _build_pipeline(cfg, console, quiet)
    except CloudCarbonError as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise SystemExit(1)

    if not schedulers:
        console.print("[red]No provider accounts could be scheduled[/]")
        raise SystemExit(1)

    if once:
        for scheduler in schedulers:
            scheduler.run_once()
            scheduler.cancel()
        bus.stop()
        return

    for scheduler in schedulers:
        scheduler.schedule()

    try:
        if duration is None:
            while True:
                time.sleep(1)
        else:
            time.sleep(duration)
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted, shutting down...[/]")
    finally:
        for scheduler in schedulers:
            scheduler.cancel()
        bus.stop()
    logger.info("processed %d emission results", reporter.event_count)


@cli.command()
@click.option("--provider", "-p", type=click.Choice([p.value for p in Provider]),
              required=True, help="Provider whose dataset to show")
@click.option("--data-path", type=click.Path(exists=True, file_okay=False), default=None,
              help="Dataset directory (default: bundled dataset)")
@click.pass_context
def factors(ctx: click.Context, provider: str, data_path: str | None) -> None:
    """Show grid intensities, PUE and instance models for a provider."""
    console: Console = ctx.obj["console"]
    store = FileFactorStore(data_path)
    prov = Provider(provider)

    try:
        emission_factors = store.get_provider_emission_factors(prov)
        specs = store.get_instance_specs(prov)
    except CloudCarbonError as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise SystemExit(1)

    console.print(f"\n[bold]{prov.value}[/] average PUE: {emission_factors.average_pue}\n")

    regions = Table(title="Grid intensity")
    regions.add_column("Region")
    regions.add_column("gCO2e/kWh", justify="right")
    for region, tons in sorted(emission_factors.coefficient.items()):
        regions.add_row(region, f"{tons * 1_000_000:.1f}")
    console.print(regions)

    kinds = Table(title="Instance models")
    kinds.add_column("Kind")
    kinds.add_column("Tier")
    kinds.add_column("Curve points", justify="right")
    kinds.add_column("Embodied g/h", justify="right")
    for kind in sorted(set(specs) | set(emission_factors.embodied)):
        try:
            model = resolve_instance_model(prov, kind, emission_factors, specs)
        except CloudCarbonError as exc:
            kinds.add_row(kind, "[red]error[/]", "-", str(exc))
            continue
        tier_color = "green" if model.tier is ModelTier.precise else "yellow"
        kinds.add_row(
            kind,
            f"[{tier_color}]{model.tier.value}[/]",
            str(len(model.curve)),
            f"{model.embodied_hourly:.4f}",
        )
    console.print(kinds)
