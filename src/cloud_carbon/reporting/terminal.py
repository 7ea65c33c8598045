# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Rich terminal reporter for calculated emissions.

Subscribed to ``emissions_calculated``; prints one line per instance as
results arrive and a summary table when the bus stops it.
"""

from __future__ import annotations

import logging
import threading

from rich.console import Console
from rich.table import Table

from cloud_carbon.bus.events import Event, Topic
from cloud_carbon.data.models import Instance, MetricKind

logger = logging.getLogger(__name__)


class TerminalReporter:
    """Renders emissions results to the terminal using Rich."""

    def __init__(self, console: Console | None = None, quiet: bool = False) -> None:
        self.console = console or Console()
        self.quiet = quiet
        self._latest: dict[str, Instance] = {}
        self._events = 0
        self._lock = threading.Lock()

    @property
    def instances(self) -> list[Instance]:
        with self._lock:
            return list(self._latest.values())

    @property
    def event_count(self) -> int:
        return self._events

    def handle(self, event: Event) -> None:
        if event.topic is not Topic.emissions_calculated:
            return
        instance = event.payload
        if not isinstance(instance, Instance):
            logger.error("reporter got an unknown payload: %r", type(instance).__name__)
            return

        with self._lock:
            self._latest[instance.id] = instance
            self._events += 1

        if not self.quiet:
            self.console.print(
                f"[dim]{instance.provider.value}[/] [bold]{instance.name or instance.id}[/] "
                f"({instance.kind}, {instance.region}) "
                f"operational [green]{_operational(instance):.4f} g[/] "
                f"embodied [cyan]{_embodied(instance):.4f} g[/]"
            )

    def stop(self) -> None:
        self.render_summary()

    def render_summary(self) -> None:
        """Print the latest result of every instance seen so far."""
        instances = self.instances
        if not instances:
            self.console.print("[yellow]No emissions calculated[/]")
            return

        table = Table(title="Emissions per instance (latest interval)", show_lines=False)
        table.add_column("Provider", style="dim")
        table.add_column("Instance")
        table.add_column("Kind")
        table.add_column("Region")
        table.add_column("CPU %", justify="right")
        table.add_column("Operational gCO2e", justify="right", style="green")
        table.add_column("Embodied gCO2e", justify="right", style="cyan")

        total_op = 0.0
        total_em = 0.0
        for inst in sorted(instances, key=lambda i: (i.provider.value, i.name, i.id)):
            cpu = inst.get_metric(MetricKind.cpu)
            op = _operational(inst)
            em = _embodied(inst)
            total_op += op
            total_em += em
            table.add_row(
                inst.provider.value,
                inst.name or inst.id,
                inst.kind,
                inst.region,
                f"{cpu.usage:.1f}" if cpu else "-",
                f"{op:.4f}",
                f"{em:.4f}",
            )

        table.add_section()
        table.add_row("", "[bold]Total[/]", "", "", "", f"{total_op:.4f}", f"{total_em:.4f}")
        self.console.print(table)


def _operational(instance: Instance) -> float:
    return sum(m.emissions.value for m in instance.metrics.values() if m.emissions is not None)


def _embodied(instance: Instance) -> float:
    return instance.embodied_emissions.value if instance.embodied_emissions else 0.0
