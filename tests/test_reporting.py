# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Tests for the terminal reporter."""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from cloud_carbon.bus import Topic, emissions_calculated, metrics_collected
from cloud_carbon.data.models import EmissionUnit, MetricKind, ResourceEmission
from cloud_carbon.reporting import TerminalReporter


@pytest.fixture()
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture()
def reporter(output) -> TerminalReporter:
    return TerminalReporter(Console(file=output, width=160, no_color=True))


def _calculated(instance_factory, **overrides):
    instance = instance_factory(**overrides)
    cpu = instance.get_metric(MetricKind.cpu)
    instance.upsert_metric(cpu.model_copy(update={"emissions": ResourceEmission(value=2.2)}))
    instance.embodied_emissions = ResourceEmission(value=0.5, unit=EmissionUnit.gco2eq)
    return instance


class TestTerminalReporter:
    def test_prints_line_per_result(self, reporter, output, instance_factory):
        reporter.handle(emissions_calculated(_calculated(instance_factory)))
        assert "web-01" in output.getvalue()
        assert "2.2000 g" in output.getvalue()
        assert reporter.event_count == 1

    def test_quiet(self, output, instance_factory):
        reporter = TerminalReporter(Console(file=output, width=160), quiet=True)
        reporter.handle(emissions_calculated(_calculated(instance_factory)))
        assert output.getvalue() == ""
        assert reporter.event_count == 1

    def test_keeps_latest_per_instance(self, reporter, instance_factory):
        reporter.handle(emissions_calculated(_calculated(instance_factory)))
        reporter.handle(emissions_calculated(_calculated(instance_factory, name="renamed")))
        reporter.handle(emissions_calculated(_calculated(instance_factory, id="i-other")))
        assert reporter.event_count == 3
        assert sorted(i.name for i in reporter.instances) == ["renamed", "web-01"]

    def test_ignores_other_topics(self, reporter, instance_factory):
        reporter.handle(metrics_collected(instance_factory()))
        assert reporter.event_count == 0

    def test_summary_totals(self, reporter, output, instance_factory):
        reporter.handle(emissions_calculated(_calculated(instance_factory)))
        reporter.handle(emissions_calculated(_calculated(instance_factory, id="i-other")))
        reporter.stop()
        text = output.getvalue()
        assert "Total" in text
        assert "4.4000" in text
        assert "1.0000" in text

    def test_empty_summary(self, reporter, output):
        reporter.stop()
        assert "No emissions calculated" in output.getvalue()

    def test_subscribed_via_bus(self, bus, output, instance_factory):
        reporter = TerminalReporter(Console(file=output, width=160), quiet=True)
        bus.subscribe(Topic.emissions_calculated, reporter)
        bus.publish(emissions_calculated(_calculated(instance_factory)))
        bus.stop()
        assert reporter.event_count == 1
        assert "Total" in output.getvalue()
