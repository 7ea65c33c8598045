# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Shared test fixtures for the cloud-carbon test suite."""

from __future__ import annotations

import logging
import threading
from datetime import timedelta
from pathlib import Path

import pytest

from cloud_carbon.bus import Event, EventBus, Topic
from cloud_carbon.calculator import CalculatorHandler
from cloud_carbon.data.models import Instance, Metric, MetricKind, Provider
from cloud_carbon.factors import FileFactorStore

FACTORS_YAML = """\
averagePUE: 1.2
coefficient:
  test-region: 0.0001
embodied:
  fallback.kind: {vCPU: 2, totalVCPU: 48, totalEmbodiedKiloWattCO2e: 1000.0, minWatts: 10, maxWatts: 100}
  precise.kind: {vCPU: 4, totalVCPU: 48, totalEmbodiedKiloWattCO2e: 1000.0, minWatts: 1, maxWatts: 2}
"""

INSTANCES_YAML = """\
precise.kind:
  vCPU: 4
  pkgWatt:
    - {percentage: 100, wattage: 100}
    - {percentage: 0, wattage: 10}
  embodiedHourlyGCO2e: 12.0
"""


class RecordingHandler:
    """Event handler that records what it receives."""

    def __init__(self, name: str = "", log: list | None = None, fail: bool = False) -> None:
        self.name = name
        self.events: list[Event] = []
        self.log = log if log is not None else []
        self.fail = fail
        self.stopped = 0
        self._lock = threading.Lock()

    def handle(self, event: Event) -> None:
        with self._lock:
            self.events.append(event)
            self.log.append(self.name)
        if self.fail:
            raise RuntimeError(f"{self.name} failed")

    def stop(self) -> None:
        self.stopped += 1


@pytest.fixture()
def factors_dir(tmp_path: Path) -> Path:
    """A dataset directory with one AWS region, a precise and a fallback kind."""
    (tmp_path / "aws.yaml").write_text(FACTORS_YAML)
    (tmp_path / "aws-instances.yaml").write_text(INSTANCES_YAML)
    return tmp_path


@pytest.fixture()
def bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def calculated(bus: EventBus) -> RecordingHandler:
    """Recorder subscribed to emissions_calculated."""
    handler = RecordingHandler("calculated")
    bus.subscribe(Topic.emissions_calculated, handler)
    return handler


@pytest.fixture()
def calculator(bus: EventBus, factors_dir: Path) -> CalculatorHandler:
    handler = CalculatorHandler(bus, FileFactorStore(factors_dir), timedelta(minutes=5))
    bus.subscribe(Topic.metrics_collected, handler)
    return handler


def make_instance(
    kind: str = "fallback.kind",
    region: str = "test-region",
    usage: float = 50.0,
    unit_amount: float = 4,
    **overrides,
) -> Instance:
    """An AWS instance with a single CPU metric."""
    fields = {
        "id": "i-0123456789",
        "provider": Provider.aws,
        "region": region,
        "kind": kind,
        "name": "web-01",
    }
    fields.update(overrides)
    instance = Instance(**fields)
    instance.upsert_metric(Metric(kind=MetricKind.cpu, usage=usage, unit_amount=unit_amount))
    return instance


@pytest.fixture()
def instance_factory():
    return make_instance


@pytest.fixture()
def recorder_factory():
    return RecordingHandler


@pytest.fixture(autouse=True)
def _reset_package_logging():
    """Drop handlers the CLI installs so later tests see default logging."""
    yield
    logger = logging.getLogger("cloud_carbon")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
