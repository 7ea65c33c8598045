# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Core Pydantic v2 data models for the emissions pipeline.

This module defines the data contract shared by the providers, the event
bus, the emission-factor resolver and the calculator.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Provider(str, Enum):
    """Supported cloud providers."""

    aws = "aws"
    gcp = "gcp"
    azure = "azure"


class MetricKind(str, Enum):
    """Resource dimension a utilization sample describes."""

    cpu = "cpu"
    memory = "memory"
    storage = "storage"
    network = "network"


class EmissionUnit(str, Enum):
    """Unit attached to an emission value."""

    gco2eq = "gCO2eq"
    gco2eq_kwh = "gCO2eq/kWh"


# ---------------------------------------------------------------------------
# Resource models
# ---------------------------------------------------------------------------

class ResourceEmission(BaseModel):
    """A computed emission value and its unit."""

    model_config = {"frozen": True}

    value: float = Field(..., description="Emission amount")
    unit: EmissionUnit = Field(default=EmissionUnit.gco2eq)


class Metric(BaseModel):
    """One utilization sample for a resource."""

    kind: MetricKind
    usage: float = Field(
        default=0.0, ge=0,
        description="Utilization percentage (0-100, above 100 when bursting)",
    )
    unit_amount: float = Field(
        default=0.0, ge=0, description="Amount of the unit, e.g. the vCPU count"
    )
    unit: str = Field(default="", description="Label for unit_amount, e.g. 'vCPU'")
    emissions: Optional[ResourceEmission] = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Instance(BaseModel):
    """A monitored cloud compute instance."""

    model_config = {"frozen": False, "populate_by_name": True}

    id: str = Field(..., description="Stable provider identifier")
    provider: Provider
    region: str
    zone: str = ""
    kind: str = Field(..., description="Instance type, e.g. 'm5.large'")
    name: str = ""
    lifecycle: str = Field(default="", description="e.g. 'spot', 'scheduled'")
    labels: dict[str, str] = Field(default_factory=dict)

    # Keyed by kind so an instance never holds two samples of one kind
    metrics: dict[MetricKind, Metric] = Field(default_factory=dict)
    embodied_emissions: Optional[ResourceEmission] = None

    @field_validator("metrics")
    @classmethod
    def _key_metrics_by_kind(cls, v: dict[MetricKind, Metric]) -> dict[MetricKind, Metric]:
        keyed: dict[MetricKind, Metric] = {}
        for metric in v.values():
            if metric.kind in keyed:
                raise ValueError(f"duplicate {metric.kind.value} metric")
            keyed[metric.kind] = metric
        return keyed

    def upsert_metric(self, metric: Metric) -> None:
        """Insert *metric*, replacing any stored metric of the same kind."""
        self.metrics[metric.kind] = metric

    def get_metric(self, kind: MetricKind) -> Metric | None:
        return self.metrics.get(kind)


# ---------------------------------------------------------------------------
# Emission factor models
# ---------------------------------------------------------------------------

class Wattage(BaseModel):
    """A (utilization-percentage, watts) control point."""

    model_config = {"frozen": True}

    percentage: float = Field(..., ge=0)
    wattage: float = Field(..., ge=0)


class WattageCurve(BaseModel):
    """Immutable ordered set of wattage control points for an instance kind."""

    model_config = {"frozen": True}

    points: tuple[Wattage, ...] = ()

    @field_validator("points")
    @classmethod
    def _sort_points(cls, v: tuple[Wattage, ...]) -> tuple[Wattage, ...]:
        return tuple(sorted(v, key=lambda w: w.percentage))

    @classmethod
    def two_point(cls, min_watts: float, max_watts: float) -> WattageCurve:
        """Degraded curve from idle and full-load wattage."""
        return cls(points=(
            Wattage(percentage=0, wattage=min_watts),
            Wattage(percentage=100, wattage=max_watts),
        ))

    def __len__(self) -> int:
        return len(self.points)


class EmbodiedSpecs(BaseModel):
    """Fallback hardware specs for an instance kind."""

    model_config = {"populate_by_name": True}

    vcpu: float = Field(default=0.0, ge=0, alias="vCPU")
    total_vcpu: float = Field(default=0.0, ge=0, alias="totalVCPU")
    total_embodied_kwh_co2e: float = Field(
        default=0.0, ge=0, alias="totalEmbodiedKiloWattCO2e"
    )
    min_watts: float = Field(default=0.0, ge=0, alias="minWatts")
    max_watts: float = Field(default=0.0, ge=0, alias="maxWatts")


class EmissionFactors(BaseModel):
    """Per-provider PUE, grid intensities and embodied specs."""

    model_config = {"populate_by_name": True}

    average_pue: float = Field(..., gt=0, alias="averagePUE")
    # metric tons CO2e per kWh, keyed by region
    coefficient: dict[str, float] = Field(default_factory=dict)
    embodied: dict[str, EmbodiedSpecs] = Field(default_factory=dict)


class InstanceSpec(BaseModel):
    """Precise dataset entry for an instance kind."""

    model_config = {"populate_by_name": True}

    vcpu: float = Field(default=0.0, ge=0, alias="vCPU")
    pkg_watt: list[Wattage] = Field(default_factory=list, alias="pkgWatt")
    embodied_hourly_gco2e: float = Field(default=0.0, ge=0, alias="embodiedHourlyGCO2e")
