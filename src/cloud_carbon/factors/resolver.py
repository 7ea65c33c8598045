# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Resolve grid intensity, PUE and the power/embodied model for an instance.

Instance kinds resolve through two tiers:

1. **precise** -- the kind has an entry in the provider's instance
   dataset; its wattage curve, vCPU count and hourly embodied factor are
   used as-is.
2. **fallback** -- only the embodied specs are known; a two-point curve is
   built from idle/full-load watts and the hourly embodied factor is
   amortized over the server lifespan.

Resolution never fabricates a value: unknown regions and kinds raise.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from cloud_carbon.data.models import (
    EmbodiedSpecs,
    EmissionFactors,
    InstanceSpec,
    Provider,
    WattageCurve,
)
from cloud_carbon.errors import FactorDataError, UnknownInstanceKindError, UnknownRegionError

# AWS, GCP and Azure extended their server lifespan to 6 years in 2024.
SERVER_LIFESPAN_YEARS = 6

TONS_TO_GRAMS = 1000 * 1000


class ModelTier(str, Enum):
    """Which dataset tier an instance model came from."""

    precise = "precise"
    fallback = "fallback"


class GridFactors(BaseModel):
    """Regional inputs to the operational emissions formula."""

    model_config = {"frozen": True}

    grid_co2e: float  # grams CO2e per kWh
    pue: float


class ResolvedModel(BaseModel):
    """Power and embodied model for an instance kind, tagged with its tier."""

    model_config = {"frozen": True}

    tier: ModelTier
    curve: WattageCurve
    vcpu: float = 0.0
    embodied_hourly: float = 0.0


def resolve_grid(provider: Provider, region: str, factors: EmissionFactors) -> GridFactors:
    """Return the region's grid intensity in grams/kWh and the provider PUE."""
    tons = factors.coefficient.get(region)
    if tons is None:
        raise UnknownRegionError(Provider(provider).value, region)
    return GridFactors(grid_co2e=tons * TONS_TO_GRAMS, pue=factors.average_pue)


def hourly_embodied_emissions(specs: EmbodiedSpecs) -> float:
    """Amortize total embodied emissions to one hour of one instance.

    Follows the Cloud Carbon Footprint allocation ``M = TE * (TR/EL) * (RR/TR)``:
    total embodied emissions, times one hour as a share of the expected
    lifespan, times the instance's share of the platform's vCPUs.
    """
    if specs.total_vcpu <= 0:
        raise FactorDataError("embodied specs have no platform vCPU total")
    return (
        specs.total_embodied_kwh_co2e
        * ((1.0 / 24.0 / 365.0) / SERVER_LIFESPAN_YEARS)
        * (specs.vcpu / specs.total_vcpu)
    )


def resolve_instance_model(
    provider: Provider,
    kind: str,
    factors: EmissionFactors,
    instance_specs: dict[str, InstanceSpec],
) -> ResolvedModel:
    """Resolve *kind* against the precise dataset, then the fallback specs."""
    spec = instance_specs.get(kind)
    if spec is not None:
        return ResolvedModel(
            tier=ModelTier.precise,
            curve=WattageCurve(points=tuple(spec.pkg_watt)),
            vcpu=spec.vcpu,
            embodied_hourly=spec.embodied_hourly_gco2e,
        )

    embodied = factors.embodied.get(kind)
    if embodied is None:
        raise UnknownInstanceKindError(Provider(provider).value, kind)

    return ResolvedModel(
        tier=ModelTier.fallback,
        curve=WattageCurve.two_point(embodied.min_watts, embodied.max_watts),
        embodied_hourly=hourly_embodied_emissions(embodied),
    )
