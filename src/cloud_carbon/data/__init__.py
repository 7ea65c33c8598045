# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Data models and the bundled emission-factor dataset."""

from pathlib import Path

from cloud_carbon.data.models import (
    EmbodiedSpecs,
    EmissionFactors,
    EmissionUnit,
    Instance,
    InstanceSpec,
    Metric,
    MetricKind,
    Provider,
    ResourceEmission,
    Wattage,
    WattageCurve,
)

BUNDLED_EMISSIONS_PATH = Path(__file__).parent / "emissions"

__all__ = [
    "BUNDLED_EMISSIONS_PATH",
    "EmbodiedSpecs",
    "EmissionFactors",
    "EmissionUnit",
    "Instance",
    "InstanceSpec",
    "Metric",
    "MetricKind",
    "Provider",
    "ResourceEmission",
    "Wattage",
    "WattageCurve",
]
