# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Emission-factor stores and resolution."""

from cloud_carbon.factors.resolver import (
    SERVER_LIFESPAN_YEARS,
    GridFactors,
    ModelTier,
    ResolvedModel,
    hourly_embodied_emissions,
    resolve_grid,
    resolve_instance_model,
)
from cloud_carbon.factors.store import FactorStore, FileFactorStore

__all__ = [
    "FactorStore",
    "FileFactorStore",
    "GridFactors",
    "ModelTier",
    "ResolvedModel",
    "SERVER_LIFESPAN_YEARS",
    "hourly_embodied_emissions",
    "resolve_grid",
    "resolve_instance_model",
]
