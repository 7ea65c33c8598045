# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""cloud-carbon - operational and embodied emissions of cloud instances."""

__version__ = "0.1.0"

from cloud_carbon.bus import Event, EventBus, EventHandler, Topic
from cloud_carbon.cache import CachedResource, ResourceCache
from cloud_carbon.calculator import CalculatorHandler
from cloud_carbon.config import AppConfig, load_config
from cloud_carbon.data.models import (
    EmissionFactors,
    Instance,
    InstanceSpec,
    Metric,
    MetricKind,
    Provider,
    ResourceEmission,
    Wattage,
    WattageCurve,
)
from cloud_carbon.factors import FileFactorStore, ModelTier, ResolvedModel
from cloud_carbon.scheduling import AccountScheduler, SchedulerState, new_schedulers

__all__ = [
    "AccountScheduler",
    "AppConfig",
    "CachedResource",
    "CalculatorHandler",
    "EmissionFactors",
    "Event",
    "EventBus",
    "EventHandler",
    "FileFactorStore",
    "Instance",
    "InstanceSpec",
    "Metric",
    "MetricKind",
    "ModelTier",
    "Provider",
    "ResolvedModel",
    "ResourceCache",
    "ResourceEmission",
    "SchedulerState",
    "Topic",
    "Wattage",
    "WattageCurve",
    "load_config",
    "new_schedulers",
]
