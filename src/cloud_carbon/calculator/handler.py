# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Bus handler that turns collected metrics into emissions.

On construction the handler refreshes the factor store once and loads the
emission factors and precise instance dataset of every provider.  Those
tables belong to the handler instance and are only replaced by
:meth:`CalculatorHandler.reload`.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Callable

from cloud_carbon.bus.bus import EventBus
from cloud_carbon.bus.events import Event, Topic, emissions_calculated
from cloud_carbon.calculator.formulas import embodied_emissions, operational_emissions
from cloud_carbon.config import DEFAULT_INTERVAL
from cloud_carbon.data.models import (
    EmissionFactors,
    EmissionUnit,
    Instance,
    InstanceSpec,
    Provider,
    ResourceEmission,
)
from cloud_carbon.errors import (
    CalculationError,
    FactorDataError,
    NotImplementedMetricError,
)
from cloud_carbon.factors.resolver import resolve_grid, resolve_instance_model
from cloud_carbon.factors.store import FactorStore

logger = logging.getLogger(__name__)


class CalculatorHandler:
    """Compute operational and embodied emissions for collected instances.

    Usage::

        handler = CalculatorHandler(bus, FileFactorStore())
        bus.subscribe(Topic.metrics_collected, handler)
    """

    def __init__(
        self,
        bus: EventBus,
        store: FactorStore,
        interval: timedelta = DEFAULT_INTERVAL,
    ) -> None:
        self.bus = bus
        self.store = store
        self.interval = interval
        self._factors: dict[Provider, EmissionFactors] = {}
        self._instance_specs: dict[Provider, dict[str, InstanceSpec]] = {}
        self._routes: dict[Topic, Callable[[Event], None] | None] = {
            Topic.metrics_collected: self._handle_metrics_collected,
            Topic.emissions_calculated: None,
        }
        missing = set(Topic) - set(self._routes)
        if missing:
            raise RuntimeError(f"calculator has no route for topics: {sorted(missing)}")

        self.store.refresh()
        self.reload()

    # ------------------------------------------------------------------
    # EventHandler protocol
    # ------------------------------------------------------------------

    def handle(self, event: Event) -> None:
        route = self._routes[event.topic]
        if route is not None:
            route(event)

    def stop(self) -> None:
        pass

    # ------------------------------------------------------------------
    # Factor tables
    # ------------------------------------------------------------------

    def reload(self) -> None:
        """Re-read the factor tables of every provider from the store."""
        factors: dict[Provider, EmissionFactors] = {}
        specs: dict[Provider, dict[str, InstanceSpec]] = {}
        for provider in Provider:
            try:
                factors[provider] = self.store.get_provider_emission_factors(provider)
            except FactorDataError as exc:
                logger.warning("no emission factors for %s: %s", provider.value, exc)
                continue
            try:
                specs[provider] = self.store.get_instance_specs(provider)
            except FactorDataError as exc:
                logger.warning(
                    "unable to load precise instance data for %s, using fallback specs: %s",
                    provider.value, exc,
                )
                specs[provider] = {}
        self._factors = factors
        self._instance_specs = specs

    # ------------------------------------------------------------------
    # Calculation
    # ------------------------------------------------------------------

    def _handle_metrics_collected(self, event: Event) -> None:
        instance = event.payload
        if not isinstance(instance, Instance):
            logger.error("calculator got an unknown payload: %r", type(instance).__name__)
            return

        interval = self.interval if event.interval is None else event.interval
        calculated = self.calculate(instance, interval)
        if calculated is not None:
            self.bus.publish(emissions_calculated(calculated, event.interval))

    def calculate(self, instance: Instance, interval: timedelta) -> Instance | None:
        """Return an annotated copy of *instance*, or ``None`` if it was skipped."""
        factors = self._factors.get(instance.provider)
        if factors is None:
            logger.error("no emission factors loaded for provider %s", instance.provider.value)
            return None

        try:
            grid = resolve_grid(instance.provider, instance.region, factors)
            model = resolve_instance_model(
                instance.provider,
                instance.kind,
                factors,
                self._instance_specs.get(instance.provider, {}),
            )
        except FactorDataError as exc:
            logger.error("skipping instance %s (%s): %s", instance.name or instance.id, instance.kind, exc)
            return None

        logger.debug("instance %s resolved with %s tier", instance.id, model.tier.value)
        instance = instance.model_copy(deep=True)

        for metric in list(instance.metrics.values()):
            try:
                value = operational_emissions(interval, metric, grid, model)
            except NotImplementedMetricError as exc:
                logger.warning("not implemented: %s (instance %s)", exc, instance.id)
                continue
            except CalculationError as exc:
                logger.error(
                    "failed calculating operational emissions for %s on %s: %s",
                    metric.kind.value, instance.id, exc,
                )
                continue
            instance.upsert_metric(metric.model_copy(
                update={"emissions": ResourceEmission(value=value, unit=EmissionUnit.gco2eq)}
            ))

        instance.embodied_emissions = ResourceEmission(
            value=embodied_emissions(interval, model.embodied_hourly),
            unit=EmissionUnit.gco2eq,
        )
        return instance
