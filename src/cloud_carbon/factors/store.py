# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Emission-factor dataset stores.

A store hands the calculator two tables per provider:

* ``<provider>.yaml`` -- :class:`EmissionFactors` (PUE, grid coefficients
  per region, fallback embodied specs per instance kind);
* ``<provider>-instances.yaml`` -- the precise per-kind dataset
  (:class:`InstanceSpec`: wattage curve, vCPU, hourly embodied factor).

Fetching a remote copy of the dataset is outside this package; a store
only exposes a ``refresh`` hook the calculator calls once at start-up.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

import yaml
from pydantic import TypeAdapter, ValidationError

from cloud_carbon.data import BUNDLED_EMISSIONS_PATH
from cloud_carbon.data.models import EmissionFactors, InstanceSpec, Provider
from cloud_carbon.errors import FactorDataError

logger = logging.getLogger(__name__)

_INSTANCE_TABLE = TypeAdapter(dict[str, InstanceSpec])


@runtime_checkable
class FactorStore(Protocol):
    """Protocol that every emission-factor source must satisfy."""

    def refresh(self) -> None:
        """Bring the local dataset up to date. Called once per engine start."""
        ...

    def get_provider_emission_factors(self, provider: Provider) -> EmissionFactors:
        """Return PUE, grid coefficients and embodied specs for *provider*."""
        ...

    def get_instance_specs(self, provider: Provider) -> dict[str, InstanceSpec]:
        """Return the precise per-kind dataset for *provider* (may be empty)."""
        ...


class FileFactorStore:
    """Read emission factors from YAML files in a directory."""

    def __init__(self, data_path: str | Path | None = None) -> None:
        self.data_path = Path(data_path).expanduser() if data_path else BUNDLED_EMISSIONS_PATH

    def refresh(self) -> None:
        """Check that the dataset directory is present."""
        if not self.data_path.is_dir():
            raise FactorDataError(f"emission factor dataset not found: {self.data_path}")
        logger.info("using emission factor dataset at %s", self.data_path)

    def get_provider_emission_factors(self, provider: Provider) -> EmissionFactors:
        provider = Provider(provider)
        path = self.data_path / f"{provider.value}.yaml"
        raw = self._read_yaml(path)
        if raw is None:
            raise FactorDataError(f"no emission factors for provider '{provider.value}': {path}")
        try:
            return EmissionFactors.model_validate(raw)
        except ValidationError as exc:
            raise FactorDataError(f"invalid emission factors in {path}: {exc}") from exc

    def get_instance_specs(self, provider: Provider) -> dict[str, InstanceSpec]:
        provider = Provider(provider)
        path = self.data_path / f"{provider.value}-instances.yaml"
        raw = self._read_yaml(path)
        if raw is None:
            logger.debug("no precise instance dataset at %s", path)
            return {}
        try:
            return _INSTANCE_TABLE.validate_python(raw)
        except ValidationError as exc:
            raise FactorDataError(f"invalid instance dataset in {path}: {exc}") from exc

    @staticmethod
    def _read_yaml(path: Path) -> object | None:
        if not path.exists():
            return None
        try:
            with open(path) as f:
                return yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise FactorDataError(f"could not parse {path}: {exc}") from exc
