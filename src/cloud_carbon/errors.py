# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Exception hierarchy for the emissions pipeline."""

from __future__ import annotations


class CloudCarbonError(Exception):
    """Base class for every error raised by cloud-carbon."""


class FactorDataError(CloudCarbonError):
    """Emission-factor data is missing or unusable."""


class UnknownRegionError(FactorDataError):
    """The region has no grid intensity in the provider's factors."""

    def __init__(self, provider: str, region: str) -> None:
        super().__init__(f"region '{region}' does not exist in factors for provider '{provider}'")
        self.provider = provider
        self.region = region


class UnknownInstanceKindError(FactorDataError):
    """Neither the precise dataset nor the fallback specs know the kind."""

    def __init__(self, provider: str, kind: str) -> None:
        super().__init__(f"no emission factors for instance kind '{kind}' ({provider})")
        self.provider = provider
        self.kind = kind


class CalculationError(CloudCarbonError):
    """An emission could not be computed for a metric."""


class DegenerateInputError(CalculationError):
    """Calculation input cannot produce a meaningful value (no wattage, zero vCPU)."""


class NotImplementedMetricError(CalculationError):
    """The metric kind has no emissions model yet."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"{kind} emissions are not yet being calculated")
        self.kind = kind


class CollectionError(CloudCarbonError):
    """A provider failed to return metrics for a collection pass."""
