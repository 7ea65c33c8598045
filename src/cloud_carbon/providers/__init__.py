# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Provider clients that discover instances and collect their metrics."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cloud_carbon.providers.base import ProviderFactory

PROVIDER_REGISTRY: dict[str, ProviderFactory] = {}


def register_provider(name: str, factory: ProviderFactory) -> None:
    """Register a provider client factory by name."""
    PROVIDER_REGISTRY[name] = factory


def get_provider(name: str) -> ProviderFactory:
    """Look up a registered provider client factory by name."""
    # Lazy-import known clients to populate the registry
    if name not in PROVIDER_REGISTRY:
        _load_builtin_providers()

    if name not in PROVIDER_REGISTRY:
        available = ", ".join(sorted(PROVIDER_REGISTRY.keys()))
        raise KeyError(f"Unknown provider client '{name}'. Available: {available}")
    return PROVIDER_REGISTRY[name]


def _load_builtin_providers() -> None:
    """Import built-in clients so they self-register."""
    from cloud_carbon.providers import simulated  # noqa: F401
