# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Configuration models and YAML loader.

Values are read, not interpreted: the scheduler and calculator take what
they need from here and never validate business meaning beyond the
field constraints below.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

DEFAULT_INTERVAL = timedelta(minutes=5)


# ---------------------------------------------------------------------------
# Provider accounts
# ---------------------------------------------------------------------------

class AccountConfig(BaseModel):
    """A single provider account (AWS account, GCP project, Azure subscription)."""

    id: str = Field(..., description="Account, project or subscription identifier")
    interval: timedelta | None = Field(
        default=None, description="Sampling interval; falls back to the provider's"
    )
    options: dict[str, Any] = Field(
        default_factory=dict, description="Provider-specific options"
    )


class ProviderConfig(BaseModel):
    """All accounts configured for one provider."""

    enabled: bool = Field(default=True)
    type: str | None = Field(
        default=None, description="Registered provider client; defaults to 'simulated'"
    )
    interval: timedelta | None = Field(default=None)
    accounts: list[AccountConfig] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Factors & cache
# ---------------------------------------------------------------------------

class FactorsConfig(BaseModel):
    """Where the emission-factor dataset lives."""

    data_path: str | None = Field(
        default=None, description="Dataset directory; the bundled dataset if unset"
    )


class CacheConfig(BaseModel):
    """Resource cache selection."""

    store: str = Field(default="memory")
    expiry_seconds: int | None = Field(default=None, ge=1)

    @property
    def expiry(self) -> timedelta | None:
        if self.expiry_seconds is None:
            return None
        return timedelta(seconds=self.expiry_seconds)


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------

class AppConfig(BaseModel):
    """Top-level configuration loaded from YAML."""

    providers: dict[str, ProviderConfig] = Field(default_factory=dict)
    interval: timedelta = Field(
        default=DEFAULT_INTERVAL, description="Global sampling interval fallback"
    )
    collection_timeout_seconds: float = Field(default=30.0, gt=0)
    factors: FactorsConfig = Field(default_factory=FactorsConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    log_level: str = Field(default="INFO")

    def account_interval(self, provider: str, account: AccountConfig) -> timedelta:
        """Resolve an account's sampling interval: account, provider, then global."""
        if account.interval is not None:
            return account.interval
        provider_cfg = self.providers.get(provider)
        if provider_cfg is not None and provider_cfg.interval is not None:
            return provider_cfg.interval
        return self.interval


def load_config(path: str | Path) -> AppConfig:
    """Load an AppConfig from a YAML file."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    return AppConfig.model_validate(raw)
