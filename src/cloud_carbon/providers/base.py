# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Contract between the schedulers and a cloud provider client.

A client owns everything provider-specific: credentials, SDK sessions,
pagination, metric queries.  The scheduler only needs to refresh the
discovered resources, ask for the latest metrics and release the client.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Callable, Protocol, runtime_checkable

from cloud_carbon.cache import ResourceCache
from cloud_carbon.config import AccountConfig
from cloud_carbon.data.models import Instance, Provider


@runtime_checkable
class ProviderClient(Protocol):
    """Protocol that all provider clients must satisfy."""

    def refresh(self, account_id: str) -> None:
        """Discover the account's instances into the resource cache.

        Raises :class:`~cloud_carbon.errors.CollectionError` on failure.
        """
        ...

    def get_metrics_for_instances(
        self, interval: timedelta, deadline: float | None = None
    ) -> list[Instance]:
        """Return every known instance with metrics sampled over *interval*.

        *deadline* is the number of seconds the caller will wait; clients
        should pass it on as their request timeout.
        """
        ...

    def shutdown(self) -> None:
        """Flush and stop background work (exporters, sessions)."""
        ...

    def close(self) -> None:
        """Release connections held by the client."""
        ...


ProviderFactory = Callable[[Provider, AccountConfig, ResourceCache], ProviderClient]
