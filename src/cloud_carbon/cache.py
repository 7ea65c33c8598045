# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Keyed store of discovered cloud resources.

Providers add resources on ``refresh`` and read them back on every
collection pass, so discovery does not have to run per tick.  A single
lock guards the underlying map.
"""

from __future__ import annotations

import threading
import time
from datetime import timedelta

from pydantic import BaseModel, Field

from cloud_carbon.data.models import Provider


class CachedResource(BaseModel):
    """A discovered resource as stored by a provider."""

    id: str
    provider: Provider
    region: str
    zone: str = ""
    service: str = Field(default="compute", description="e.g. 'ec2', 'compute'")
    kind: str
    name: str = ""
    lifecycle: str = ""
    vcpu: int = Field(default=0, ge=0)
    labels: dict[str, str] = Field(default_factory=dict)


class ResourceCache:
    """Thread-safe resource map with optional per-entry expiry."""

    def __init__(self, expiry: timedelta | None = None) -> None:
        self._expiry = expiry.total_seconds() if expiry else None
        self._entries: dict[str, tuple[float, CachedResource]] = {}
        self._lock = threading.Lock()

    def add(self, resource: CachedResource) -> None:
        with self._lock:
            self._entries[resource.id] = (time.monotonic(), resource)

    def get(self, key: str) -> CachedResource | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry[0]):
                del self._entries[key]
                return None
            return entry[1]

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def values(self) -> list[CachedResource]:
        """Return live resources in insertion order, evicting expired ones."""
        with self._lock:
            stale = [k for k, (ts, _) in self._entries.items() if self._expired(ts)]
            for k in stale:
                del self._entries[k]
            return [res for _, res in self._entries.values()]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self.values())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def _expired(self, stored_at: float) -> bool:
        return self._expiry is not None and time.monotonic() - stored_at > self._expiry
