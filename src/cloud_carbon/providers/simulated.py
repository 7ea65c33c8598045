# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Simulated provider client.

Generates realistic instance inventories and CPU/memory samples so the
pipeline can be exercised without cloud credentials.  Output is
reproducible for a given ``seed`` option: discovery uses the seed
directly and every collection pass derives its own generator from the
seed and the pass number.

Account options:

* ``seed`` (int | None): RNG seed.
* ``instance_count`` (int): instances to discover; random 5-15 if unset.
* ``regions`` (list[str]): regions to place instances in.
* ``latency_seconds`` (float): sleep before returning metrics.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Any

from cloud_carbon.cache import CachedResource, ResourceCache
from cloud_carbon.config import AccountConfig
from cloud_carbon.data.models import Instance, Metric, MetricKind, Provider
from cloud_carbon.errors import CollectionError
from cloud_carbon.providers import register_provider

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Simulated catalogues: (instance kind, vCPU)
# ---------------------------------------------------------------------------

_SIM_KINDS: dict[Provider, list[tuple[str, int]]] = {
    Provider.aws: [
        ("t3.micro", 2), ("t3.medium", 2),
        ("m5.large", 2), ("m5.xlarge", 4), ("m5.2xlarge", 8),
        ("c5.xlarge", 4), ("r5.large", 2),
    ],
    Provider.gcp: [
        ("e2-standard-2", 2), ("e2-standard-4", 4),
        ("n2-standard-2", 2), ("n2-standard-8", 8),
        ("c2-standard-4", 4),
    ],
    Provider.azure: [
        ("Standard_B2s", 2), ("Standard_D2s_v5", 2), ("Standard_D4s_v5", 4),
        ("Standard_E4s_v5", 4),
    ],
}

_SIM_REGIONS: dict[Provider, list[str]] = {
    Provider.aws: ["us-east-1", "us-west-2", "eu-west-1"],
    Provider.gcp: ["us-central1", "europe-west1", "asia-east1"],
    Provider.azure: ["eastus", "westeurope"],
}

_SIM_NAMES = ["web", "api", "worker", "batch", "db", "cache"]


def _instance_id(provider: Provider, rng: random.Random) -> str:
    if provider is Provider.aws:
        return f"i-{rng.randint(0x1000000000, 0xFFFFFFFFFF):010x}"
    if provider is Provider.gcp:
        return str(rng.randint(1000000000000000, 9999999999999999))
    return f"vm-{rng.randint(0, 0xFFFFFFFF):08x}"


def _zone_for(provider: Provider, region: str, rng: random.Random) -> str:
    if provider is Provider.aws:
        return f"{region}{rng.choice('abc')}"
    if provider is Provider.gcp:
        return f"{region}-{rng.choice('abc')}"
    return str(rng.randint(1, 3))


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class SimulatedProvider:
    """Provider client backed by a seeded random generator."""

    def __init__(self, provider: Provider, account: AccountConfig, cache: ResourceCache) -> None:
        self.provider = Provider(provider)
        self.account = account
        self.cache = cache
        self.options: dict[str, Any] = account.options
        self._seed: int | None = self.options.get("seed")
        self._latency = float(self.options.get("latency_seconds", 0.0))
        self._regions: list[str] = self.options.get("regions") or _SIM_REGIONS[self.provider]
        self._passes = 0
        self._closed = threading.Event()

    def refresh(self, account_id: str) -> None:
        """Discover a simulated inventory for *account_id* into the cache."""
        if self._closed.is_set():
            raise CollectionError(f"{self.provider.value} client for {account_id} is closed")

        rng = random.Random(self._seed)
        count = self.options.get("instance_count") or rng.randint(5, 15)

        for _ in range(count):
            kind, vcpu = rng.choice(_SIM_KINDS[self.provider])
            region = rng.choice(self._regions)
            self.cache.add(CachedResource(
                id=_instance_id(self.provider, rng),
                provider=self.provider,
                region=region,
                zone=_zone_for(self.provider, region, rng),
                kind=kind,
                name=f"{rng.choice(_SIM_NAMES)}-{rng.randint(1, 99):02d}",
                vcpu=vcpu,
                labels={"account": account_id, "simulated": "true"},
            ))
        logger.info(
            "discovered %d simulated %s instances for %s", count, self.provider.value, account_id
        )

    def get_metrics_for_instances(
        self, interval: timedelta, deadline: float | None = None
    ) -> list[Instance]:
        if self._closed.is_set():
            raise CollectionError(f"{self.provider.value} client for {self.account.id} is closed")

        if self._latency:
            time.sleep(self._latency)

        self._passes += 1
        seed = None if self._seed is None else self._seed * 1_000_003 + self._passes
        rng = random.Random(seed)
        now = datetime.now(tz=timezone.utc)

        instances: list[Instance] = []
        for res in self.cache.values():
            if res.provider is not self.provider or res.labels.get("account") != self.account.id:
                continue
            instance = Instance(
                id=res.id,
                provider=res.provider,
                region=res.region,
                zone=res.zone,
                kind=res.kind,
                name=res.name,
                lifecycle=res.lifecycle,
                labels=dict(res.labels),
            )
            instance.upsert_metric(Metric(
                kind=MetricKind.cpu,
                usage=round(rng.uniform(2.0, 95.0), 2),
                unit_amount=res.vcpu,
                unit="vCPU",
                updated_at=now,
            ))
            instance.upsert_metric(Metric(
                kind=MetricKind.memory,
                usage=round(rng.uniform(10.0, 90.0), 2),
                updated_at=now,
            ))
            instances.append(instance)
        return instances

    def shutdown(self) -> None:
        logger.debug("simulated %s client for %s shut down", self.provider.value, self.account.id)

    def close(self) -> None:
        self._closed.set()


# Self-register
register_provider("simulated", SimulatedProvider)
