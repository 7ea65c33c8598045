# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Per-account collection schedulers.

Each :class:`AccountScheduler` runs its own daemon thread: one collection
pass immediately, then one pass per interval.  A pass asks the provider
client for the latest metrics and publishes one ``metrics_collected``
event per instance.

Passes are serialized.  The loop thread runs them one after another and
a per-scheduler lock keeps a manual :meth:`AccountScheduler.run_once` from
overlapping the loop; a pass that outlasts the interval delays the next
tick instead of running alongside it.

Provider calls run on a single worker thread and are awaited for at most
``collection_timeout`` seconds, so a stuck call abandons the pass rather
than the loop.  Cancellation is a ``threading.Event``: it is observed
while waiting for a tick, while waiting on the provider and between
publishes, and setting it twice is harmless.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import timedelta
from enum import Enum

from cloud_carbon.bus.bus import EventBus
from cloud_carbon.bus.events import metrics_collected
from cloud_carbon.cache import ResourceCache
from cloud_carbon.config import AccountConfig, AppConfig
from cloud_carbon.data.models import Instance, Provider
from cloud_carbon.errors import CollectionError
from cloud_carbon.providers import get_provider
from cloud_carbon.providers.base import ProviderClient

logger = logging.getLogger(__name__)

# How long cancel() waits for the loop thread before releasing the client.
_CANCEL_GRACE_SECONDS = 5.0

# Granularity at which a waiting pass re-checks the cancellation flag.
_POLL_SECONDS = 0.1


class SchedulerState(str, Enum):
    """Lifecycle of a scheduler. There is no way back to ``idle``."""

    idle = "idle"
    scheduled = "scheduled"
    cancelled = "cancelled"


class AccountScheduler:
    """Collect metrics for one provider account on a fixed interval."""

    def __init__(
        self,
        provider: Provider,
        account: AccountConfig,
        client: ProviderClient,
        bus: EventBus,
        interval: timedelta,
        collection_timeout: float = 30.0,
    ) -> None:
        if interval.total_seconds() <= 0:
            raise ValueError(f"scheduler interval must be positive, got {interval}")
        self.provider = Provider(provider)
        self.account = account
        self.client = client
        self.bus = bus
        self.interval = interval
        self.collection_timeout = collection_timeout

        self._cancelled = threading.Event()
        self._pass_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._state = SchedulerState.idle
        self._thread: threading.Thread | None = None
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=f"{self.provider.value}-{account.id}-collect"
        )

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def name(self) -> str:
        return f"{self.provider.value}/{self.account.id}"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def schedule(self) -> None:
        """Start the collection loop. Calling it again has no effect."""
        with self._state_lock:
            if self._state is not SchedulerState.idle:
                return
            self._state = SchedulerState.scheduled
            self._thread = threading.Thread(
                target=self._loop, name=f"scheduler-{self.name}", daemon=True
            )
            self._thread.start()
        logger.info("started %s scheduling every %s", self.name, self.interval)

    def cancel(self) -> None:
        """Stop the loop and release the provider client.

        Only the first call does anything.  Calling ``cancel`` before
        ``schedule`` is not a supported sequence; it still releases the
        client and leaves the scheduler cancelled.
        """
        with self._state_lock:
            if self._state is SchedulerState.cancelled:
                return
            self._state = SchedulerState.cancelled
            self._cancelled.set()
            thread = self._thread

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=_CANCEL_GRACE_SECONDS)
            if thread.is_alive():
                logger.warning("%s loop still busy after %ss, releasing client anyway",
                               self.name, _CANCEL_GRACE_SECONDS)

        self._executor.shutdown(wait=False, cancel_futures=True)
        try:
            self.client.shutdown()
        except Exception:
            logger.exception("failed to shut down %s client", self.name)
        try:
            self.client.close()
        except Exception:
            logger.exception("failed to close %s client", self.name)
        logger.info("cancelled %s scheduling", self.name)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the scheduler is cancelled. Returns ``True`` if it was."""
        return self._cancelled.wait(timeout)

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------

    def run_once(self) -> int:
        """Run one collection pass. Returns the number of events published."""
        with self._pass_lock:
            if self._cancelled.is_set():
                return 0
            try:
                instances = self._collect()
            except Exception as exc:
                logger.error("failed to scrape %s instance metrics: %s", self.name, exc)
                return 0

            published = 0
            for instance in instances:
                if self._cancelled.is_set():
                    break
                self.bus.publish(metrics_collected(instance, self.interval))
                published += 1
            logger.debug("%s pass published %d instances", self.name, published)
            return published

    def _collect(self) -> list[Instance]:
        future = self._executor.submit(
            self.client.get_metrics_for_instances, self.interval, self.collection_timeout
        )
        give_up = time.monotonic() + self.collection_timeout
        while True:
            try:
                return future.result(timeout=_POLL_SECONDS)
            except FutureTimeoutError:
                pass
            if self._cancelled.is_set():
                future.cancel()
                return []
            if time.monotonic() >= give_up:
                future.cancel()
                raise CollectionError(
                    f"collection did not finish within {self.collection_timeout}s"
                )

    def _loop(self) -> None:
        seconds = self.interval.total_seconds()
        self.run_once()
        while not self._cancelled.wait(seconds):
            self.run_once()


def new_schedulers(
    config: AppConfig,
    bus: EventBus,
    cache: ResourceCache | None = None,
) -> list[AccountScheduler]:
    """Build a scheduler for every account of every enabled provider.

    Accounts whose client cannot be created or refreshed, or whose
    interval is not positive, are logged and skipped.  Unknown provider
    names are skipped the same way.  Only the in-memory cache store is
    supported; any other store schedules nothing.
    """
    if cache is None and config.cache.store != "memory":
        logger.error("cache store '%s' not yet supported", config.cache.store)
        return []

    schedulers: list[AccountScheduler] = []
    caches: dict[Provider, ResourceCache] = {}

    for name, provider_cfg in config.providers.items():
        if not provider_cfg.enabled:
            continue
        try:
            provider = Provider(name)
        except ValueError:
            logger.error("unknown provider '%s' in config, skipping", name)
            continue

        try:
            factory = get_provider(provider_cfg.type or "simulated")
        except KeyError as exc:
            logger.error("%s: %s", name, exc)
            continue

        provider_cache = cache if cache is not None else caches.setdefault(
            provider, ResourceCache(config.cache.expiry)
        )

        for account in provider_cfg.accounts:
            interval = config.account_interval(name, account)
            if interval.total_seconds() <= 0:
                logger.error(
                    "%s account %s has a non-positive interval %s, skipping",
                    name, account.id, interval,
                )
                continue

            try:
                client = factory(provider, account, provider_cache)
                client.refresh(account.id)
            except Exception as exc:
                logger.error("failed to initialise %s account %s: %s", name, account.id, exc)
                continue

            schedulers.append(AccountScheduler(
                provider,
                account,
                client,
                bus,
                interval=interval,
                collection_timeout=config.collection_timeout_seconds,
            ))

    return schedulers
