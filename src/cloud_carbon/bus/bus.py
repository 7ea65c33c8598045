# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Synchronous in-process publish/subscribe bus.

Handlers are kept in an ordered registry per topic.  ``publish`` runs on
the caller's thread and invokes every handler for the event's topic in
registration order.  Each invocation is isolated: an exception raised by
one handler is logged and the remaining handlers still run.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol, runtime_checkable

from cloud_carbon.bus.events import Event, Topic

logger = logging.getLogger(__name__)


@runtime_checkable
class EventHandler(Protocol):
    """Capability registered against a topic."""

    def handle(self, event: Event) -> None:
        """Process a published event."""
        ...

    def stop(self) -> None:
        """Release any resources held by the handler."""
        ...


class EventBus:
    """Topic-keyed ordered registry of handlers with isolated dispatch."""

    def __init__(self) -> None:
        self._handlers: dict[Topic, list[EventHandler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, topic: Topic, handler: EventHandler) -> None:
        """Register *handler* for *topic*, after any existing handlers."""
        with self._lock:
            self._handlers.setdefault(Topic(topic), []).append(handler)

    def unsubscribe(self, topic: Topic, handler: EventHandler) -> bool:
        """Remove *handler* from *topic*. Returns ``False`` if it was not registered."""
        with self._lock:
            handlers = self._handlers.get(Topic(topic), [])
            if handler not in handlers:
                return False
            handlers.remove(handler)
            return True

    def subscribers(self, topic: Topic) -> list[EventHandler]:
        with self._lock:
            return list(self._handlers.get(Topic(topic), []))

    def publish(self, event: Event) -> None:
        """Dispatch *event* to the handlers of its topic.

        Publishing to a topic without subscribers is a no-op.
        """
        for handler in self.subscribers(event.topic):
            try:
                handler.handle(event)
            except Exception:
                logger.exception(
                    "handler %s failed on %s event", type(handler).__name__, event.topic.value
                )

    def stop(self) -> None:
        """Stop every distinct registered handler once."""
        with self._lock:
            seen: list[EventHandler] = []
            for handlers in self._handlers.values():
                for handler in handlers:
                    if not any(handler is h for h in seen):
                        seen.append(handler)
        for handler in seen:
            try:
                handler.stop()
            except Exception:
                logger.exception("handler %s failed to stop", type(handler).__name__)
