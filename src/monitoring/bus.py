# EventBus for monitoring events
"""
In-process pub/sub for MonitoringEvents.

Publishers are the supervisor, router, commands, gateway and movement
coordinator (through monitoring.integration). Subscribers are the JSONL
logger, the dashboard and tests. A subscriber may ask for a subset of
EventTypes only.

publish() is safe from any thread: the gateway's worker threads and the
event-loop thread both publish.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Callable, FrozenSet, Iterable, List, Optional

from .events import EventType, MonitoringEvent

log = logging.getLogger(__name__)


# ============================================================
# Type aliases
# ============================================================

SubscriberFn = Callable[[MonitoringEvent], None]
Unsubscribe = Callable[[], None]


@dataclass(frozen=True)
class _Subscription:
    fn: SubscriberFn
    event_types: Optional[FrozenSet[EventType]]  # None: everything

    def wants(self, event: MonitoringEvent) -> bool:
        return self.event_types is None or event.event_type in self.event_types


# ============================================================
# Event Bus
# ============================================================

class EventBus:
    """
    Thread-safe event bus.

    Delivery happens on the publishing thread, in subscription order.
    A failing subscriber is logged and the remaining ones still run.
    """

    def __init__(self) -> None:
        self._subscriptions: List[_Subscription] = []
        self._lock = Lock()

    # --------------------------------------------------------
    # Subscription API
    # --------------------------------------------------------

    def subscribe(
        self,
        fn: SubscriberFn,
        *,
        event_types: Optional[Iterable[EventType]] = None,
    ) -> Unsubscribe:
        """
        Register `fn`, optionally for the given event types only.

        Returns a zero-argument callable that removes this subscription.
        """
        subscription = _Subscription(
            fn=fn,
            event_types=None if event_types is None else frozenset(event_types),
        )
        with self._lock:
            self._subscriptions.append(subscription)

        def _unsubscribe() -> None:
            with self._lock:
                if subscription in self._subscriptions:
                    self._subscriptions.remove(subscription)

        return _unsubscribe

    def unsubscribe(self, fn: SubscriberFn) -> None:
        """Remove every subscription of `fn`. Unknown callables are ignored."""
        with self._lock:
            self._subscriptions = [s for s in self._subscriptions if s.fn != fn]

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    # --------------------------------------------------------
    # Publish API
    # --------------------------------------------------------

    def publish(self, event: MonitoringEvent) -> None:
        # Snapshot so subscribers may (un)subscribe while being called.
        with self._lock:
            targets = [s.fn for s in self._subscriptions if s.wants(event)]

        for fn in targets:
            try:
                fn(event)
            except Exception:
                log.exception("Monitoring subscriber %r failed on %s", fn, event.event_type.name)


# The CLI uses a single process-wide bus; tests build their own.
default_bus = EventBus()
