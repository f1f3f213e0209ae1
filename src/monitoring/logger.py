# JSON logger subscribing to EventBus
"""
Structured logging for monitoring.

Provides:
- JsonFileLogger: appends MonitoringEvents to a JSONL file, one object per
  line, optionally only for selected EventTypes.
- log_event: build a MonitoringEvent stamped with the current time and
  publish it.

Typical wiring (see app.main):

    logger = JsonFileLogger(Path("logs/monitoring/events.log"), default_bus)
    ...
    logger.close()
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Iterable, Optional

from .bus import EventBus
from .events import EventType, MonitoringEvent

log = logging.getLogger(__name__)


# ============================================================
# JSONL File Logger
# ============================================================

class JsonFileLogger:
    """
    Append-only JSONL sink for the monitoring bus.

    The file is opened in append mode so restarts of the bot keep adding to
    the same log. Write failures are logged and the event is dropped.
    """

    def __init__(
        self,
        path: Path,
        bus: EventBus,
        *,
        event_types: Optional[Iterable[EventType]] = None,
    ) -> None:
        self._path = path
        path.parent.mkdir(parents=True, exist_ok=True)
        self._file = path.open("a", encoding="utf-8")
        # Worker threads may publish too.
        self._lock = Lock()
        self._written = 0
        self._closed = False
        self._unsubscribe = bus.subscribe(self._on_event, event_types=event_types)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def events_written(self) -> int:
        return self._written

    def _on_event(self, event: MonitoringEvent) -> None:
        line = json.dumps(event.to_dict(), ensure_ascii=False, default=str)
        with self._lock:
            if self._closed:
                return
            try:
                self._file.write(line + "\n")
                self._file.flush()
            except (OSError, ValueError):
                log.warning("Dropping monitoring event %s", event.event_type.name, exc_info=True)
                return
            self._written += 1

    def close(self) -> None:
        """Unsubscribe and close the file. Safe to call twice."""
        self._unsubscribe()
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._file.close()
        log.debug("Closed %s after %d event(s)", self._path, self._written)


# ============================================================
# Convenience helper for emitting events
# ============================================================

def log_event(
    bus: EventBus,
    module: str,
    event_type: EventType,
    message: str,
    payload: Optional[Dict[str, Any]] = None,
    correlation_id: Optional[str] = None,
) -> None:
    """
    Convenience function to create and publish a MonitoringEvent.

    Parameters
    ----------
    bus:
        EventBus instance to publish the event to.
    module:
        String identifying the source module ("agent.supervisor", "llm_stack.gateway").
    event_type:
        EventType enum member describing what kind of event this is.
    message:
        Short human-readable description.
    payload:
        Structured JSON-safe data attached to this event.
    correlation_id:
        Optional ID linking related events (e.g. per connection attempt).
    """
    event = MonitoringEvent(
        ts=time.time(),
        module=module,
        event_type=event_type,
        message=message,
        payload=payload or {},
        correlation_id=correlation_id,
    )
    bus.publish(event)
