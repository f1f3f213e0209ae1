# path: src/monitoring/events.py
"""
Event schema for monitoring.

This module defines:
- EventType enum
- MonitoringEvent (structured system events)

All events are JSON-serializable via `.to_dict()` and are intended
for use with monitoring.bus.EventBus and monitoring.logger.JsonFileLogger.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum, auto
from typing import Any, Dict, Optional


# ============================================================
# Event Types
# ============================================================

class EventType(Enum):
    """Typed monitoring events emitted throughout the bot."""

    # Connection lifecycle (connecting, ready, disconnected, reconnecting)
    CONNECTION_STATE = auto()

    # /register or /login sent
    AUTH_SENT = auto()

    # Inbound chat and whispers
    CHAT_RECEIVED = auto()

    # AI backends
    AI_REPLY = auto()
    BACKEND_FAILURE = auto()
    BACKEND_SWITCHED = auto()

    # Structured "!" commands
    COMMAND_EXECUTED = auto()

    # Follow state machine transitions (Idle <-> Following)
    FOLLOW_STATE = auto()

    # Navigation intents (pathfinder goal or fallback nudge)
    NAVIGATION_INTENT = auto()

    # Generic log messages
    LOG = auto()


# ============================================================
# Monitoring Event Structure
# ============================================================

@dataclass
class MonitoringEvent:
    """
    Runtime event emitted by the supervisor, router, gateway or movement
    coordinator.

    All fields must be JSON-safe.
    """

    ts: float                   # UNIX timestamp (seconds)
    module: str                 # Source module string ("agent.router", "agent.movement", ...)
    event_type: EventType       # Enum describing the event class
    message: str                # Short human-readable description
    payload: Dict[str, Any]     # Structured data
    correlation_id: Optional[str] = None  # Used for grouping events per connection

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dict for loggers."""
        data = asdict(self)
        data["event_type"] = self.event_type.name  # store name, not enum
        return data
