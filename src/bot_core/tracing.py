# src/bot_core/tracing.py
"""
Tracing for navigation intents.

A thin, structured logging layer around every movement request so that
monitoring and tests can see exactly where the bot was told to go.

It does NOT:
- Move the bot
- Decide where to go
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional

from interfaces import Vec3


@dataclass
class NavigationIntent:
    """
    Structured record of a single navigation request.

    `via` is "pathfinder" (goal handed to the pathfinding collaborator),
    "fallback_walk" (look + walk forward nudge) or "fallback_look" (look
    toward the target and announce it).
    """

    timestamp: float           # wall-clock time (time.time())
    target: Vec3
    radius: float
    via: str
    reason: str


class NavigationTracer:
    """
    In-memory intent tracer with optional logging.

    Responsibilities:
    - Keep a rolling buffer of recent NavigationIntent entries.
    - Emit a single structured log line per intent (debug level).
    """

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        max_records: int = 1_000,
    ) -> None:
        self._logger = logger or logging.getLogger("bot_core.navigation")
        self._records: Deque[NavigationIntent] = deque(maxlen=max_records)

    def record(self, *, target: Vec3, radius: float, via: str, reason: str) -> NavigationIntent:
        intent = NavigationIntent(
            timestamp=time.time(),
            target=target,
            radius=radius,
            via=via,
            reason=reason,
        )
        self._records.append(intent)
        self._logger.debug(
            "navigate reason=%s via=%s target=(%.2f,%.2f,%.2f) radius=%.1f",
            reason,
            via,
            target.x,
            target.y,
            target.z,
            radius,
        )
        return intent

    def get_records(self) -> List[NavigationIntent]:
        """Return a snapshot of all currently buffered intents."""
        return list(self._records)

    def last(self) -> Optional[NavigationIntent]:
        return self._records[-1] if self._records else None
