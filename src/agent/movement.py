# src/agent/movement.py
"""
Movement coordinator.

Owns the follow state machine (Idle -> Following -> Idle) and turns every
"go there" request into a navigation intent: a GoalNear handed to the
pathfinding collaborator when the bridge has one, or a degraded fallback
when it does not.

Fallbacks:
- follow tick: look at the player and walk forward for one second
- location: look toward the target and announce "Heading to x, y, z..."
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from bot_core.scheduler import EventLoop, TimerHandle
from bot_core.tracing import NavigationTracer
from interfaces import GoalNear, Vec3
from monitoring.bus import EventBus
from monitoring.integration import emit_follow_state, emit_navigation_intent

from .outbound import ChatOutbox
from .session import Session

log = logging.getLogger(__name__)

FOLLOW_TICK_S = 1.0
FOLLOW_DISTANCE = 3.0
FOLLOW_RADIUS = 2.0
LOCATION_RADIUS = 1.0
NUDGE_DURATION_S = 1.0


def _coords_text(pos: Vec3) -> str:
    return f"{math.floor(pos.x)}, {math.floor(pos.y)}, {math.floor(pos.z)}"


class MovementCoordinator:
    def __init__(
        self,
        session: Session,
        loop: EventLoop,
        outbox: ChatOutbox,
        *,
        tracer: Optional[NavigationTracer] = None,
        bus: Optional[EventBus] = None,
    ) -> None:
        self._session = session
        self._loop = loop
        self._outbox = outbox
        self.tracer = tracer or NavigationTracer()
        self._bus = bus
        self._tick_handle: Optional[TimerHandle] = None

    # ------------------------------------------------------------------
    # Follow
    # ------------------------------------------------------------------

    def follow(self, target_name: str) -> bool:
        """
        Start following `target_name` if it is a connected player.

        The name is resolved exactly first, then case-insensitively, and
        the server's spelling is what gets stored.
        """
        resolved = self._session.resolve_player(target_name)
        if resolved is None:
            self._outbox.announce(f"Player {target_name} not found!")
            return False

        self._cancel_tick()
        generation = self._session.follow.start(resolved)
        self._outbox.announce(f"Now following {resolved}!")
        log.info("Following %s (generation %d)", resolved, generation)
        if self._bus is not None:
            emit_follow_state(self._bus, "FOLLOWING", resolved)
        self._tick_handle = self._loop.call_every(FOLLOW_TICK_S, self._follow_tick, generation)
        return True

    def stop(self) -> None:
        """Force Idle and clear any outstanding goal. Always announces."""
        previous = self._session.follow.target_name
        self._session.follow.clear()
        self._cancel_tick()

        client = self._session.client
        if client is not None and client.pathfinder is not None:
            client.pathfinder.clear_goal()

        self._outbox.announce("Stopped following.")
        if previous is not None:
            log.info("Stopped following %s", previous)
        if self._bus is not None:
            emit_follow_state(self._bus, "IDLE", previous)

    def _follow_tick(self, generation: int) -> None:
        follow = self._session.follow
        if not follow.owns(generation):
            # Superseded by !stop or a newer !follow.
            self._cancel_tick(generation)
            return

        client = self._session.client
        if client is None:
            return

        target_name = follow.target_name
        if target_name is None:
            self._cancel_tick(generation)
            return
        player = client.players().get(target_name)
        if player is None or player.entity is None:
            self._outbox.announce(f"Lost sight of {target_name}!")
            self.stop()
            return

        target = player.entity.position
        if client.position().distance_to(target) <= FOLLOW_DISTANCE:
            return

        if client.pathfinder is not None:
            client.pathfinder.set_goal(GoalNear.around(target, FOLLOW_RADIUS))
            self._trace(target, FOLLOW_RADIUS, "pathfinder", "follow")
        else:
            client.look_at(target)
            client.set_control_state("forward", True)
            self._loop.call_later(NUDGE_DURATION_S, self._release_forward)
            self._trace(target, FOLLOW_RADIUS, "fallback_walk", "follow")

    def _release_forward(self) -> None:
        client = self._session.client
        if client is not None:
            client.set_control_state("forward", False)

    def _cancel_tick(self, generation: Optional[int] = None) -> None:
        if self._tick_handle is None:
            return
        if generation is not None and self._tick_handle.args != (generation,):
            return
        self._tick_handle.cancel()
        self._tick_handle = None

    # ------------------------------------------------------------------
    # Point navigation
    # ------------------------------------------------------------------

    def navigate_to(self, target: Vec3, *, reason: str) -> None:
        client = self._session.require_client()
        if client.pathfinder is not None:
            client.pathfinder.set_goal(GoalNear.around(target, LOCATION_RADIUS))
            self._trace(target, LOCATION_RADIUS, "pathfinder", reason)
        else:
            client.look_at(target)
            self._outbox.announce(f"Heading to {_coords_text(target)}...")
            self._trace(target, LOCATION_RADIUS, "fallback_look", reason)

    def _trace(self, target: Vec3, radius: float, via: str, reason: str) -> None:
        self.tracer.record(target=target, radius=radius, via=via, reason=reason)
        if self._bus is not None:
            emit_navigation_intent(
                self._bus,
                {"x": target.x, "y": target.y, "z": target.z},
                radius=radius,
                via=via,
                reason=reason,
            )
