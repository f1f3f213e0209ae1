# path: src/monitoring/integration.py
"""
Integration helpers for monitoring.

Convenience functions for emitting well-structured MonitoringEvents from:

- agent.supervisor (connection lifecycle, authentication)
- agent.router / agent.commands (chat, commands)
- llm_stack.gateway (replies, failures, backend switches)
- agent.movement (follow state, navigation intents)

All functions are thin wrappers around monitoring.logger.log_event
and enforce consistent payload shapes across the codebase.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .bus import EventBus
from .events import EventType
from .logger import log_event


JsonDict = Dict[str, Any]


# ============================================================
# Connection supervisor
# ============================================================

def emit_connection_state(
    bus: EventBus,
    state: str,
    *,
    attempt: Optional[int] = None,
    reason: Optional[str] = None,
) -> None:
    """
    Emit a CONNECTION_STATE event.

    Expected states: "CONNECTING", "READY", "DISCONNECTED", "RECONNECT_SCHEDULED",
    "CONNECT_FAILED", "QUIT".
    """
    payload: JsonDict = {"state": state, "attempt": attempt, "reason": reason}
    log_event(
        bus=bus,
        module="agent.supervisor",
        event_type=EventType.CONNECTION_STATE,
        message=f"Connection state {state}",
        payload=payload,
        correlation_id=None if attempt is None else f"attempt-{attempt}",
    )


def emit_auth_sent(bus: EventBus, mode: str, auth_phase: str) -> None:
    """Emit AUTH_SENT; `mode` is "register" or "login". Never carries the password."""
    log_event(
        bus=bus,
        module="agent.supervisor",
        event_type=EventType.AUTH_SENT,
        message=f"Sent /{mode}",
        payload={"mode": mode, "auth_phase": auth_phase},
    )


# ============================================================
# Router / commands
# ============================================================

def emit_chat_received(bus: EventBus, speaker: str, text: str, *, whisper: bool) -> None:
    log_event(
        bus=bus,
        module="agent.router",
        event_type=EventType.CHAT_RECEIVED,
        message=f"{'Whisper' if whisper else 'Chat'} from {speaker}",
        payload={"speaker": speaker, "text": text, "whisper": whisper},
    )


def emit_command_executed(
    bus: EventBus,
    command: str,
    speaker: str,
    args: List[str],
) -> None:
    log_event(
        bus=bus,
        module="agent.commands",
        event_type=EventType.COMMAND_EXECUTED,
        message=f"Command {command} from {speaker}",
        payload={"command": command, "speaker": speaker, "args": list(args)},
    )


# ============================================================
# AI gateway
# ============================================================

def emit_ai_reply(bus: EventBus, backend: str, speaker: str, reply: str) -> None:
    log_event(
        bus=bus,
        module="llm_stack.gateway",
        event_type=EventType.AI_REPLY,
        message=f"{backend} replied to {speaker}",
        payload={"backend": backend, "speaker": speaker, "reply": reply},
    )


def emit_backend_failure(bus: EventBus, backend: str, error: str) -> None:
    log_event(
        bus=bus,
        module="llm_stack.gateway",
        event_type=EventType.BACKEND_FAILURE,
        message=f"{backend} backend failed",
        payload={"backend": backend, "error": error},
    )


def emit_backend_switched(bus: EventBus, backend: str) -> None:
    log_event(
        bus=bus,
        module="llm_stack.gateway",
        event_type=EventType.BACKEND_SWITCHED,
        message=f"Active backend is now {backend}",
        payload={"backend": backend},
    )


# ============================================================
# Movement
# ============================================================

def emit_follow_state(bus: EventBus, state: str, target: Optional[str]) -> None:
    """state is "FOLLOWING" or "IDLE"."""
    log_event(
        bus=bus,
        module="agent.movement",
        event_type=EventType.FOLLOW_STATE,
        message=f"Follow state {state}",
        payload={"state": state, "target": target},
    )


def emit_navigation_intent(
    bus: EventBus,
    target: JsonDict,
    *,
    radius: float,
    via: str,
    reason: str,
) -> None:
    """
    `via` is "pathfinder", "fallback_walk" or "fallback_look"; `reason` names
    the command or tick that produced the intent ("follow", "home", "find").
    """
    log_event(
        bus=bus,
        module="agent.movement",
        event_type=EventType.NAVIGATION_INTENT,
        message=f"Navigate ({reason}) via {via}",
        payload={"target": target, "radius": radius, "via": via, "reason": reason},
    )
