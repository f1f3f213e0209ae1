# GameClient / Pathfinder / PacketTransport interface definitions
# src/interfaces/game_client.py

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from .types import BlockQuery, EntityInfo, GoalNear, PlayerInfo, Vec3

# Lifecycle events every GameClient must be able to emit.
GAME_EVENTS = ("ready", "chat", "whisper", "error", "disconnected")

# Handlers receive event-specific positional arguments:
#   ready()                      chat(username, message)
#   whisper(username, message)   error(exc)          disconnected(reason)
GameEventHandler = Callable[..., None]

# Type alias for packet handlers.
PacketHandler = Callable[[Mapping[str, Any]], None]


class PacketTransport(Protocol):
    """
    Message-level link to the process that actually speaks the game protocol.

    Implementations:
    - BridgeTransport (newline-delimited JSON over TCP)
    - FakePacketTransport (tests)
    """

    def connect(self) -> None:
        """Open the link."""
        ...

    def disconnect(self) -> None:
        """Close the link. Safe to call when already closed."""
        ...

    @property
    def connected(self) -> bool:
        ...

    def tick(self) -> None:
        """
        Pump incoming data and dispatch complete messages to registered
        handlers. Called regularly from the event loop.
        """
        ...

    def send_packet(self, packet_type: str, data: Mapping[str, Any]) -> None:
        """Send a single message."""
        ...

    def request(self, op: str, args: Mapping[str, Any]) -> Any:
        """Send a request and block until its response arrives."""
        ...

    def on_packet(self, packet_type: str, handler: PacketHandler) -> None:
        """
        Register a handler for messages of a given type.

        Several handlers may be registered for the same type; they run in
        registration order.
        """
        ...


class Pathfinder(Protocol):
    """Optional navigation collaborator."""

    def set_goal(self, goal: GoalNear) -> None:
        """Start moving toward `goal`, replacing any previous goal."""
        ...

    def clear_goal(self) -> None:
        """Stop navigating."""
        ...


class GameClient(Protocol):
    """Abstract interface for a connected game session.

    This is the body the orchestration layer drives:
    - lifecycle (connect / quit) and lifecycle events
    - chat and whisper output
    - player, entity and block lookups
    - primitive movement (look + control states) and optional pathfinding
    """

    @property
    def username(self) -> str:
        ...

    @property
    def pathfinder(self) -> Optional[Pathfinder]:
        """The pathfinding collaborator, or None if unavailable."""
        ...

    def connect(self) -> None:
        """Open the session. Raises GameClientError on failure."""
        ...

    def quit(self) -> None:
        """Leave the server gracefully and close the session."""
        ...

    def tick(self) -> None:
        """Pump incoming events."""
        ...

    def on(self, event: str, handler: GameEventHandler) -> None:
        """Register a lifecycle handler (see GAME_EVENTS)."""
        ...

    def chat(self, text: str) -> None:
        ...

    def whisper(self, username: str, text: str) -> None:
        ...

    def players(self) -> Dict[str, PlayerInfo]:
        """Connected players keyed by username."""
        ...

    def position(self) -> Vec3:
        """The bot's own position."""
        ...

    def dimension(self) -> str:
        ...

    def nearest_entity(
        self, predicate: Callable[[EntityInfo], bool]
    ) -> Optional[EntityInfo]:
        """Closest tracked entity satisfying `predicate`."""
        ...

    def find_blocks(self, query: BlockQuery) -> List[Vec3]:
        """Positions of matching blocks, nearest first."""
        ...

    def look_at(self, target: Vec3) -> None:
        ...

    def set_control_state(self, control: str, state: bool) -> None:
        ...
