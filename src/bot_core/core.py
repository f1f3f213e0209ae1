# src/bot_core/core.py
"""
Concrete GameClient backed by the external bridge process.

This module wires together:
- PacketTransport (JSON-lines link to the bridge)
- WorldTracker (players, entities, own position)
- a thin Pathfinder proxy when the bridge reports one

Public surface (for the agent layer):
    class BridgeGameClient(GameClient):
        connect() / quit() / tick()
        on(event, handler)          ready, chat, whisper, error, disconnected
        chat() / whisper()
        players() / position() / dimension()
        nearest_entity() / find_blocks()
        look_at() / set_control_state() / pathfinder

Design constraints:
- No socket or message-format details leak to callers.
- Connection problems raise GameClientError.
- A failing lifecycle handler is logged and does not stop other handlers.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from env.schema import BridgeConfig, ServerConfig
from interfaces import (
    GAME_EVENTS,
    BlockQuery,
    EntityInfo,
    GameClient,
    GameEventHandler,
    GoalNear,
    PacketTransport,
    Pathfinder,
    PlayerInfo,
    Vec3,
)

from .errors import GameClientError
from .net import create_transport_for_config
from .world_tracker import WorldTracker

log = logging.getLogger(__name__)


class _BridgePathfinder(Pathfinder):
    """Pathfinder proxy forwarding goals to the bridge."""

    def __init__(self, transport: PacketTransport) -> None:
        self._transport = transport

    def set_goal(self, goal: GoalNear) -> None:
        self._transport.send_packet(
            "set_goal",
            {"x": goal.x, "y": goal.y, "z": goal.z, "radius": goal.radius},
        )

    def clear_goal(self) -> None:
        self._transport.send_packet("clear_goal", {})


class BridgeGameClient(GameClient):
    """
    One game session on the server, as seen through the bridge.

    A new instance is built for every connection attempt; nothing here
    survives a reconnect.
    """

    def __init__(
        self,
        server: ServerConfig,
        username: str,
        transport: Optional[PacketTransport] = None,
        *,
        bridge: Optional[BridgeConfig] = None,
    ) -> None:
        self._server = server
        self._username = username

        # Transport layer
        self._transport: PacketTransport = transport or create_transport_for_config(
            bridge or BridgeConfig()
        )

        # World tracking
        self._tracker = WorldTracker(self._transport)

        self._handlers: Dict[str, List[GameEventHandler]] = {name: [] for name in GAME_EVENTS}
        self._pathfinder: Optional[Pathfinder] = None
        self._closed = False

        self._transport.on_packet("ready", self._handle_ready)
        self._transport.on_packet("chat", self._handle_chat)
        self._transport.on_packet("whisper", self._handle_whisper)
        self._transport.on_packet("error", self._handle_error)
        self._transport.on_packet("end", self._handle_end)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def username(self) -> str:
        return self._username

    @property
    def pathfinder(self) -> Optional[Pathfinder]:
        return self._pathfinder

    def connect(self) -> None:
        """
        Open the bridge link and ask it to join the server.

        Raises:
            GameClientError if the bridge cannot be reached.
        """
        self._transport.connect()
        self._tracker.reset()
        self._closed = False
        self._transport.send_packet(
            "connect",
            {
                "host": self._server.host,
                "port": self._server.port,
                "username": self._username,
                "version": self._server.version,
                "auth": "offline",
            },
        )

    def quit(self) -> None:
        """Leave the server and close the link. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        try:
            if self._transport.connected:
                self._transport.send_packet("quit", {})
        except GameClientError:
            log.warning("quit message could not be delivered", exc_info=True)
        finally:
            self._transport.disconnect()

    def tick(self) -> None:
        self._transport.tick()

    def on(self, event: str, handler: GameEventHandler) -> None:
        if event not in self._handlers:
            raise ValueError(f"Unknown game event {event!r}; expected one of {GAME_EVENTS}")
        self._handlers[event].append(handler)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def chat(self, text: str) -> None:
        self._transport.send_packet("chat", {"text": text})

    def whisper(self, username: str, text: str) -> None:
        self._transport.send_packet("whisper", {"username": username, "text": text})

    def look_at(self, target: Vec3) -> None:
        self._transport.send_packet("look_at", {"x": target.x, "y": target.y, "z": target.z})

    def set_control_state(self, control: str, state: bool) -> None:
        self._transport.send_packet("control", {"control": control, "state": bool(state)})

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def players(self) -> Dict[str, PlayerInfo]:
        return self._tracker.players()

    def position(self) -> Vec3:
        return self._tracker.position()

    def dimension(self) -> str:
        return self._tracker.dimension()

    def nearest_entity(
        self, predicate: Callable[[EntityInfo], bool]
    ) -> Optional[EntityInfo]:
        return self._tracker.nearest_entity(predicate)

    def find_blocks(self, query: BlockQuery) -> List[Vec3]:
        result = self._transport.request("find_blocks", query.to_payload())
        if not isinstance(result, list):
            raise GameClientError(
                code="bad_bridge_response",
                details={"op": "find_blocks", "result": repr(result)},
            )
        positions: List[Vec3] = []
        for item in result:
            if not isinstance(item, Mapping):
                continue
            try:
                positions.append(Vec3(float(item["x"]), float(item["y"]), float(item["z"])))
            except (KeyError, TypeError, ValueError):
                log.debug("Skipping malformed block position %r", item)
        return positions

    # ------------------------------------------------------------------
    # Transport handlers
    # ------------------------------------------------------------------

    def _handle_ready(self, pkt: Mapping[str, Any]) -> None:
        self._pathfinder = _BridgePathfinder(self._transport) if pkt.get("pathfinder") else None
        self._emit("ready")

    def _handle_chat(self, pkt: Mapping[str, Any]) -> None:
        username, message = pkt.get("username"), pkt.get("message")
        if isinstance(username, str) and isinstance(message, str):
            self._emit("chat", username, message)

    def _handle_whisper(self, pkt: Mapping[str, Any]) -> None:
        username, message = pkt.get("username"), pkt.get("message")
        if isinstance(username, str) and isinstance(message, str):
            self._emit("whisper", username, message)

    def _handle_error(self, pkt: Mapping[str, Any]) -> None:
        self._emit(
            "error",
            GameClientError(code="bridge_error", details={"message": pkt.get("message")}),
        )

    def _handle_end(self, pkt: Mapping[str, Any]) -> None:
        self._closed = True
        self._transport.disconnect()
        self._emit("disconnected", str(pkt.get("reason") or "unknown"))

    def _emit(self, event: str, *args: Any) -> None:
        for handler in list(self._handlers[event]):
            try:
                handler(*args)
            except Exception:
                log.exception("Error in %s handler", event)
