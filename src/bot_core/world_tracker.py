# track players/entities/own position from bridge messages
# src/bot_core/world_tracker.py
"""
World tracker for bot_core.

Consumes normalized messages from a PacketTransport and maintains the
small slice of world state the bot needs: its own position and dimension,
the player list, and nearby entities.

Rules:
- Block data is NOT tracked here; block searches are bridge requests.
- Keep storage minimal and "raw"; no derived game semantics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from interfaces import EntityInfo, PacketTransport, PlayerInfo, Vec3


@dataclass
class _SelfState:
    """Minimal tracked state for the bot's own player."""

    pos: Vec3 = field(default_factory=lambda: Vec3(0.0, 64.0, 0.0))
    dimension: str = "overworld"


def _vec_from(pkt: Mapping[str, Any], default: Vec3) -> Vec3:
    try:
        return Vec3(
            float(pkt.get("x", default.x)),
            float(pkt.get("y", default.y)),
            float(pkt.get("z", default.z)),
        )
    except (TypeError, ValueError):
        return default


class WorldTracker:
    """
    Maintains an incrementally updated view of players and entities.

    Transports must normalize wire data into logically named messages:

        - "ready"            -> optional initial snapshot (position, players)
        - "position_update"  -> own position
        - "dimension_change" -> own dimension
        - "player_joined"    -> player list add
        - "player_left"      -> player list remove
        - "entity_update"    -> entity created or moved
        - "entity_gone"      -> entity removed
    """

    def __init__(self, transport: PacketTransport) -> None:
        self._transport = transport

        self._self: _SelfState = _SelfState()

        # Player list keyed by username (connected, maybe out of range)
        self._players: Dict[str, PlayerInfo] = {}

        # Entities keyed by numeric ID
        self._entities: Dict[int, EntityInfo] = {}

        self._register_handlers()

    # ------------------------------------------------------------------
    # Packet wiring
    # ------------------------------------------------------------------

    def _register_handlers(self) -> None:
        self._transport.on_packet("ready", self._handle_ready)
        self._transport.on_packet("position_update", self._handle_position_update)
        self._transport.on_packet("dimension_change", self._handle_dimension_change)
        self._transport.on_packet("player_joined", self._handle_player_joined)
        self._transport.on_packet("player_left", self._handle_player_left)
        self._transport.on_packet("entity_update", self._handle_entity_update)
        self._transport.on_packet("entity_gone", self._handle_entity_gone)

    # ------------------------------------------------------------------
    # Packet handlers
    # ------------------------------------------------------------------

    def _handle_ready(self, pkt: Mapping[str, Any]) -> None:
        """
        Seed state from the spawn snapshot.

        Expected (all optional):
            - "position": {"x", "y", "z"}
            - "dimension": str
            - "players": [username, ...]
        """
        position = pkt.get("position")
        if isinstance(position, Mapping):
            self._self.pos = _vec_from(position, self._self.pos)
        if isinstance(pkt.get("dimension"), str):
            self._self.dimension = pkt["dimension"]
        players = pkt.get("players")
        if isinstance(players, list):
            for username in players:
                if isinstance(username, str):
                    self._players.setdefault(username, PlayerInfo(username=username))

    def _handle_position_update(self, pkt: Mapping[str, Any]) -> None:
        self._self.pos = _vec_from(pkt, self._self.pos)

    def _handle_dimension_change(self, pkt: Mapping[str, Any]) -> None:
        dimension = pkt.get("dimension")
        if isinstance(dimension, str) and dimension:
            self._self.dimension = dimension

    def _handle_player_joined(self, pkt: Mapping[str, Any]) -> None:
        username = pkt.get("username")
        if not isinstance(username, str) or not username:
            return
        self._players.setdefault(username, PlayerInfo(username=username))

    def _handle_player_left(self, pkt: Mapping[str, Any]) -> None:
        username = pkt.get("username")
        if isinstance(username, str):
            self._players.pop(username, None)

    def _handle_entity_update(self, pkt: Mapping[str, Any]) -> None:
        """
        Track a spawned or moved entity.

        Expected fields:
            - "entity_id": int
            - "name": entity type name ("villager", "player", ...)
            - "x", "y", "z": float
            - "kind": optional category
            - "username": set for player entities
        """
        try:
            eid = int(pkt["entity_id"])
        except (KeyError, TypeError, ValueError):
            return

        existing = self._entities.get(eid)
        default_pos = existing.position if existing else Vec3(0.0, 0.0, 0.0)
        entity = EntityInfo(
            entity_id=eid,
            name=str(pkt.get("name") or (existing.name if existing else "unknown")),
            position=_vec_from(pkt, default_pos),
            kind=pkt.get("kind", existing.kind if existing else None),
            username=pkt.get("username", existing.username if existing else None),
        )
        self._entities[eid] = entity

        # A visible player is by definition connected.
        if entity.username:
            self._players.setdefault(entity.username, PlayerInfo(username=entity.username))

    def _handle_entity_gone(self, pkt: Mapping[str, Any]) -> None:
        ids = pkt.get("entity_ids")
        if ids is None and "entity_id" in pkt:
            ids = [pkt["entity_id"]]
        if not isinstance(ids, list):
            return
        for raw_id in ids:
            try:
                self._entities.pop(int(raw_id), None)
            except (TypeError, ValueError):
                continue

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Forget everything; called when a new session starts."""
        self._self = _SelfState()
        self._players.clear()
        self._entities.clear()

    def position(self) -> Vec3:
        return self._self.pos

    def dimension(self) -> str:
        return self._self.dimension

    def entities(self) -> Iterable[EntityInfo]:
        return list(self._entities.values())

    def players(self) -> Dict[str, PlayerInfo]:
        """Player list with each player's entity attached when in range."""
        by_username = {
            e.username: e for e in self._entities.values() if e.username
        }
        return {
            name: PlayerInfo(username=name, entity=by_username.get(name))
            for name in self._players
        }

    def nearest_entity(
        self, predicate: Callable[[EntityInfo], bool]
    ) -> Optional[EntityInfo]:
        origin = self._self.pos
        best: Optional[EntityInfo] = None
        best_dist = float("inf")
        for entity in self._entities.values():
            if not predicate(entity):
                continue
            dist = origin.distance_to(entity.position)
            if dist < best_dist:
                best, best_dist = entity, dist
        return best
