# shared value types and collaborator protocols
# src/interfaces/__init__.py
"""
Canonical interfaces shared by every layer of the bot.

Exports:
    - value types: Vec3, Location, GoalNear, PlayerInfo, EntityInfo, BlockQuery
    - protocols: GameClient, Pathfinder, PacketTransport
"""

from __future__ import annotations

from .types import (
    Vec3,
    Location,
    GoalNear,
    PlayerInfo,
    EntityInfo,
    BlockQuery,
)
from .game_client import (
    GameClient,
    GameEventHandler,
    Pathfinder,
    PacketTransport,
    PacketHandler,
    GAME_EVENTS,
)

__all__ = [
    "Vec3",
    "Location",
    "GoalNear",
    "PlayerInfo",
    "EntityInfo",
    "BlockQuery",
    "GameClient",
    "GameEventHandler",
    "Pathfinder",
    "PacketTransport",
    "PacketHandler",
    "GAME_EVENTS",
]
