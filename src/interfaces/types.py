# core shared types: Vec3, Location, GoalNear, PlayerInfo, EntityInfo
# src/interfaces/types.py

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class Vec3:
    """A position in world space. Block coordinates are floored floats."""

    x: float
    y: float
    z: float

    def distance_to(self, other: "Vec3") -> float:
        """Straight-line (euclidean) distance to another point."""
        return math.sqrt(
            (self.x - other.x) ** 2
            + (self.y - other.y) ** 2
            + (self.z - other.z) ** 2
        )

    def floored(self) -> Tuple[int, int, int]:
        """Integer block coordinates of this point."""
        return math.floor(self.x), math.floor(self.y), math.floor(self.z)

    def offset(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> "Vec3":
        return Vec3(self.x + dx, self.y + dy, self.z + dz)


@dataclass(frozen=True)
class Location:
    """
    A named spot the bot remembers (home, base).

    Coordinates are integer block coordinates captured at the time the
    location was set; the dimension is stored for display only.
    """

    x: int
    y: int
    z: int
    dimension: str

    @classmethod
    def from_position(cls, pos: Vec3, dimension: str) -> "Location":
        x, y, z = pos.floored()
        return cls(x=x, y=y, z=z, dimension=dimension)

    def as_vec3(self) -> Vec3:
        return Vec3(float(self.x), float(self.y), float(self.z))

    def coords_text(self) -> str:
        return f"{self.x}, {self.y}, {self.z}"


@dataclass(frozen=True)
class GoalNear:
    """Navigation goal: get within `radius` blocks of (x, y, z)."""

    x: float
    y: float
    z: float
    radius: float

    @classmethod
    def around(cls, pos: Vec3, radius: float) -> "GoalNear":
        return cls(x=pos.x, y=pos.y, z=pos.z, radius=radius)

    def target(self) -> Vec3:
        return Vec3(self.x, self.y, self.z)


@dataclass
class EntityInfo:
    """
    Tracked entity as reported by the game bridge.

    `name` is the entity type name ("villager", "player", "zombie", ...),
    `username` is only set for player entities.
    """

    entity_id: int
    name: str
    position: Vec3
    kind: Optional[str] = None
    username: Optional[str] = None


@dataclass
class PlayerInfo:
    """
    An entry of the server's player list.

    `entity` is None while the player is connected but outside the bot's
    tracking range.
    """

    username: str
    entity: Optional[EntityInfo] = None


@dataclass(frozen=True)
class BlockQuery:
    """
    Serializable block search request.

    A block matches when its name is one of `names`, or contains any of the
    substrings in `name_contains`.
    """

    names: Tuple[str, ...] = field(default_factory=tuple)
    name_contains: Tuple[str, ...] = field(default_factory=tuple)
    max_distance: float = 64.0
    count: int = 1

    def matches(self, block_name: str) -> bool:
        if block_name in self.names:
            return True
        return any(part in block_name for part in self.name_contains)

    def to_payload(self) -> dict:
        return {
            "names": list(self.names),
            "name_contains": list(self.name_contains),
            "max_distance": self.max_distance,
            "count": self.count,
        }
