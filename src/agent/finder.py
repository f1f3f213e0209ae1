# src/agent/finder.py
"""
!find strategies.

Each supported name maps to one lookup against the world-state
collaborator (nearest entity or block search) with its own search radius.
A hit is announced and handed to the movement coordinator; a miss is
announced and, for village and cave only, turned into a random
exploration target.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from interfaces import BlockQuery, Vec3

from .movement import MovementCoordinator
from .outbound import ChatOutbox
from .session import Session

log = logging.getLogger(__name__)

VILLAGE_RADIUS = 100.0
EXPLORE_SPAN = 100.0


@dataclass(frozen=True)
class BlockStrategy:
    query: BlockQuery
    found: str                 # "{coords}" is filled with the hit position
    missing: str
    explore: bool = False


BLOCK_STRATEGIES: Dict[str, BlockStrategy] = {
    "cave": BlockStrategy(
        BlockQuery(names=("cave_air", "air"), max_distance=50, count=10),
        "Found cave entrance at {coords}!",
        "No caves found nearby. Exploring...",
        explore=True,
    ),
    "mine": BlockStrategy(
        BlockQuery(names=("cave_air", "air"), max_distance=50, count=10),
        "Found cave entrance at {coords}!",
        "No mines found nearby.",
    ),
    "water": BlockStrategy(
        BlockQuery(names=("water",), max_distance=100),
        "Found water at {coords}!",
        "No water found nearby.",
    ),
    "lava": BlockStrategy(
        BlockQuery(names=("lava",), max_distance=100),
        "Found lava at {coords}! Be careful!",
        "No lava found nearby.",
    ),
    "tree": BlockStrategy(
        BlockQuery(name_contains=("log", "wood"), max_distance=50),
        "Found trees at {coords}!",
        "No trees found nearby.",
    ),
    "stone": BlockStrategy(
        BlockQuery(names=("stone", "cobblestone"), max_distance=30),
        "Found stone at {coords}!",
        "No stone found nearby.",
    ),
}

for _ore in ("iron", "coal", "diamond"):
    BLOCK_STRATEGIES[_ore] = BlockStrategy(
        BlockQuery(names=(f"{_ore}_ore",), max_distance=50),
        f"Found {_ore}_ore at {{coords}}!",
        f"No {_ore}_ore found nearby.",
    )
del _ore

SUPPORTED_STRUCTURES: Tuple[str, ...] = (
    "village", "cave", "mine", "water", "lava", "tree", "stone", "iron", "coal", "diamond",
)


def _coords_text(pos: Vec3) -> str:
    return f"{math.floor(pos.x)}, {math.floor(pos.y)}, {math.floor(pos.z)}"


class StructureFinder:
    def __init__(
        self,
        session: Session,
        movement: MovementCoordinator,
        outbox: ChatOutbox,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._session = session
        self._movement = movement
        self._outbox = outbox
        self._rng = rng or random.Random()

    def find(self, structure: str) -> None:
        self._outbox.announce(f"Searching for {structure}...")
        self._session.search_target = structure

        key = structure.lower()
        if key == "village":
            self._find_village()
        elif key in BLOCK_STRATEGIES:
            self._find_blocks(key, BLOCK_STRATEGIES[key])
        else:
            self._outbox.announce(
                f"Don't know how to find {structure}. Available: {', '.join(SUPPORTED_STRUCTURES)}"
            )

    def _find_village(self) -> None:
        client = self._session.require_client()
        here = client.position()
        villager = client.nearest_entity(
            lambda e: e.name == "villager" and e.position.distance_to(here) < VILLAGE_RADIUS
        )
        if villager is None:
            self._outbox.announce("No village found nearby. Let me explore...")
            self.explore_randomly()
            return
        self._outbox.announce(f"Found villager at {_coords_text(villager.position)}!")
        self._movement.navigate_to(villager.position, reason="find:village")

    def _find_blocks(self, key: str, strategy: BlockStrategy) -> None:
        hits = self._session.require_client().find_blocks(strategy.query)
        log.debug("find %s -> %d hit(s)", key, len(hits))
        if not hits:
            self._outbox.announce(strategy.missing)
            if strategy.explore:
                self.explore_randomly()
            return
        target = hits[0]
        self._outbox.announce(strategy.found.format(coords=_coords_text(target)))
        self._movement.navigate_to(target, reason=f"find:{key}")

    def explore_randomly(self) -> None:
        """Pick a point up to 50 blocks away on x/z at the current height."""
        here = self._session.require_client().position()
        target = Vec3(
            here.x + (self._rng.random() - 0.5) * EXPLORE_SPAN,
            here.y,
            here.z + (self._rng.random() - 0.5) * EXPLORE_SPAN,
        )
        self._outbox.announce("Exploring randomly...")
        self._movement.navigate_to(target, reason="explore")
