# src/agent/session.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from bot_core.errors import GameClientError
from interfaces import GameClient, Location
from llm_stack.backend import BackendName
from llm_stack.memory import ConversationMemory


class AuthPhase(str, Enum):
    """
    Authentication progress of the current connection.

    Reset to UNAUTHENTICATED on every connect; the process-wide
    "already registered" fact lives in Session.registered instead.
    """

    UNAUTHENTICATED = "unauthenticated"
    REGISTERING = "registering"
    LOGGED_IN = "logged_in"


@dataclass
class FollowState:
    """
    Follow target.

    `active` implies `target_name` is set; both are cleared together.
    `generation` increments on every start/clear so a stale follow tick
    can tell it no longer owns the state.
    """

    target_name: Optional[str] = None
    active: bool = False
    generation: int = 0

    def start(self, target_name: str) -> int:
        self.target_name = target_name
        self.active = True
        self.generation += 1
        return self.generation

    def clear(self) -> None:
        self.target_name = None
        self.active = False
        self.generation += 1

    def owns(self, generation: int) -> bool:
        return self.active and self.generation == generation


class TeamRoster:
    """Unique player names, kept in the order they were added."""

    def __init__(self) -> None:
        self._members: List[str] = []

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.find(name) is not None

    def find(self, name: str) -> Optional[str]:
        lowered = name.lower()
        for member in self._members:
            if member.lower() == lowered:
                return member
        return None

    def add(self, name: str) -> bool:
        """Add `name`; returns False if it was already present."""
        if self.find(name) is not None:
            return False
        self._members.append(name)
        return True

    def remove(self, name: str) -> bool:
        member = self.find(name)
        if member is None:
            return False
        self._members.remove(member)
        return True

    def members(self) -> List[str]:
        return list(self._members)


@dataclass
class Session:
    """
    Long-lived in-process state of the bot.

    Outlives individual connections: only `client` and `auth_phase` are
    connection-scoped, everything else survives a reconnect.
    """

    bot_name: str
    active_backend: BackendName
    client: Optional[GameClient] = None
    auth_phase: AuthPhase = AuthPhase.UNAUTHENTICATED
    registered: bool = False
    memory: ConversationMemory = field(default_factory=ConversationMemory)
    follow: FollowState = field(default_factory=FollowState)
    home: Optional[Location] = None
    base: Optional[Location] = None
    team: TeamRoster = field(default_factory=TeamRoster)
    search_target: Optional[str] = None

    def require_client(self) -> GameClient:
        if self.client is None:
            raise GameClientError(code="not_connected", details={"bot": self.bot_name})
        return self.client

    def resolve_player(self, name: str) -> Optional[str]:
        """
        Server spelling of a connected player's name.

        Exact match first, then case-insensitive; None if nobody matches.
        """
        players = self.require_client().players()
        if name in players:
            return name
        lowered = name.lower()
        for username in players:
            if username.lower() == lowered:
                return username
        return None
