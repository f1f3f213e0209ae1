# src/llm_stack/memory.py
"""
Conversation memory shared by all backends.

A bounded, ordered log of user/assistant turns. Appends past the bound
drop the oldest turns; only a short window is ever sent upstream.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, List

MAX_TURNS = 10
CONTEXT_WINDOW = 5


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ConversationTurn:
    role: Role
    content: str


class ConversationMemory:
    """Append-only turn log truncated to the most recent `max_turns`."""

    def __init__(self, max_turns: int = MAX_TURNS) -> None:
        self._turns: Deque[ConversationTurn] = deque(maxlen=max_turns)

    def __len__(self) -> int:
        return len(self._turns)

    def append(self, role: Role, content: str) -> None:
        self._turns.append(ConversationTurn(role=role, content=content))

    def record_exchange(self, user_text: str, reply: str) -> None:
        """Store a completed user/assistant pair."""
        self.append(Role.USER, user_text)
        self.append(Role.ASSISTANT, reply)

    def window(self, size: int = CONTEXT_WINDOW) -> List[ConversationTurn]:
        """The most recent `size` turns, oldest first."""
        if size <= 0:
            return []
        return list(self._turns)[-size:]

    def turns(self) -> List[ConversationTurn]:
        return list(self._turns)

    def clear(self) -> None:
        self._turns.clear()
