# src/llm_stack/backend.py
"""
Backend interface for the reply-generating services.

Every backend is a peer behind one `send` call; wire format, auth header
and response shape are private to each adapter.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Protocol, Sequence, Tuple

from .memory import ConversationTurn


class BackendName(str, Enum):
    """Closed set of AI backends the bot can switch between."""

    CHATGPT = "chatgpt"
    GEMINI = "gemini"
    DEEPSEEK = "deepseek"

    @classmethod
    def values(cls) -> Tuple[str, ...]:
        return tuple(member.value for member in cls)

    @classmethod
    def parse(cls, name: str) -> Optional["BackendName"]:
        """Case-insensitive lookup; None for unknown names."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None

    @property
    def display_name(self) -> str:
        """Human-facing product name used in apology strings."""
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    BackendName.CHATGPT: "ChatGPT",
    BackendName.GEMINI: "Gemini",
    BackendName.DEEPSEEK: "DeepSeek",
}


class BackendError(RuntimeError):
    """A backend call failed (transport, HTTP status, or response shape)."""

    def __init__(self, backend: BackendName, reason: str) -> None:
        super().__init__(f"{backend.value}: {reason}")
        self.backend = backend
        self.reason = reason


class ChatBackend(Protocol):
    """Simple interface around a remote chat-completion service."""

    name: BackendName

    def send(
        self,
        system_prompt: str,
        history: Sequence[ConversationTurn],
        user_text: str,
        api_key: Optional[str],
    ) -> str:
        """
        Return the assistant reply for `user_text` given prior `history`.

        Raises BackendError on any failure.
        """
        ...


def history_as_messages(history: Sequence[ConversationTurn]) -> List[dict]:
    """OpenAI-style role/content dicts for a slice of conversation memory."""
    return [{"role": turn.role.value, "content": turn.content} for turn in history]
