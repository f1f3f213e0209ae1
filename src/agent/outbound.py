# src/agent/outbound.py
"""
Outbound chat.

Every message leaving the bot goes through ChatOutbox so that the
100-character chat limit is respected: long texts are cut into hard
fragments and sent one second apart. Public replies carry an
"@speaker " prefix on every fragment; whispers and announcements do not.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from bot_core.errors import GameClientError
from bot_core.scheduler import EventLoop

from .session import Session

log = logging.getLogger(__name__)

MESSAGE_LIMIT = 100
FRAGMENT_SPACING_S = 1.0


def chunk_message(text: str, limit: int = MESSAGE_LIMIT) -> List[str]:
    """
    Split `text` into fragments of at most `limit` characters.

    Cuts on hard boundaries, ignoring words, so "".join(result) == text.
    An empty text yields no fragments.
    """
    if limit <= 0:
        raise ValueError("limit must be positive")
    return [text[i:i + limit] for i in range(0, len(text), limit)]


class ChatOutbox:
    def __init__(self, session: Session, loop: EventLoop) -> None:
        self._session = session
        self._loop = loop

    def reply(self, speaker: str, text: str, *, whisper: bool = False) -> None:
        """Answer `speaker` publicly (prefixed) or by whisper."""
        for i, fragment in enumerate(chunk_message(text)):
            if whisper:
                self._schedule(i, None, speaker, fragment)
            else:
                self._schedule(i, f"@{speaker} {fragment}", None, None)

    def announce(self, text: str) -> None:
        """Plain public chat with no addressee."""
        for i, fragment in enumerate(chunk_message(text)):
            self._schedule(i, fragment, None, None)

    def _schedule(
        self,
        index: int,
        public: Optional[str],
        whisper_to: Optional[str],
        whisper_text: Optional[str],
    ) -> None:
        if index == 0:
            self._send(public, whisper_to, whisper_text)
        else:
            self._loop.call_later(
                index * FRAGMENT_SPACING_S, self._send, public, whisper_to, whisper_text
            )

    def _send(
        self,
        public: Optional[str],
        whisper_to: Optional[str],
        whisper_text: Optional[str],
    ) -> None:
        # The client is looked up per fragment; it may have been replaced
        # by a reconnect since the message was queued.
        client = self._session.client
        if client is None:
            log.warning("Dropping outbound chat, not connected")
            return
        try:
            if whisper_to is not None:
                client.whisper(whisper_to, whisper_text or "")
            else:
                client.chat(public or "")
        except GameClientError as exc:
            log.warning("Failed to send chat: %s", exc)
