# src/agent/router.py
"""
Chat classification.

Every public chat line goes through two independent passes, and both may
fire for the same line:

1. conversation: a line mentioning the bot's name (anywhere, any case) or
   starting with "!" or "@" is stripped and, if anything is left, sent to
   the AI gateway; the answer is posted publicly to the speaker.
2. commands: the line is offered to BotCommands.dispatch().

Whispers skip the command pass and always go to the AI gateway; the answer
goes back as a whisper.

The name match is a plain substring match, so any sentence that happens
to contain the bot's name gets an AI reply.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from bot_core.scheduler import EventLoop
from llm_stack.gateway import AiGateway
from monitoring.bus import EventBus
from monitoring.integration import emit_chat_received

from .commands import BotCommands
from .outbound import ChatOutbox
from .session import Session

log = logging.getLogger(__name__)

THINKING_APOLOGY = "Sorry, I'm having trouble thinking right now!"

_PREFIX_RE = re.compile(r"^[@!]")


class CommandRouter:
    def __init__(
        self,
        session: Session,
        gateway: AiGateway,
        commands: BotCommands,
        outbox: ChatOutbox,
        loop: EventLoop,
        *,
        bus: Optional[EventBus] = None,
    ) -> None:
        self._session = session
        self._gateway = gateway
        self._commands = commands
        self._outbox = outbox
        self._loop = loop
        self._bus = bus

    # ------------------------------------------------------------------
    # Classification helpers
    # ------------------------------------------------------------------

    @staticmethod
    def is_directed(text: str, bot_name: str) -> bool:
        return (
            bot_name.lower() in text.lower()
            or text.startswith("!")
            or text.startswith("@")
        )

    @staticmethod
    def strip_directed(text: str, bot_name: str) -> str:
        """Remove every mention of the bot's name, then one leading "!"/"@"."""
        without_name = re.sub(re.escape(bot_name), "", text, flags=re.IGNORECASE)
        return _PREFIX_RE.sub("", without_name, count=1).strip()

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def on_chat(self, speaker: str, text: str) -> None:
        bot_name = self._session.bot_name
        if speaker == bot_name:
            return

        log.info("<%s> %s", speaker, text)
        if self._bus is not None:
            emit_chat_received(self._bus, speaker, text, whisper=False)

        if self.is_directed(text, bot_name):
            residue = self.strip_directed(text, bot_name)
            if residue:
                self._ask_ai(speaker, residue, whisper=False)

        self._commands.dispatch(speaker, text)

    def on_whisper(self, speaker: str, text: str) -> None:
        if speaker == self._session.bot_name:
            return

        log.info("[WHISPER] %s: %s", speaker, text)
        if self._bus is not None:
            emit_chat_received(self._bus, speaker, text, whisper=True)

        self._ask_ai(speaker, text, whisper=True)

    # ------------------------------------------------------------------
    # AI path
    # ------------------------------------------------------------------

    def _ask_ai(self, speaker: str, text: str, *, whisper: bool) -> None:
        def _deliver(reply: str) -> None:
            self._outbox.reply(speaker, reply, whisper=whisper)

        try:
            self._gateway.request_reply(text, speaker, self._loop, _deliver)
        except Exception:
            log.exception("AI request for %s failed", speaker)
            self._outbox.reply(speaker, THINKING_APOLOGY, whisper=whisper)
