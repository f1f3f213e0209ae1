# src/llm_stack/gateway.py
"""
AI backend gateway.

Uniform request/response facade over the interchangeable backends:

    get_reply(user_text, speaker) -> str          (blocking, never raises)
    request_reply(user_text, speaker, loop, on_reply)  (loop-friendly)

A reply is produced in three steps so that only the network call leaves
the event-loop thread:

    prepare()  -> ReplyRequest   snapshot of backend + prompt + history
    dispatch() -> str            the backend call (may run on a worker)
    commit()                     append user/assistant turns to memory

Backend failures never escape: they are logged, published as
BACKEND_FAILURE events, and turned into a per-backend apology string.
Memory is only touched on success.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Protocol

from env.schema import ApiKeys
from monitoring.bus import EventBus
from monitoring.integration import (
    emit_ai_reply,
    emit_backend_failure,
    emit_backend_switched,
)

from .backend import BackendError, BackendName, ChatBackend
from .memory import CONTEXT_WINDOW, ConversationMemory, ConversationTurn
from .prompts import build_system_prompt

log = logging.getLogger(__name__)

_SWITCH_RE = re.compile(r"^switch to (?P<name>.+)$", re.IGNORECASE)

ReplyCallback = Callable[[str], None]


class ConversationState(Protocol):
    """The slice of session state the gateway reads and writes."""

    active_backend: BackendName
    memory: ConversationMemory


class WorkerLoop(Protocol):
    def run_in_worker(self, fn: Callable[..., object], *args: object, on_done: Callable) -> None:
        ...


@dataclass(frozen=True)
class ReplyRequest:
    """Everything one backend call needs, captured at request time."""

    backend: BackendName
    system_prompt: str
    history: List[ConversationTurn]
    user_text: str
    speaker: str


def apology_for(backend: BackendName) -> str:
    return f"Sorry, {backend.display_name} is not responding right now!"


class AiGateway:
    def __init__(
        self,
        state: ConversationState,
        backends: Mapping[BackendName, ChatBackend],
        api_keys: ApiKeys,
        bot_name: str,
        *,
        bus: Optional[EventBus] = None,
        context_window: int = CONTEXT_WINDOW,
    ) -> None:
        missing = [name.value for name in BackendName if name not in backends]
        if missing:
            raise ValueError(f"AiGateway missing backends: {', '.join(missing)}")
        self._state = state
        self._backends = dict(backends)
        self._api_keys = api_keys
        self._bot_name = bot_name
        self._bus = bus
        self._context_window = context_window

    # ------------------------------------------------------------------
    # Backend switching
    # ------------------------------------------------------------------

    def try_switch(self, text: str) -> Optional[str]:
        """
        Handle "switch to <name>".

        Returns the confirmation string if `text` named a known backend,
        otherwise None (the text then goes to the AI as usual).
        """
        match = _SWITCH_RE.match(text.strip())
        if match is None:
            return None
        backend = BackendName.parse(match.group("name"))
        if backend is None:
            return None

        self._state.active_backend = backend
        log.info("Switched AI backend to %s", backend.value)
        if self._bus is not None:
            emit_backend_switched(self._bus, backend.value)
        return f"Switched to {backend.value.upper()} model!"

    # ------------------------------------------------------------------
    # Reply pipeline
    # ------------------------------------------------------------------

    def prepare(self, user_text: str, speaker: str) -> ReplyRequest:
        return ReplyRequest(
            backend=self._state.active_backend,
            system_prompt=build_system_prompt(self._bot_name, speaker),
            history=self._state.memory.window(self._context_window),
            user_text=user_text,
            speaker=speaker,
        )

    def dispatch(self, request: ReplyRequest) -> str:
        """Perform the backend call. Raises BackendError."""
        backend = self._backends[request.backend]
        return backend.send(
            request.system_prompt,
            request.history,
            request.user_text,
            self._api_keys.for_backend(request.backend.value),
        )

    def commit(self, request: ReplyRequest, reply: str) -> None:
        self._state.memory.record_exchange(request.user_text, reply)
        if self._bus is not None:
            emit_ai_reply(self._bus, request.backend.value, request.speaker, reply)

    def fail(self, request: ReplyRequest, exc: BaseException) -> str:
        if isinstance(exc, BackendError):
            log.warning("%s backend failed: %s", request.backend.value, exc)
        else:
            log.error(
                "%s backend raised unexpectedly",
                request.backend.value,
                exc_info=(type(exc), exc, exc.__traceback__),
            )
        if self._bus is not None:
            emit_backend_failure(self._bus, request.backend.value, repr(exc))
        return apology_for(request.backend)

    def get_reply(self, user_text: str, speaker: str) -> str:
        switched = self.try_switch(user_text)
        if switched is not None:
            return switched

        request = self.prepare(user_text, speaker)
        try:
            reply = self.dispatch(request)
        except Exception as exc:
            return self.fail(request, exc)
        self.commit(request, reply)
        return reply

    def request_reply(
        self,
        user_text: str,
        speaker: str,
        loop: WorkerLoop,
        on_reply: ReplyCallback,
    ) -> None:
        """
        Non-blocking variant of get_reply.

        The backend call runs on a worker; `on_reply` is invoked on the loop
        thread with either the reply, the switch confirmation, or an apology.
        """
        switched = self.try_switch(user_text)
        if switched is not None:
            on_reply(switched)
            return

        request = self.prepare(user_text, speaker)

        def _done(reply: Optional[str], error: Optional[BaseException]) -> None:
            if error is not None or reply is None:
                on_reply(self.fail(request, error or BackendError(request.backend, "no reply returned")))
                return
            self.commit(request, reply)
            on_reply(reply)

        loop.run_in_worker(self.dispatch, request, on_done=_done)
