# src/agent/supervisor.py
"""
Connection supervisor.

Owns the lifecycle of the game connection:

    connect -> ready -> (2s grace) -> /register or /login
    disconnected / failed connect -> (5s) -> connect again

A fresh GameClient is built for every attempt and tagged with a
connection id; events from an older connection are ignored. Session state
other than the client and auth phase carries over untouched.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from bot_core.scheduler import EventLoop, TimerHandle
from env.schema import AuthConfig
from interfaces import GameClient
from monitoring.bus import EventBus
from monitoring.integration import emit_auth_sent, emit_connection_state

from .session import AuthPhase, Session

log = logging.getLogger(__name__)

READY_GRACE_S = 2.0
RECONNECT_DELAY_S = 5.0

ClientFactory = Callable[[], GameClient]
ChatHandler = Callable[[str, str], None]


class ConnectionSupervisor:
    def __init__(
        self,
        session: Session,
        auth: AuthConfig,
        loop: EventLoop,
        client_factory: ClientFactory,
        *,
        on_chat: ChatHandler,
        on_whisper: ChatHandler,
        bus: Optional[EventBus] = None,
    ) -> None:
        self._session = session
        self._auth = auth
        self._loop = loop
        self._client_factory = client_factory
        self._on_chat = on_chat
        self._on_whisper = on_whisper
        self._bus = bus

        self._connection_id = 0
        self._reconnect_handle: Optional[TimerHandle] = None
        self._shutting_down = False
        loop.add_tick_hook(self._pump)

    @property
    def connection_id(self) -> int:
        return self._connection_id

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """
        Start one connection attempt.

        A failure to connect is logged and retried after the reconnect
        delay; it never propagates.
        """
        if self._shutting_down:
            return
        self._reconnect_handle = None
        self._connection_id += 1
        conn_id = self._connection_id

        client = self._client_factory()
        client.on("ready", lambda: self._on_ready(conn_id))
        client.on("chat", lambda speaker, text: self._guard(conn_id, self._on_chat, speaker, text))
        client.on("whisper", lambda speaker, text: self._guard(conn_id, self._on_whisper, speaker, text))
        client.on("error", lambda err: self._on_error(conn_id, err))
        client.on("disconnected", lambda reason: self._on_disconnected(conn_id, reason))

        self._session.client = client
        self._session.auth_phase = AuthPhase.UNAUTHENTICATED
        log.info("Connecting as %s (attempt %d)", self._session.bot_name, conn_id)
        self._emit_state("CONNECTING", attempt=conn_id)

        try:
            client.connect()
        except Exception as exc:
            log.exception("Connection attempt %d failed", conn_id)
            self._session.client = None
            self._emit_state("CONNECT_FAILED", attempt=conn_id, reason=str(exc))
            self._schedule_reconnect()

    def shutdown(self) -> None:
        """Quit the current session and stop reconnecting. Idempotent."""
        if self._shutting_down:
            return
        self._shutting_down = True
        if self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None

        client = self._session.client
        self._session.client = None
        if client is not None:
            log.info("Shutting down bot...")
            client.quit()
        self._emit_state("QUIT")

    # ------------------------------------------------------------------
    # Client events
    # ------------------------------------------------------------------

    def _pump(self) -> None:
        client = self._session.client
        if client is not None:
            client.tick()

    def _on_ready(self, conn_id: int) -> None:
        if conn_id != self._connection_id:
            return
        log.info("Bot spawned successfully!")
        self._emit_state("READY", attempt=conn_id)
        self._loop.call_later(READY_GRACE_S, self._authenticate, conn_id)

    def _authenticate(self, conn_id: int) -> None:
        client = self._session.client
        if conn_id != self._connection_id or client is None:
            return

        password = self._auth.password
        if self._session.registered:
            log.info("Attempting to login...")
            client.chat(f"/login {password}")
            self._session.auth_phase = AuthPhase.LOGGED_IN
            mode = "login"
        else:
            log.info("Attempting to register...")
            client.chat(f"/register {password} {password}")
            self._session.registered = True
            self._session.auth_phase = AuthPhase.REGISTERING
            mode = "register"

        if self._bus is not None:
            emit_auth_sent(self._bus, mode, self._session.auth_phase.value)

    def _on_error(self, conn_id: int, err: BaseException) -> None:
        log.error("Bot error (connection %d): %s", conn_id, err)

    def _on_disconnected(self, conn_id: int, reason: str) -> None:
        if conn_id != self._connection_id:
            return
        log.info("Bot disconnected: %s", reason)
        self._session.client = None
        self._session.auth_phase = AuthPhase.UNAUTHENTICATED
        self._emit_state("DISCONNECTED", attempt=conn_id, reason=reason)
        self._schedule_reconnect()

    def _guard(self, conn_id: int, handler: ChatHandler, speaker: str, text: str) -> None:
        if conn_id == self._connection_id:
            handler(speaker, text)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _schedule_reconnect(self) -> None:
        if self._shutting_down:
            return
        log.info("Reconnecting in %.0f seconds", RECONNECT_DELAY_S)
        self._emit_state("RECONNECT_SCHEDULED", attempt=self._connection_id)
        self._reconnect_handle = self._loop.call_later(RECONNECT_DELAY_S, self.connect)

    def _emit_state(
        self,
        state: str,
        *,
        attempt: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> None:
        if self._bus is not None:
            emit_connection_state(self._bus, state, attempt=attempt, reason=reason)
