# src/agent/bot.py
"""
Top-level wiring.

MinecraftBot builds one Session and every collaborator around it, all
sharing one EventLoop:

    ConnectionSupervisor -> CommandRouter -> AiGateway / BotCommands
                                           -> MovementCoordinator / StructureFinder
                                           -> ChatOutbox
"""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Callable, Dict, Optional

from bot_core import BridgeGameClient, EventLoop
from bot_core.tracing import NavigationTracer
from env.schema import BotConfig
from interfaces import GameClient
from llm_stack.backend import BackendName, ChatBackend
from llm_stack.stack import build_gateway
from monitoring.bus import EventBus

from .commands import BotCommands
from .finder import StructureFinder
from .movement import MovementCoordinator
from .outbound import ChatOutbox
from .router import CommandRouter
from .session import Session
from .supervisor import ClientFactory, ConnectionSupervisor

log = logging.getLogger(__name__)


class MinecraftBot:
    def __init__(
        self,
        config: BotConfig,
        *,
        loop: Optional[EventLoop] = None,
        bus: Optional[EventBus] = None,
        client_factory: Optional[ClientFactory] = None,
        backends: Optional[Dict[BackendName, ChatBackend]] = None,
        rng: Optional[random.Random] = None,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config
        self.loop = loop or EventLoop()
        self.bus = bus

        self.session = Session(
            bot_name=config.bot.username,
            active_backend=BackendName(config.default_ai_model),
        )
        self.outbox = ChatOutbox(self.session, self.loop)
        self.tracer = NavigationTracer()
        self.movement = MovementCoordinator(
            self.session, self.loop, self.outbox, tracer=self.tracer, bus=bus
        )
        self.finder = StructureFinder(self.session, self.movement, self.outbox, rng=rng)
        self.commands = BotCommands(
            self.session, self.outbox, self.movement, self.finder, bus=bus, now=now
        )
        self.gateway = build_gateway(self.session, config, bus=bus, backends=backends)
        self.router = CommandRouter(
            self.session, self.gateway, self.commands, self.outbox, self.loop, bus=bus
        )
        self.supervisor = ConnectionSupervisor(
            self.session,
            config.auth,
            self.loop,
            client_factory or self._default_client,
            on_chat=self.router.on_chat,
            on_whisper=self.router.on_whisper,
            bus=bus,
        )

    def _default_client(self) -> GameClient:
        return BridgeGameClient(
            self.config.server,
            self.config.bot.username,
            bridge=self.config.bridge,
        )

    def start(self) -> None:
        log.info("Starting Minecraft AI Bot...")
        log.info("Bot Name: %s", self.config.bot.username)
        log.info("Server: %s:%d", self.config.server.host, self.config.server.port)
        log.info("Default AI Model: %s", self.session.active_backend.value)
        self.supervisor.connect()

    def run_forever(self) -> None:
        self.start()
        self.loop.run_forever()

    def shutdown(self) -> None:
        """Quit the game session and stop the loop. Safe from the loop thread only."""
        self.supervisor.shutdown()
        self.loop.stop()
        self.loop.close()
