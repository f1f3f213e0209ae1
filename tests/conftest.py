# tests/conftest.py

from __future__ import annotations

import random
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pytest

# Ensure src/ is on sys.path for test imports like `import env`, `import agent`.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"

if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from agent.bot import MinecraftBot  # noqa: E402
from bot_core.scheduler import EventLoop  # noqa: E402
from bot_core.testing.fakes import (  # noqa: E402
    FakeGameClient,
    FakePathfinder,
    ManualClock,
    advance,
    make_test_loop,
)
from env.schema import ApiKeys, AuthConfig, BotConfig, BotIdentity, ServerConfig  # noqa: E402
from llm_stack.backend import BackendError, BackendName  # noqa: E402
from llm_stack.memory import ConversationTurn  # noqa: E402
from monitoring.bus import EventBus  # noqa: E402
from monitoring.events import MonitoringEvent  # noqa: E402

BOT_NAME = "AIBot"
PASSWORD = "hunter2"
FIXED_NOW = datetime(2024, 5, 1, 14, 3, 9)


class ScriptedBackend:
    """ChatBackend double: answers with `reply` or raises `error`."""

    def __init__(self, name: BackendName) -> None:
        self.name = name
        self.reply = f"{name.value} says hi"
        self.error: Optional[Exception] = None
        self.calls: List[str] = []

    def send(
        self,
        system_prompt: str,
        history: Sequence[ConversationTurn],
        user_text: str,
        api_key: Optional[str],
    ) -> str:
        self.calls.append(user_text)
        if self.error is not None:
            raise self.error
        return self.reply

    def fail(self) -> None:
        self.error = BackendError(self.name, "HTTP 503")


class FixedRandom(random.Random):
    """random() always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


@dataclass
class BotHarness:
    bot: MinecraftBot
    loop: EventLoop
    clock: ManualClock
    backends: Dict[BackendName, ScriptedBackend]
    clients: List[FakeGameClient] = field(default_factory=list)
    events: List[MonitoringEvent] = field(default_factory=list)
    pathfinder: bool = True
    fail_connects: int = 0

    @property
    def session(self):
        return self.bot.session

    @property
    def client(self) -> FakeGameClient:
        return self.clients[-1]

    def new_client(self) -> FakeGameClient:
        client = FakeGameClient(
            name=BOT_NAME,
            fake_pathfinder=FakePathfinder() if self.pathfinder else None,
            fail_connect=self.fail_connects > 0,
        )
        if self.clients:
            # The world outlives the connection.
            previous = self.clients[-1]
            client.players_online = previous.players_online
            client.entities = previous.entities
            client.blocks = previous.blocks
            client.own_position = previous.own_position
        self.fail_connects = max(0, self.fail_connects - 1)
        self.clients.append(client)
        return client

    def say(self, speaker: str, text: str) -> None:
        self.client.emit("chat", speaker, text)
        self.loop.run_pending()

    def whisper(self, speaker: str, text: str) -> None:
        self.client.emit("whisper", speaker, text)
        self.loop.run_pending()

    def advance(self, seconds: float) -> None:
        advance(self.loop, self.clock, seconds)

    def chat(self) -> List[str]:
        return list(self.client.chat_log)

    def goals(self) -> List[Any]:
        assert self.client.fake_pathfinder is not None
        return self.client.fake_pathfinder.goals


def build_harness(*, pathfinder: bool = True, default_model: str = "chatgpt") -> BotHarness:
    loop, clock = make_test_loop()
    bus = EventBus()
    backends = {name: ScriptedBackend(name) for name in BackendName}
    config = BotConfig(
        server=ServerConfig(host="mc.example.org"),
        bot=BotIdentity(username=BOT_NAME),
        auth=AuthConfig(password=PASSWORD),
        default_ai_model=default_model,
        ai_apis=ApiKeys(chatgpt="sk-openai", gemini="g-key", deepseek="ds-key"),
    )
    harness: BotHarness

    bot = MinecraftBot(
        config,
        loop=loop,
        bus=bus,
        client_factory=lambda: harness.new_client(),
        backends=backends,  # type: ignore[arg-type]
        rng=FixedRandom(0.75),
        now=lambda: FIXED_NOW,
    )
    harness = BotHarness(bot=bot, loop=loop, clock=clock, backends=backends, pathfinder=pathfinder)
    bus.subscribe(harness.events.append)
    bot.start()
    return harness


@pytest.fixture
def harness() -> BotHarness:
    """Connected bot with a pathfinder, fake backends and a manual clock."""
    return build_harness()


@pytest.fixture
def bare_harness() -> BotHarness:
    """Same as `harness` but the bridge reports no pathfinder."""
    return build_harness(pathfinder=False)
