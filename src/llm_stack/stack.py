# src/llm_stack/stack.py
from __future__ import annotations

from typing import Dict, Optional

import requests

from env.schema import BotConfig
from monitoring.bus import EventBus

from .backend import BackendName, ChatBackend
from .backend_gemini import GeminiBackend
from .backend_openai import build_chatgpt_backend, build_deepseek_backend
from .gateway import AiGateway, ConversationState


def build_backends(session: Optional[requests.Session] = None) -> Dict[BackendName, ChatBackend]:
    """
    One adapter per BackendName, sharing a single HTTP session.

    The session keeps connections to each provider alive between calls.
    """
    session = session or requests.Session()
    return {
        BackendName.CHATGPT: build_chatgpt_backend(session),
        BackendName.GEMINI: GeminiBackend(session=session),
        BackendName.DEEPSEEK: build_deepseek_backend(session),
    }


def build_gateway(
    state: ConversationState,
    config: BotConfig,
    *,
    bus: Optional[EventBus] = None,
    backends: Optional[Dict[BackendName, ChatBackend]] = None,
) -> AiGateway:
    """Wire the gateway from the loaded BotConfig."""
    return AiGateway(
        state,
        backends if backends is not None else build_backends(),
        config.ai_apis,
        config.bot.username,
        bus=bus,
    )
