# src/llm_stack/config.py

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class BackendConfig:
    """Per-backend request parameters."""

    url: str
    model: str

    # generation parameters
    max_tokens: int = 100
    temperature: float = 0.7

    # transport
    timeout_s: float = 30.0


OPENAI_DEFAULTS = BackendConfig(
    url="https://api.openai.com/v1/chat/completions",
    model="gpt-3.5-turbo",
)

DEEPSEEK_DEFAULTS = BackendConfig(
    url="https://api.deepseek.com/v1/chat/completions",
    model="deepseek-chat",
)

GEMINI_DEFAULTS = BackendConfig(
    url="https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
    model="gemini-pro",
)
