# bot_core package
# src/bot_core/__init__.py
"""
bot_core package: the bot's body.

Exports:
    - BridgeGameClient: GameClient implementation over the bridge process
    - GameClientError: domain-level error for session failures
    - EventLoop, TimerHandle: the single-threaded scheduler
"""

from __future__ import annotations

from .core import BridgeGameClient
from .errors import GameClientError
from .scheduler import EventLoop, TimerHandle

__all__ = [
    "BridgeGameClient",
    "GameClientError",
    "EventLoop",
    "TimerHandle",
]
