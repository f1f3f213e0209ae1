# bot_core.net package
# src/bot_core/net/__init__.py
"""
Network layer for bot_core.

This package provides:
- BridgeTransport: JSON-lines TCP link to the game-protocol bridge
- create_transport_for_config: factory wired to the bridge config section
"""

from __future__ import annotations

from interfaces import PacketHandler, PacketTransport

from .bridge import BridgeTransport
from .client import create_transport_for_config

__all__ = [
    "BridgeTransport",
    "PacketTransport",
    "PacketHandler",
    "create_transport_for_config",
]
