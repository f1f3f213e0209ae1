# src/bot_core/net/client.py
"""
Transport factory for bot_core.

The PacketTransport protocol itself lives in `interfaces`; this module
builds the concrete transport from the loaded BotConfig.
"""

from __future__ import annotations

from env.schema import BridgeConfig
from interfaces import PacketTransport


def create_transport_for_config(bridge: BridgeConfig) -> PacketTransport:
    """
    Construct the PacketTransport described by the `bridge` config section.

    Lazy import keeps socket code out of modules that only need the protocol.
    """
    from .bridge import BridgeTransport

    return BridgeTransport(
        bridge.host,
        bridge.port,
        request_timeout_s=bridge.request_timeout_s,
    )
