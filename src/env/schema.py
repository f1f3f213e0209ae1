# BotConfig, ServerConfig, ApiKeys dataclasses
# src/env/schema.py

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ServerConfig:
    """Where the game server lives."""
    host: str
    port: int = 25565
    version: str = "1.20.1"


@dataclass
class BotIdentity:
    """The account the bot plays as (offline-mode username)."""
    username: str


@dataclass
class AuthConfig:
    """Password used for the server's /register and /login commands."""
    password: str


@dataclass
class BridgeConfig:
    """Connection to the external game-protocol bridge process."""
    host: str = "127.0.0.1"
    port: int = 3001
    request_timeout_s: float = 5.0


@dataclass
class ApiKeys:
    """Credentials for each AI backend. Missing keys stay None."""
    chatgpt: Optional[str] = None
    gemini: Optional[str] = None
    deepseek: Optional[str] = None

    def for_backend(self, name: str) -> Optional[str]:
        return getattr(self, name, None)


@dataclass
class BotConfig:
    """Top-level resolved configuration. Immutable after load by convention."""
    server: ServerConfig
    bot: BotIdentity
    auth: AuthConfig
    default_ai_model: str = "chatgpt"
    ai_apis: ApiKeys = field(default_factory=ApiKeys)
    bridge: BridgeConfig = field(default_factory=BridgeConfig)
