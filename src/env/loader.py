from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from llm_stack.backend import BackendName

from .schema import (
    ApiKeys,
    AuthConfig,
    BotConfig,
    BotIdentity,
    BridgeConfig,
    ServerConfig,
)


class ConfigError(ValueError):
    """Raised when bot.yaml is structurally valid YAML but unusable."""


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_ROOT = PROJECT_ROOT / "config"
DEFAULT_CONFIG_PATH = CONFIG_ROOT / "bot.yaml"

# Environment variables that override (or supply) backend credentials.
API_KEY_ENV_VARS = {
    "chatgpt": "OPENAI_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
}


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML config file and require a mapping at the top."""
    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected mapping at top of {path}, got {type(data)}")
    return data


def _section(raw: Mapping[str, Any], *keys: str, required: bool = True) -> Dict[str, Any]:
    """Return the first present mapping among `keys` (camelCase or snake_case)."""
    for key in keys:
        if key in raw:
            value = raw[key]
            if value is None:
                return {}
            if not isinstance(value, dict):
                raise ConfigError(f"'{key}' must be a mapping, got {type(value).__name__}")
            return value
    if required:
        raise ConfigError(f"Missing required section '{keys[0]}'")
    return {}


def _require(section: Mapping[str, Any], key: str, where: str) -> Any:
    value = section.get(key)
    if value is None or value == "":
        raise ConfigError(f"Missing required key '{where}.{key}'")
    return value


def _as_int(value: Any, where: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"'{where}' must be an integer, got {value!r}") from exc


def _as_float(value: Any, where: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"'{where}' must be a number, got {value!r}") from exc


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve_config_path(path: Optional[str | Path] = None) -> Path:
    """Explicit path, then $MCBOT_CONFIG, then config/bot.yaml."""
    if path is not None:
        return Path(path)
    env_path = os.getenv("MCBOT_CONFIG")
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def load_bot_config(path: Optional[str | Path] = None) -> BotConfig:
    """Main entry point: returns a fully resolved BotConfig."""
    raw = _load_yaml(resolve_config_path(path))
    return parse_bot_config(raw)


def parse_bot_config(raw: Mapping[str, Any]) -> BotConfig:
    """Build a BotConfig from an already-parsed mapping."""
    server_raw = _section(raw, "server")
    server = ServerConfig(
        host=str(_require(server_raw, "host", "server")),
        port=_as_int(server_raw.get("port", 25565), "server.port"),
        version=str(server_raw.get("version") or "1.20.1"),
    )

    bot_raw = _section(raw, "bot")
    identity = BotIdentity(username=str(_require(bot_raw, "username", "bot")))

    auth_raw = _section(raw, "auth")
    auth = AuthConfig(password=str(_require(auth_raw, "password", "auth")))

    default_model = raw.get("defaultAIModel", raw.get("default_ai_model")) or "chatgpt"
    default_model = str(default_model).lower()
    if default_model not in BackendName.values():
        raise ConfigError(
            f"Invalid defaultAIModel: {default_model!r} "
            f"(expected one of {', '.join(BackendName.values())})"
        )

    apis_raw = _section(raw, "aiAPIs", "ai_apis", required=False)
    keys: Dict[str, Optional[str]] = {}
    for name, env_var in API_KEY_ENV_VARS.items():
        keys[name] = os.getenv(env_var) or apis_raw.get(name) or None
    ai_apis = ApiKeys(**keys)

    bridge_raw = _section(raw, "bridge", required=False)
    bridge = BridgeConfig(
        host=str(bridge_raw.get("host", "127.0.0.1")),
        port=_as_int(bridge_raw.get("port", 3001), "bridge.port"),
        request_timeout_s=_as_float(bridge_raw.get("request_timeout_s", 5.0), "bridge.request_timeout_s"),
    )

    return BotConfig(
        server=server,
        bot=identity,
        auth=auth,
        default_ai_model=default_model,
        ai_apis=ai_apis,
        bridge=bridge,
    )
