# tests/test_config_loader.py
"""
Tests for env.loader.

Covers:
- full config in camelCase and snake_case
- defaults (port, version, defaultAIModel, bridge)
- API keys from environment variables
- validation errors
- the shipped config/bot.yaml and the validate_env script
"""

from __future__ import annotations

import runpy
import sys
from pathlib import Path

import pytest

from env.loader import (
    DEFAULT_CONFIG_PATH,
    PROJECT_ROOT,
    ConfigError,
    load_bot_config,
    parse_bot_config,
    resolve_config_path,
)

VALIDATE_ENV = PROJECT_ROOT / "config" / "tools" / "validate_env.py"

API_ENV_VARS = ("OPENAI_API_KEY", "GEMINI_API_KEY", "DEEPSEEK_API_KEY")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in API_ENV_VARS + ("MCBOT_CONFIG",):
        monkeypatch.delenv(var, raising=False)


def minimal() -> dict:
    return {
        "server": {"host": "mc.example.org"},
        "bot": {"username": "AIBot"},
        "auth": {"password": "hunter2"},
    }


def test_load_yaml_file(tmp_path: Path) -> None:
    path = tmp_path / "bot.yaml"
    path.write_text(
        """
server:
  host: mc.example.org
  port: 25570
  version: "1.19.4"
bot:
  username: Helper
auth:
  password: pw
defaultAIModel: Gemini
aiAPIs:
  chatgpt: sk-openai
  gemini: g-key
bridge:
  port: 4000
""",
        encoding="utf-8",
    )

    cfg = load_bot_config(path)

    assert cfg.server.host == "mc.example.org"
    assert cfg.server.port == 25570
    assert cfg.server.version == "1.19.4"
    assert cfg.bot.username == "Helper"
    assert cfg.auth.password == "pw"
    assert cfg.default_ai_model == "gemini"
    assert cfg.ai_apis.chatgpt == "sk-openai"
    assert cfg.ai_apis.gemini == "g-key"
    assert cfg.ai_apis.deepseek is None
    assert cfg.bridge.host == "127.0.0.1"
    assert cfg.bridge.port == 4000


def test_defaults() -> None:
    cfg = parse_bot_config(minimal())

    assert cfg.server.port == 25565
    assert cfg.server.version == "1.20.1"
    assert cfg.default_ai_model == "chatgpt"
    assert cfg.bridge.port == 3001
    assert cfg.bridge.request_timeout_s == 5.0


def test_snake_case_keys_are_accepted() -> None:
    raw = minimal()
    raw["default_ai_model"] = "deepseek"
    raw["ai_apis"] = {"deepseek": "ds-key"}

    cfg = parse_bot_config(raw)

    assert cfg.default_ai_model == "deepseek"
    assert cfg.ai_apis.for_backend("deepseek") == "ds-key"


def test_env_vars_override_file_keys(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "from-env")
    raw = minimal()
    raw["aiAPIs"] = {"chatgpt": "from-file"}

    cfg = parse_bot_config(raw)

    assert cfg.ai_apis.chatgpt == "from-env"


def test_unknown_default_model_is_rejected() -> None:
    raw = minimal()
    raw["defaultAIModel"] = "llama"

    with pytest.raises(ConfigError, match="defaultAIModel"):
        parse_bot_config(raw)


@pytest.mark.parametrize(
    "section, key",
    [("server", "host"), ("bot", "username"), ("auth", "password")],
)
def test_missing_required_key(section: str, key: str) -> None:
    raw = minimal()
    del raw[section][key]

    with pytest.raises(ConfigError, match=f"{section}.{key}"):
        parse_bot_config(raw)


def test_missing_section() -> None:
    raw = minimal()
    del raw["auth"]

    with pytest.raises(ConfigError, match="auth"):
        parse_bot_config(raw)


def test_bad_port() -> None:
    raw = minimal()
    raw["server"]["port"] = "twenty"

    with pytest.raises(ConfigError, match="server.port"):
        parse_bot_config(raw)


def test_bad_bridge_timeout() -> None:
    raw = minimal()
    raw["bridge"] = {"request_timeout_s": "5s"}

    with pytest.raises(ConfigError, match="bridge.request_timeout_s"):
        parse_bot_config(raw)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_bot_config(tmp_path / "nope.yaml")


def test_non_mapping_top_level(tmp_path: Path) -> None:
    path = tmp_path / "bot.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_bot_config(path)


def test_resolve_config_path_prefers_explicit_then_env(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("MCBOT_CONFIG", str(tmp_path / "env.yaml"))

    assert resolve_config_path(tmp_path / "explicit.yaml") == tmp_path / "explicit.yaml"
    assert resolve_config_path() == tmp_path / "env.yaml"


def test_shipped_sample_config_loads() -> None:
    cfg = load_bot_config()

    assert cfg.bot.username == "AIBot"
    assert cfg.server.port == 25565
    assert cfg.bridge.port == 3001
    assert cfg.default_ai_model == "chatgpt"


def test_validate_env_script_reports_ok(monkeypatch, capsys) -> None:
    namespace = runpy.run_path(str(VALIDATE_ENV))
    monkeypatch.setattr(sys, "argv", ["validate_env.py", str(DEFAULT_CONFIG_PATH)])

    namespace["main"]()

    out = capsys.readouterr().out
    assert "Config validation OK." in out
    assert "chatgpt: missing" in out


def test_validate_env_script_fails_on_bad_config(tmp_path: Path, monkeypatch, capsys) -> None:
    bad = tmp_path / "bot.yaml"
    bad.write_text("defaultAIModel: chatgpt\n", encoding="utf-8")
    namespace = runpy.run_path(str(VALIDATE_ENV))
    monkeypatch.setattr(sys, "argv", ["validate_env.py", str(bad)])

    with pytest.raises(SystemExit) as exc_info:
        namespace["main"]()

    assert exc_info.value.code == 1
    assert "Config validation FAILED" in capsys.readouterr().err
