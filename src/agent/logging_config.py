# src/agent/logging_config.py
"""
Central logging configuration for the bot.

Call configure_logging() from your main entrypoint once, for example:

    from agent.logging_config import configure_logging
    configure_logging()

After that, connection, chat and backend logs are visible on stdout.
"""

from __future__ import annotations

import logging
import sys
from typing import Union


def parse_level(level: Union[int, str]) -> int:
    """Accept logging.INFO or "info"/"INFO"."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Configure root logging if no handlers are attached yet.

    Args:
        level: default logging level (e.g., logging.INFO, "debug")
    """
    root = logging.getLogger()

    # Don't duplicate handlers if someone already configured logging.
    if root.handlers:
        return

    handler = logging.StreamHandler(stream=sys.stdout)
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )
    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.setLevel(parse_level(level))

    # urllib3 is chatty at DEBUG about every pooled connection.
    logging.getLogger("urllib3").setLevel(max(root.level, logging.INFO))
