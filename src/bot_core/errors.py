# src/bot_core/errors.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class GameClientError(RuntimeError):
    """
    Domain-level error for game-session failures.

    Examples:
        - bridge refused the connection
        - a bridge request timed out or was answered with an error
        - writing to a session that is already closed
    """

    code: str
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"GameClientError(code={self.code!r}, details={self.details!r})"
