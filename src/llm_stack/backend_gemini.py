# src/llm_stack/backend_gemini.py

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import requests

from .backend import BackendError, BackendName, ChatBackend
from .config import GEMINI_DEFAULTS, BackendConfig
from .memory import ConversationTurn, Role


class GeminiBackend(ChatBackend):
    """ChatBackend for the Gemini `generateContent` endpoint.

    Differences from the OpenAI shape:
    - the key travels in the query string, not a header
    - the system prompt goes into `systemInstruction`
    - assistant turns use the role "model"
    - the reply is read from candidates[0].content.parts[0].text
    """

    name = BackendName.GEMINI

    def __init__(
        self,
        config: BackendConfig = GEMINI_DEFAULTS,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._cfg = config
        self._session = session or requests.Session()

    def send(
        self,
        system_prompt: str,
        history: Sequence[ConversationTurn],
        user_text: str,
        api_key: Optional[str],
    ) -> str:
        if not api_key:
            raise BackendError(self.name, "missing API key")

        contents: List[Dict[str, Any]] = [
            {
                "role": "model" if turn.role is Role.ASSISTANT else "user",
                "parts": [{"text": turn.content}],
            }
            for turn in history
        ]
        contents.append({"role": "user", "parts": [{"text": user_text}]})

        body = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": contents,
            "generationConfig": {
                "maxOutputTokens": self._cfg.max_tokens,
                "temperature": self._cfg.temperature,
            },
        }
        url = self._cfg.url.format(model=self._cfg.model)

        try:
            resp = self._session.post(
                url,
                params={"key": api_key},
                json=body,
                headers={"Content-Type": "application/json"},
                timeout=self._cfg.timeout_s,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            raise BackendError(self.name, f"request failed: {exc}") from exc
        except ValueError as exc:
            raise BackendError(self.name, "response was not JSON") from exc

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise BackendError(self.name, f"unexpected response shape: {data!r}") from exc
        if not isinstance(text, str):
            raise BackendError(self.name, "reply content is not text")
        return text.strip()
