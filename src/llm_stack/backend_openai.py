# src/llm_stack/backend_openai.py

from __future__ import annotations

from typing import Any, Optional, Sequence

import requests

from .backend import BackendError, BackendName, ChatBackend, history_as_messages
from .config import DEEPSEEK_DEFAULTS, OPENAI_DEFAULTS, BackendConfig
from .memory import ConversationTurn


class OpenAICompatibleBackend(ChatBackend):
    """ChatBackend for OpenAI-style `/chat/completions` endpoints.

    Used for both ChatGPT and DeepSeek, which share the request and response
    shape and differ only in URL, model and key:

        POST {url}
        Authorization: Bearer <key>
        {"model": ..., "messages": [system, *history, user],
         "max_tokens": ..., "temperature": ...}

    The reply is read from choices[0].message.content.
    """

    def __init__(
        self,
        name: BackendName,
        config: BackendConfig,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.name = name
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

        messages = [{"role": "system", "content": system_prompt}]
        messages.extend(history_as_messages(history))
        messages.append({"role": "user", "content": user_text})

        body = {
            "model": self._cfg.model,
            "messages": messages,
            "max_tokens": self._cfg.max_tokens,
            "temperature": self._cfg.temperature,
        }
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

        try:
            resp = self._session.post(
                self._cfg.url,
                json=body,
                headers=headers,
                timeout=self._cfg.timeout_s,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            raise BackendError(self.name, f"request failed: {exc}") from exc
        except ValueError as exc:
            raise BackendError(self.name, "response was not JSON") from exc

        return self._extract_text(data)

    def _extract_text(self, data: Any) -> str:
        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise BackendError(self.name, f"unexpected response shape: {data!r}") from exc
        if not isinstance(text, str):
            raise BackendError(self.name, "reply content is not text")
        return text.strip()


def build_chatgpt_backend(session: Optional[requests.Session] = None) -> OpenAICompatibleBackend:
    return OpenAICompatibleBackend(BackendName.CHATGPT, OPENAI_DEFAULTS, session=session)


def build_deepseek_backend(session: Optional[requests.Session] = None) -> OpenAICompatibleBackend:
    return OpenAICompatibleBackend(BackendName.DEEPSEEK, DEEPSEEK_DEFAULTS, session=session)
