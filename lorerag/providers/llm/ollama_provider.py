"""Ollama chat through the server's OpenAI-compatible ``/v1`` API.

Setup: install Ollama, run ``ollama pull llama3.2`` and point
``CHAT__BACKEND__ENDPOINT`` at the server.
"""

from __future__ import annotations

import httpx
import openai

from lorerag.config.settings import OllamaChatBackend
from lorerag.providers.llm.base import OpenAICompatibleChatProvider


class OllamaChatProvider(OpenAICompatibleChatProvider):
    provider_name = "ollama_chat"

    def __init__(self, backend: OllamaChatBackend) -> None:
        self._base_url = backend.endpoint
        # The SDK requires a key; Ollama ignores it.
        client = openai.AsyncOpenAI(base_url=f"{self._base_url}/v1", api_key="ollama")
        super().__init__(client, backend.model)

    def is_available(self) -> bool:
        try:
            response = httpx.get(f"{self._base_url}/api/tags", timeout=3.0)
        except (httpx.ConnectError, httpx.TimeoutException):
            return False
        return response.status_code == 200
