"""OpenAI Chat Completions (``gpt-4o`` by default)."""

from __future__ import annotations

import openai

from lorerag.config.settings import OpenAIChatBackend
from lorerag.providers.llm.base import OpenAICompatibleChatProvider


class OpenAIChatProvider(OpenAICompatibleChatProvider):
    provider_name = "openai_chat"

    def __init__(self, backend: OpenAIChatBackend) -> None:
        self._api_key = backend.api_key
        super().__init__(openai.AsyncOpenAI(api_key=backend.api_key), backend.model)

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def validate_credentials(self) -> bool:
        """List models to check the key is accepted; costs no inference."""
        if not self._api_key:
            return False
        try:
            await self._client.models.list()
        except openai.APIError:
            return False
        return True
