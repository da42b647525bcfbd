"""Azure OpenAI Chat Completions, addressed by deployment name."""

from __future__ import annotations

import openai

from lorerag.config.settings import AzureOpenAIChatBackend
from lorerag.providers.llm.base import OpenAICompatibleChatProvider


class AzureOpenAIChatProvider(OpenAICompatibleChatProvider):
    provider_name = "azure_openai_chat"

    def __init__(self, backend: AzureOpenAIChatBackend) -> None:
        self._backend = backend
        client = openai.AsyncAzureOpenAI(
            azure_endpoint=backend.endpoint,
            api_key=backend.api_key,
            api_version=backend.api_version,
        )
        super().__init__(client, backend.deployment)

    def is_available(self) -> bool:
        b = self._backend
        return bool(b.api_key and b.endpoint and b.deployment)
