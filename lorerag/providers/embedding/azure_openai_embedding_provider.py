"""Azure OpenAI embeddings, addressed by deployment name."""

from __future__ import annotations

import openai

from lorerag.config.settings import AzureOpenAIEmbeddingBackend
from lorerag.providers.embedding.base import OpenAICompatibleEmbeddingProvider


class AzureOpenAIEmbeddingProvider(OpenAICompatibleEmbeddingProvider):
    provider_name = "azure_openai_embedding"

    def __init__(self, backend: AzureOpenAIEmbeddingBackend, dimensions: int) -> None:
        self._backend = backend
        client = openai.AsyncAzureOpenAI(
            azure_endpoint=backend.endpoint,
            api_key=backend.api_key,
            api_version=backend.api_version,
        )
        super().__init__(client, backend.deployment, dimensions)

    def is_available(self) -> bool:
        b = self._backend
        return bool(b.api_key and b.endpoint and b.deployment)
