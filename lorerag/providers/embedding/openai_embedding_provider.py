"""OpenAI embeddings (``text-embedding-3-small`` by default).

``text-embedding-3-*`` models are asked for the store's dimensionality
directly, so a 768-dimension table works without re-indexing.
"""

from __future__ import annotations

import openai

from lorerag.config.settings import OpenAIEmbeddingBackend
from lorerag.providers.embedding.base import OpenAICompatibleEmbeddingProvider


class OpenAIEmbeddingProvider(OpenAICompatibleEmbeddingProvider):
    provider_name = "openai_embedding"

    def __init__(self, backend: OpenAIEmbeddingBackend, dimensions: int) -> None:
        self._api_key = backend.api_key
        super().__init__(
            openai.AsyncOpenAI(api_key=backend.api_key),
            backend.model,
            dimensions,
            request_dimensions=backend.model.startswith("text-embedding-3"),
        )

    def is_available(self) -> bool:
        """Key presence only; the key is not verified."""
        return bool(self._api_key)
