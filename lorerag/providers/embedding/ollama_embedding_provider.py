"""Ollama embeddings through the server's OpenAI-compatible ``/v1`` API.

Defaults to ``nomic-embed-text`` (768 dimensions).  No API key is needed;
the SDK insists on one, so a placeholder is sent.
"""

from __future__ import annotations

import httpx
import openai

from lorerag.config.settings import OllamaEmbeddingBackend
from lorerag.providers.embedding.base import OpenAICompatibleEmbeddingProvider


class OllamaEmbeddingProvider(OpenAICompatibleEmbeddingProvider):
    provider_name = "ollama_embedding"
    batch_limit = 512

    def __init__(self, backend: OllamaEmbeddingBackend, dimensions: int) -> None:
        self._base_url = backend.endpoint
        client = openai.AsyncOpenAI(base_url=f"{self._base_url}/v1", api_key="ollama")
        super().__init__(client, backend.model, dimensions)

    def is_available(self) -> bool:
        """``True`` when ``GET /api/tags`` answers 200 within three seconds."""
        try:
            response = httpx.get(f"{self._base_url}/api/tags", timeout=3.0)
        except (httpx.ConnectError, httpx.TimeoutException):
            return False
        return response.status_code == 200
