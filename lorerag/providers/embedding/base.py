"""Shared request path for embedding backends that speak the OpenAI API.

OpenAI, Azure OpenAI and Ollama's ``/v1`` endpoint accept the same
``embeddings.create`` call; subclasses only build the client and decide
how availability is probed.
"""

from __future__ import annotations

from typing import Any

import openai
import structlog

from lorerag.interfaces.embedding_provider import IEmbeddingProvider
from lorerag.utils.errors import EmbeddingError

logger = structlog.get_logger(logger_name=__name__)


class OpenAICompatibleEmbeddingProvider(IEmbeddingProvider):
    """Batches texts through an ``openai`` async client.

    Parameters
    ----------
    client:
        ``AsyncOpenAI`` or ``AsyncAzureOpenAI`` instance.
    model:
        Model name, or the deployment name on Azure.
    dimensions:
        Store dimensionality reported by :meth:`get_dimension`.
    request_dimensions:
        Send ``dimensions`` with each request (``text-embedding-3-*`` only).
    """

    provider_name = "openai_compatible_embedding"
    batch_limit = 2048

    def __init__(
        self,
        client: openai.AsyncOpenAI,
        model: str,
        dimensions: int,
        *,
        request_dimensions: bool = False,
    ) -> None:
        self._client = client
        self._model = model
        self._dimension = dimensions
        self._request_extra: dict[str, Any] = (
            {"dimensions": dimensions} if request_dimensions else {}
        )

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        vectors: list[list[float]] = []
        for start in range(0, len(texts), self.batch_limit):
            batch = texts[start : start + self.batch_limit]
            try:
                response = await self._client.embeddings.create(
                    input=batch, model=self._model, **self._request_extra
                )
            except openai.APIError as exc:
                raise EmbeddingError(
                    message=f"Embedding request to {self._model} failed: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc

            vectors.extend(item.embedding for item in response.data)
            logger.debug(
                "embedding_batch",
                provider=self.get_provider_name(),
                model=self._model,
                batch_size=len(batch),
                tokens=response.usage.total_tokens if response.usage else None,
            )
        return vectors

    async def embed_single(self, text: str) -> list[float]:
        (vector,) = await self.embed([text])
        return vector

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return self.provider_name
