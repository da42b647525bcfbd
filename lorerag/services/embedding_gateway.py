"""Validated access to the configured embedding provider.

Every embedding in LoreRAG, for chunks at ingestion and for queries at
retrieval, goes through :class:`EmbeddingGateway`.  It rejects blank or
over-long input before any network call and refuses vectors whose length
differs from the store's configured dimensionality.
"""

from __future__ import annotations

import structlog

from lorerag.config.settings import EmbeddingSettings
from lorerag.interfaces.embedding_provider import IEmbeddingProvider
from lorerag.utils.errors import EmbeddingError, InvalidInputError

logger = structlog.get_logger(logger_name=__name__)


class EmbeddingGateway:
    """Single-text embedding with input and output checks."""

    def __init__(self, provider: IEmbeddingProvider, settings: EmbeddingSettings) -> None:
        self._provider = provider
        self._dimensions = settings.dimensions
        self._max_input_tokens = settings.max_input_tokens

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def provider_name(self) -> str:
        return self._provider.get_provider_name()

    async def embed(self, text: str) -> list[float]:
        """Return the embedding of *text*.

        Raises:
            InvalidInputError: *text* is blank or its ``len // 4`` estimate
                exceeds ``max_input_tokens``.  No call is made.
            EmbeddingError: the provider failed or returned a vector of the
                wrong length.
        """
        if not text or not text.strip():
            raise InvalidInputError("Text to embed must not be empty")

        estimated = len(text) // 4
        if estimated > self._max_input_tokens:
            raise InvalidInputError(
                f"Text too long to embed: ~{estimated} tokens "
                f"(limit {self._max_input_tokens})"
            )

        vector = await self._provider.embed_single(text)
        if len(vector) != self._dimensions:
            logger.error(
                "embedding_dimension_mismatch",
                provider=self.provider_name,
                expected=self._dimensions,
                actual=len(vector),
            )
            raise EmbeddingError(
                message=(
                    f"Provider returned {len(vector)} dimensions, "
                    f"expected {self._dimensions}"
                ),
                provider_name=self.provider_name,
            )
        return vector

    def is_available(self) -> bool:
        return self._provider.is_available()
