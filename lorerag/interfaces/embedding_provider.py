"""Embedding backend contract.

Adapters live in ``lorerag/providers/embedding/``: OpenAI, Azure OpenAI and
Ollama.  Nothing calls them directly except
:class:`~lorerag.services.embedding_gateway.EmbeddingGateway`, which rejects
blank or over-long input before the call and checks vector length after it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class IEmbeddingProvider(ABC):
    """Turns chunk and query text into fixed-length dense vectors."""

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed *texts*, returning one vector per input in the same order.

        An empty list returns ``[]`` without a request.  Failures surface as
        :class:`~lorerag.utils.errors.EmbeddingError` chained to the SDK error.
        """

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Embed one string."""

    @abstractmethod
    def get_dimension(self) -> int:
        """Vector length the store was created with (768 for ``nomic-embed-text``)."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Identifier used in logs and error prefixes, e.g. ``"ollama_embedding"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Cheap configuration or reachability check; never embeds anything."""
