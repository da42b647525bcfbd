"""LoreRAG exception hierarchy.

    LoreRAGError
    +-- InvalidInputError     400: empty or over-long query, k out of range, blank embedding input
    +-- SourceNotFoundError   404: ingestion path missing or not a directory
    +-- ConfigurationError    startup: settings that fail validation
    +-- EmbeddingError        500: embedding provider failure or wrong dimensionality
    +-- ChatError             500: chat completion failure
    +-- ChunkStoreError       500: PostgreSQL / pgvector failure

Provider adapters raise these ``from`` the SDK or driver exception, naming
themselves in ``provider_name`` (``"openai_embedding"``, ``"postgres"``...).
"""

from __future__ import annotations


class LoreRAGError(Exception):
    """Base class; ``str()`` renders as ``[provider] message``."""

    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None, provider_name: str | None = None) -> None:
        self._message = message or self.default_message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


class InvalidInputError(LoreRAGError):
    default_message = "Invalid input"


class SourceNotFoundError(LoreRAGError):
    default_message = "Source path not found"


class ConfigurationError(LoreRAGError):
    default_message = "Invalid or missing configuration"


class EmbeddingError(LoreRAGError):
    default_message = "Embedding generation failed"


class ChatError(LoreRAGError):
    default_message = "Chat completion failed"


class ChunkStoreError(LoreRAGError):
    default_message = "Chunk store operation failed"
