"""Utility modules for LoreRAG.

- **errors** -- exception hierarchy rooted at LoreRAGError; each layer
  raises its own subclass so the API can map failures to status codes.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
"""

from lorerag.utils.errors import (
    ChatError,
    ChunkStoreError,
    ConfigurationError,
    EmbeddingError,
    InvalidInputError,
    LoreRAGError,
    SourceNotFoundError,
)
from lorerag.utils.logging import configure_logging, get_logger

__all__ = [
    "ChatError",
    "ChunkStoreError",
    "ConfigurationError",
    "EmbeddingError",
    "InvalidInputError",
    "LoreRAGError",
    "SourceNotFoundError",
    "configure_logging",
    "get_logger",
]
