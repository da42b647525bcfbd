"""Abstract interfaces for every external collaborator LoreRAG talks to.

Services depend on these ABCs only; concrete adapters live under
``lorerag/providers/`` and are chosen once at startup from settings.
"""

from lorerag.interfaces.chat_provider import IChatProvider
from lorerag.interfaces.chunk_store import IChunkStore
from lorerag.interfaces.embedding_provider import IEmbeddingProvider

__all__ = ["IChatProvider", "IChunkStore", "IEmbeddingProvider"]
