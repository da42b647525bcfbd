"""Abstract base class for the chunk store.

The store persists :class:`~lorerag.models.lore.LoreChunk` rows and
answers two kinds of question in one round trip: nearest neighbours by
cosine distance over the embeddings, and best lexical matches by
full-text rank.  How the engine executes either search is its own
business; callers only see the two ordered candidate lists.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from lorerag.models.lore import HybridCandidates, LoreChunk


# Concrete implementations: PostgresChunkStore (pgvector + tsvector)
# Located in: lorerag/providers/chunk_store/
class IChunkStore(ABC):
    """Contract for persisting chunks and running hybrid candidate retrieval."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create the schema (extension, table, indexes) if it is missing."""

    @abstractmethod
    async def insert(self, chunk: LoreChunk) -> int | None:
        """Persist *chunk* and return its assigned id.

        Returns
        -------
        int | None
            The new row id, or ``None`` when a chunk with the same
            ``content_hash`` already exists (nothing was written).

        Raises
        ------
        lorerag.utils.errors.ChunkStoreError
            If the write fails or the embedding has the wrong dimension.
        """

    @abstractmethod
    async def exists(self, content_hash: str) -> bool:
        """Return ``True`` if a chunk with *content_hash* is already stored."""

    @abstractmethod
    async def hybrid_search(
        self,
        query_vector: list[float],
        query_text: str,
        limit: int,
    ) -> HybridCandidates:
        """Return up to *limit* dense and up to *limit* sparse candidates.

        Parameters
        ----------
        query_vector:
            Embedding of the query, same dimensionality as the store.
        query_text:
            Raw query text, parsed with web-search syntax for lexical rank.
        limit:
            Per-channel candidate cap.

        Returns
        -------
        HybridCandidates
            Dense candidates scored ``1 - cosine_distance`` nearest first,
            and sparse candidates scored by lexical rank best first.  Each
            candidate carries a highlighted excerpt.
        """

    @abstractmethod
    async def count(self) -> int:
        """Return the number of stored chunks."""

    @abstractmethod
    async def ping(self) -> bool:
        """Return ``True`` if the backing database answers a trivial query."""

    @abstractmethod
    async def close(self) -> None:
        """Release pooled connections."""
