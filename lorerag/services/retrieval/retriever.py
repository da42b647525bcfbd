"""Hybrid dense + lexical retrieval over the chunk store.

Query flow:

    1. EMBED   -- the query text goes through the embedding gateway.
    2. FETCH   -- one store round trip returns ``2k`` nearest chunks by
                  cosine distance and ``2k`` best chunks by full-text rank,
                  each with a highlighted excerpt.
    3. FUSE    -- ``0.65 * dense + 0.35 * sparse`` over the outer join,
                  stable sort, truncate to ``k`` (see fusion.py).

Failures from the gateway or the store propagate unchanged; there are no
retries here.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog

from lorerag.models.lore import SearchHit, SearchResponse
from lorerag.services.retrieval.fusion import CANDIDATE_MULTIPLIER, fuse_candidates
from lorerag.utils.errors import InvalidInputError

if TYPE_CHECKING:
    from lorerag.config.settings import RetrievalSettings
    from lorerag.interfaces.chunk_store import IChunkStore
    from lorerag.services.embedding_gateway import EmbeddingGateway

logger = structlog.get_logger(logger_name=__name__)


class HybridRetriever:
    """Ranks stored chunks for a query by fusing vector and lexical relevance."""

    def __init__(
        self,
        embedding_gateway: EmbeddingGateway,
        store: IChunkStore,
        settings: RetrievalSettings,
    ) -> None:
        self._embedding = embedding_gateway
        self._store = store
        self._settings = settings

    @property
    def default_k(self) -> int:
        return self._settings.default_k

    def validate(self, query: str | None, k: int) -> None:
        """Reject empty or over-long queries and out-of-range *k*.

        Raises:
            InvalidInputError: before any external call is made.
        """
        if query is None or not query.strip():
            raise InvalidInputError("Query cannot be empty")
        if len(query) > self._settings.max_query_length:
            raise InvalidInputError(
                f"Query too long (max {self._settings.max_query_length} characters)"
            )
        if not 1 <= k <= self._settings.max_k:
            raise InvalidInputError(f"k must be between 1 and {self._settings.max_k}")

    async def retrieve(self, query_text: str, k: int) -> list[SearchHit]:
        """Return at most *k* hits, highest fused score first."""
        if k < 1:
            raise InvalidInputError("k must be at least 1")

        query_vector = await self._embedding.embed(query_text)
        candidates = await self._store.hybrid_search(
            query_vector,
            query_text,
            limit=CANDIDATE_MULTIPLIER * k,
        )
        hits = fuse_candidates(candidates, k)

        logger.debug(
            "hybrid_retrieval",
            query_length=len(query_text),
            k=k,
            dense_candidates=len(candidates.dense),
            sparse_candidates=len(candidates.sparse),
            hits=len(hits),
        )
        return hits

    async def lookup(self, query: str, k: int | None = None) -> SearchResponse:
        """Validate, retrieve and wrap the hits with a generation timestamp."""
        k = self.default_k if k is None else k
        self.validate(query, k)

        start = time.monotonic()
        hits = await self.retrieve(query, k)
        logger.info(
            "lore_lookup",
            query_length=len(query),
            k=k,
            hits=len(hits),
            elapsed_ms=round((time.monotonic() - start) * 1000, 2),
        )
        return SearchResponse(
            question=query,
            hits=hits,
            generated_at=datetime.now(tz=timezone.utc),
        )
