"""Unit tests for HybridRetriever validation and orchestration."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from lorerag.config.settings import RetrievalSettings
from lorerag.interfaces.chunk_store import IChunkStore
from lorerag.models.lore import HybridCandidates, LoreChunk, SearchCandidate
from lorerag.services.embedding_gateway import EmbeddingGateway
from lorerag.services.retrieval.retriever import HybridRetriever
from lorerag.utils.errors import ChunkStoreError, InvalidInputError
from tests.conftest import MockChunkStore, _hash_to_vector


def _spy_store(candidates: HybridCandidates | None = None) -> MagicMock:
    store = MagicMock(spec=IChunkStore)
    store.hybrid_search = AsyncMock(return_value=candidates or HybridCandidates())
    return store


async def _seed(store: MockChunkStore, source: str, content: str) -> None:
    await store.insert(
        LoreChunk(
            source_path=source,
            content=content,
            embedding=_hash_to_vector(content),
            content_hash=f"hash-{source}-{content}",
            updated_at=datetime.now(tz=timezone.utc),
        )
    )


class TestValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   ", None])
    async def test_empty_query_rejected(
        self, embedding_gateway: EmbeddingGateway, query: str | None
    ) -> None:
        store = _spy_store()
        retriever = HybridRetriever(embedding_gateway, store, RetrievalSettings())

        with pytest.raises(InvalidInputError, match="Query cannot be empty"):
            await retriever.lookup(query)  # type: ignore[arg-type]
        store.hybrid_search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_query_at_length_limit_accepted(
        self, embedding_gateway: EmbeddingGateway
    ) -> None:
        retriever = HybridRetriever(embedding_gateway, _spy_store(), RetrievalSettings())
        response = await retriever.lookup("q" * 500)
        assert response.hits == []

    @pytest.mark.asyncio
    async def test_query_over_length_limit_rejected(
        self, embedding_gateway: EmbeddingGateway
    ) -> None:
        store = _spy_store()
        retriever = HybridRetriever(embedding_gateway, store, RetrievalSettings())

        with pytest.raises(InvalidInputError, match="max 500"):
            await retriever.lookup("q" * 501)
        store.hybrid_search.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("k", [0, -1, 21])
    async def test_k_out_of_range_rejected(
        self, embedding_gateway: EmbeddingGateway, k: int
    ) -> None:
        retriever = HybridRetriever(embedding_gateway, _spy_store(), RetrievalSettings())
        with pytest.raises(InvalidInputError, match="between 1 and 20"):
            await retriever.lookup("lore", k)

    @pytest.mark.asyncio
    async def test_retrieve_rejects_non_positive_k(
        self, embedding_gateway: EmbeddingGateway
    ) -> None:
        retriever = HybridRetriever(embedding_gateway, _spy_store(), RetrievalSettings())
        with pytest.raises(InvalidInputError):
            await retriever.retrieve("lore", 0)


class TestRetrieve:
    @pytest.mark.asyncio
    async def test_requests_twice_k_candidates(self, embedding_gateway: EmbeddingGateway) -> None:
        store = _spy_store()
        retriever = HybridRetriever(embedding_gateway, store, RetrievalSettings())

        await retriever.retrieve("pgvector", 4)

        args, kwargs = store.hybrid_search.call_args
        assert args[1] == "pgvector"
        assert kwargs["limit"] == 8
        assert len(args[0]) == embedding_gateway.dimensions

    @pytest.mark.asyncio
    async def test_default_k_is_used(self, embedding_gateway: EmbeddingGateway) -> None:
        store = _spy_store(
            HybridCandidates(
                dense=[
                    SearchCandidate(id=i, source_path="a.md", score=1 - i / 100)
                    for i in range(1, 13)
                ]
            )
        )
        retriever = HybridRetriever(embedding_gateway, store, RetrievalSettings(default_k=6))

        response = await retriever.lookup("lore")

        assert len(response.hits) == 6
        assert store.hybrid_search.call_args.kwargs["limit"] == 12

    @pytest.mark.asyncio
    async def test_store_errors_propagate(self, embedding_gateway: EmbeddingGateway) -> None:
        store = _spy_store()
        store.hybrid_search.side_effect = ChunkStoreError("db down", provider_name="postgres")
        retriever = HybridRetriever(embedding_gateway, store, RetrievalSettings())

        with pytest.raises(ChunkStoreError):
            await retriever.lookup("lore")

    @pytest.mark.asyncio
    async def test_exact_content_match_ranks_first(
        self, retriever: HybridRetriever, mock_chunk_store: MockChunkStore
    ) -> None:
        await _seed(mock_chunk_store, "a.md", "pgvector stores dense embeddings")
        await _seed(mock_chunk_store, "b.md", "tsvector powers full text search")
        await _seed(mock_chunk_store, "c.md", "chunks are fingerprinted with sha256")

        response = await retriever.lookup("tsvector powers full text search", 3)

        assert response.hits[0].source_path == "b.md"
        assert response.hits[0].sparse_score is not None
        assert response.question == "tsvector powers full text search"
        assert response.generated_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_empty_store_returns_no_hits(self, retriever: HybridRetriever) -> None:
        response = await retriever.lookup("anything")
        assert response.hits == []
