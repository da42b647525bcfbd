"""Shared pytest fixtures for the LoreRAG test suite."""

from __future__ import annotations

import hashlib
import re
import struct
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from lorerag.config.settings import (
    ChatSettings,
    ChunkingSettings,
    EmbeddingSettings,
    RetrievalSettings,
)
from lorerag.interfaces.chat_provider import IChatProvider
from lorerag.interfaces.chunk_store import IChunkStore
from lorerag.interfaces.embedding_provider import IEmbeddingProvider
from lorerag.models.lore import HybridCandidates, LoreChunk, SearchCandidate
from lorerag.services.embedding_gateway import EmbeddingGateway
from lorerag.services.ingestion import ContentFingerprinter, IngestionService, MarkdownChunker
from lorerag.services.retrieval import AnswerService, HybridRetriever

_EMBEDDING_DIM = 128
_WORD_RE = re.compile(r"[a-z0-9]+")


# ---------------------------------------------------------------------------
# Deterministic in-memory providers
# ---------------------------------------------------------------------------


def _hash_to_vector(text: str, dim: int = _EMBEDDING_DIM) -> list[float]:
    """Generate a deterministic unit vector by hashing *text*.

    SHA-256 digests are chained until there are ``dim`` bytes, each byte is
    mapped into [-1, 1], and the result is normalised to unit length.
    """
    raw = hashlib.sha256(text.encode("utf-8")).digest()
    while len(raw) < dim:
        raw += hashlib.sha256(raw).digest()
    values = [(b - 127.5) / 127.5 for b in struct.unpack(f"<{dim}B", raw[:dim])]
    magnitude = max(sum(v * v for v in values) ** 0.5, 1e-10)
    return [v / magnitude for v in values]


class MockEmbeddingProvider(IEmbeddingProvider):
    """In-memory deterministic embedding provider for tests."""

    def __init__(self, dim: int = _EMBEDDING_DIM) -> None:
        self._dim = dim
        self.calls: list[str] = []

    async def embed(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed_single(t) for t in texts]

    async def embed_single(self, text: str) -> list[float]:
        self.calls.append(text)
        return _hash_to_vector(text, self._dim)

    def get_dimension(self) -> int:
        return self._dim

    def get_provider_name(self) -> str:
        return "mock-embedding"

    def is_available(self) -> bool:
        return True


class MockChunkStore(IChunkStore):
    """In-memory chunk store keyed by content hash.

    Dense candidates are ranked by cosine similarity (dot product of unit
    vectors); lexical candidates are chunks sharing at least one word with
    the query, scored by the fraction of query words they contain.
    """

    def __init__(self) -> None:
        self.chunks: dict[str, LoreChunk] = {}
        self._next_id = 1
        self.healthy = True
        self.initialized = False
        self.closed = False

    async def initialize(self) -> None:
        self.initialized = True

    async def insert(self, chunk: LoreChunk) -> int | None:
        if chunk.content_hash in self.chunks:
            return None
        chunk_id = self._next_id
        self._next_id += 1
        self.chunks[chunk.content_hash] = chunk.model_copy(update={"id": chunk_id})
        return chunk_id

    async def exists(self, content_hash: str) -> bool:
        return content_hash in self.chunks

    async def hybrid_search(
        self,
        query_vector: list[float],
        query_text: str,
        limit: int,
    ) -> HybridCandidates:
        rows = sorted(self.chunks.values(), key=lambda c: c.id or 0)

        dense = sorted(
            (
                _candidate(c, sum(a * b for a, b in zip(c.embedding, query_vector)))
                for c in rows
            ),
            key=lambda cand: -cand.score,
        )[:limit]

        terms = set(_WORD_RE.findall(query_text.lower()))
        sparse: list[SearchCandidate] = []
        if terms:
            for c in rows:
                overlap = terms & set(_WORD_RE.findall(c.content.lower()))
                if overlap:
                    sparse.append(_candidate(c, len(overlap) / len(terms)))
            sparse.sort(key=lambda cand: -cand.score)

        return HybridCandidates(dense=dense, sparse=sparse[:limit])

    async def count(self) -> int:
        return len(self.chunks)

    async def ping(self) -> bool:
        return self.healthy

    async def close(self) -> None:
        self.closed = True


def _candidate(chunk: LoreChunk, score: float) -> SearchCandidate:
    return SearchCandidate(
        id=chunk.id,
        source_path=chunk.source_path,
        anchor_id=chunk.anchor_id,
        title=chunk.title,
        headings=chunk.headings,
        excerpt=chunk.content[:200],
        score=score,
    )


# ---------------------------------------------------------------------------
# Settings fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def embedding_settings() -> EmbeddingSettings:
    return EmbeddingSettings(dimensions=_EMBEDDING_DIM)


@pytest.fixture
def chunking_settings() -> ChunkingSettings:
    return ChunkingSettings()


@pytest.fixture
def retrieval_settings() -> RetrievalSettings:
    return RetrievalSettings()


@pytest.fixture
def chat_settings() -> ChatSettings:
    return ChatSettings()


# ---------------------------------------------------------------------------
# Provider and service fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_embedding_provider() -> MockEmbeddingProvider:
    return MockEmbeddingProvider()


@pytest.fixture
def mock_chunk_store() -> MockChunkStore:
    return MockChunkStore()


@pytest.fixture
def mock_chat_provider() -> IChatProvider:
    """Mock IChatProvider; override ``complete.return_value`` per test."""
    mock = MagicMock(spec=IChatProvider)
    mock.get_provider_name.return_value = "mock-chat"
    mock.is_available.return_value = True
    mock.complete = AsyncMock(return_value="The knowledge base says so. (Source: guide.md)")
    return mock


@pytest.fixture
def embedding_gateway(
    mock_embedding_provider: MockEmbeddingProvider,
    embedding_settings: EmbeddingSettings,
) -> EmbeddingGateway:
    return EmbeddingGateway(mock_embedding_provider, embedding_settings)


@pytest.fixture
def ingestion_service(
    chunking_settings: ChunkingSettings,
    embedding_gateway: EmbeddingGateway,
    mock_chunk_store: MockChunkStore,
) -> IngestionService:
    return IngestionService(
        chunker=MarkdownChunker(chunking_settings),
        fingerprinter=ContentFingerprinter(),
        embedding_gateway=embedding_gateway,
        store=mock_chunk_store,
    )


@pytest.fixture
def retriever(
    embedding_gateway: EmbeddingGateway,
    mock_chunk_store: MockChunkStore,
    retrieval_settings: RetrievalSettings,
) -> HybridRetriever:
    return HybridRetriever(embedding_gateway, mock_chunk_store, retrieval_settings)


@pytest.fixture
def answer_service(
    retriever: HybridRetriever,
    mock_chat_provider: IChatProvider,
    chat_settings: ChatSettings,
) -> AnswerService:
    return AnswerService(retriever, mock_chat_provider, chat_settings)


# ---------------------------------------------------------------------------
# Sample documents
# ---------------------------------------------------------------------------


@pytest.fixture
def docs_dir(tmp_path: Path) -> Path:
    """A small Markdown tree with a nested directory and a non-Markdown file."""
    root = tmp_path / "docs"
    (root / "guides").mkdir(parents=True)

    (root / "overview.md").write_text(
        "# Overview\n\n"
        "LoreRAG indexes Markdown documents for hybrid search.\n\n"
        "## Storage\n\n"
        "Chunks live in PostgreSQL with pgvector embeddings.\n",
        encoding="utf-8",
    )
    (root / "guides" / "ingestion.md").write_text(
        "# Ingestion\n\n"
        "Documents are split into heading-scoped chunks before embedding.\n\n"
        "## Deduplication\n\n"
        "Every chunk is fingerprinted with SHA-256 so reruns skip stored content.\n",
        encoding="utf-8",
    )
    (root / "notes.txt").write_text("not markdown", encoding="utf-8")
    return root
