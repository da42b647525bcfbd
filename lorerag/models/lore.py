"""Data models for the LoreRAG knowledge base.

Defines Pydantic v2 models for segmented chunk drafts, persisted chunks,
per-channel search candidates, ranked hits and ingestion statistics.  All
models are frozen: a chunk is never mutated once it has been stored.

Lifecycle of a chunk:

    1. SEGMENT: ``MarkdownChunker`` turns a document into ``ChunkDraft``s.
    2. FINGERPRINT: each draft's content is hashed (``content_hash``).
    3. EMBED: non-duplicate drafts get a dense vector.
    4. STORE: the draft + hash + vector become a ``LoreChunk`` row.
    5. RETRIEVE: the store returns ``SearchCandidate`` rows per channel,
       which the retriever fuses into ``SearchHit``s.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Chunks
# ---------------------------------------------------------------------------
class ChunkDraft(BaseModel):
    """A segmented passage that has not been fingerprinted or embedded yet.

    Drafts may carry empty content (a heading with no body); the ingestion
    pipeline skips those instead of persisting them.
    """

    model_config = ConfigDict(frozen=True)

    source_path: str = Field(description="Path of the source document (not unique).")
    anchor_id: str | None = Field(
        default=None,
        description="Slug of the nearest enclosing heading, None before any heading.",
    )
    title: str | None = Field(default=None, description="Text of the enclosing heading.")
    headings: list[str] | None = Field(
        default=None,
        description="Heading path for the chunk; only the immediate title is recorded.",
    )
    content: str = Field(description="Normalized chunk text.")
    tokens: int = Field(default=0, ge=0, description="Estimated token count (len // 4).")
    word_count: int = Field(default=0, ge=0, description="Whitespace-delimited word count.")
    links_to: list[str] | None = Field(
        default=None,
        description="Reserved for outbound link targets; not populated by the segmenter.",
    )
    updated_at: datetime = Field(description="UTC timestamp set when the chunk was created.")


class LoreChunk(ChunkDraft):
    """The persisted unit of retrieval: a draft plus its hash and embedding."""

    id: int | None = Field(
        default=None,
        description="Surrogate key assigned by the store on insert.",
    )
    embedding: list[float] = Field(description="Dense vector of the configured dimensionality.")
    content_hash: str = Field(description="Fingerprint of the content; the idempotency key.")

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("persisted chunk content must not be blank")
        return value


# ---------------------------------------------------------------------------
# Retrieval
# ---------------------------------------------------------------------------
class SearchCandidate(BaseModel):
    """One row from a single retrieval channel (dense or sparse)."""

    model_config = ConfigDict(frozen=True)

    id: int
    source_path: str
    anchor_id: str | None = None
    title: str | None = None
    headings: list[str] | None = None
    excerpt: str = Field(default="", description="Highlighted fragment of the content.")
    score: float = Field(description="Channel score: cosine similarity or lexical rank.")


class HybridCandidates(BaseModel):
    """Both candidate sets returned by one hybrid store query.

    Each list is in the store's natural order for its channel (nearest
    first for dense, highest rank first for sparse).
    """

    model_config = ConfigDict(frozen=True)

    dense: list[SearchCandidate] = Field(default_factory=list)
    sparse: list[SearchCandidate] = Field(default_factory=list)


class SearchHit(BaseModel):
    """A ranked, fused retrieval result.  Transient; never persisted."""

    model_config = ConfigDict(frozen=True)

    id: int
    source_path: str
    anchor_id: str | None = None
    title: str | None = None
    headings: list[str] | None = None
    excerpt: str = ""
    dense_score: float = Field(ge=0.0, le=1.0, description="Cosine similarity, clamped to [0, 1].")
    sparse_score: float | None = Field(
        default=None,
        description="Lexical rank; None when the chunk was not a lexical candidate.",
    )
    fused_score: float = Field(description="Weighted combination of the two channel scores.")


class SearchResponse(BaseModel):
    """Envelope for a lookup call."""

    model_config = ConfigDict(frozen=True)

    question: str
    hits: list[SearchHit] = Field(default_factory=list)
    generated_at: datetime


class AnswerResponse(BaseModel):
    """Envelope for an answer call: the completion plus the hits that grounded it."""

    model_config = ConfigDict(frozen=True)

    question: str
    answer: str
    sources: list[SearchHit] = Field(default_factory=list)
    generated_at: datetime


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------
class ChunkOutcome(str, Enum):
    """What happened to one chunk draft during ingestion."""

    CREATED = "created"
    SKIPPED_EMPTY = "skipped_empty"
    SKIPPED_DUPLICATE = "skipped_duplicate"


class DocumentIngestionResult(BaseModel):
    """Counts for a single ingested document."""

    model_config = ConfigDict(frozen=True)

    source_path: str
    created: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)


class IngestionResult(BaseModel):
    """Aggregate statistics for a directory ingestion run."""

    model_config = ConfigDict(frozen=True)

    files_processed: int = Field(
        default=0,
        ge=0,
        description="Documents that were ingested without error.",
    )
    created: int = Field(default=0, ge=0, description="Chunks newly persisted.")
    skipped: int = Field(default=0, ge=0, description="Chunks skipped as empty or duplicate.")
    errors: list[str] = Field(
        default_factory=list,
        description='Per-document failures formatted as "<path>: <message>".',
    )
    elapsed_ms: float = Field(default=0.0, ge=0.0, description="Wall-clock duration of the run.")
