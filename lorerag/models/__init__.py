"""LoreRAG domain models - re-exports all public model classes."""

from __future__ import annotations

from lorerag.models.lore import (
    AnswerResponse,
    ChunkDraft,
    ChunkOutcome,
    DocumentIngestionResult,
    HybridCandidates,
    IngestionResult,
    LoreChunk,
    SearchCandidate,
    SearchHit,
    SearchResponse,
)

__all__ = [
    "AnswerResponse",
    "ChunkDraft",
    "ChunkOutcome",
    "DocumentIngestionResult",
    "HybridCandidates",
    "IngestionResult",
    "LoreChunk",
    "SearchCandidate",
    "SearchHit",
    "SearchResponse",
]
