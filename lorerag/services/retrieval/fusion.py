"""Weighted fusion of dense and lexical candidates into one ranking.

Pure functions, no I/O.  The weights are fixed constants of the ranking
design, not per-call parameters.
"""

from __future__ import annotations

from lorerag.models.lore import HybridCandidates, SearchCandidate, SearchHit

DENSE_WEIGHT = 0.65
SPARSE_WEIGHT = 0.35

# Each channel fetches this many times k so fusion has material to reorder.
CANDIDATE_MULTIPLIER = 2


def clamp_similarity(score: float) -> float:
    """Clamp a ``1 - cosine_distance`` score into ``[0, 1]``."""
    return min(1.0, max(0.0, score))


def fused_score(dense_score: float, sparse_score: float | None) -> float:
    """Combine channel scores; a missing channel contributes 0."""
    return DENSE_WEIGHT * dense_score + SPARSE_WEIGHT * (sparse_score or 0.0)


def fuse_candidates(candidates: HybridCandidates, k: int) -> list[SearchHit]:
    """Outer-join both candidate sets by id, score, rank and keep the top *k*.

    Join order is dense rows in store order followed by sparse-only rows in
    store order; the sort is stable, so equal fused scores keep that order.
    """
    rows: dict[int, SearchCandidate] = {}
    dense_scores: dict[int, float] = {}
    sparse_scores: dict[int, float] = {}

    for candidate in candidates.dense:
        rows.setdefault(candidate.id, candidate)
        dense_scores[candidate.id] = clamp_similarity(candidate.score)
    for candidate in candidates.sparse:
        rows.setdefault(candidate.id, candidate)
        sparse_scores[candidate.id] = candidate.score

    hits: list[SearchHit] = []
    for chunk_id, row in rows.items():
        dense = dense_scores.get(chunk_id, 0.0)
        sparse = sparse_scores.get(chunk_id)
        hits.append(
            SearchHit(
                id=chunk_id,
                source_path=row.source_path,
                anchor_id=row.anchor_id,
                title=row.title,
                headings=row.headings,
                excerpt=row.excerpt,
                dense_score=dense,
                sparse_score=sparse,
                fused_score=fused_score(dense, sparse),
            )
        )

    hits.sort(key=lambda hit: hit.fused_score, reverse=True)
    return hits[:k]
