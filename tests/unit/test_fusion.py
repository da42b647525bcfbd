"""Unit tests for dense + lexical score fusion."""

from __future__ import annotations

import pytest

from lorerag.models.lore import HybridCandidates, SearchCandidate
from lorerag.services.retrieval.fusion import (
    DENSE_WEIGHT,
    SPARSE_WEIGHT,
    clamp_similarity,
    fuse_candidates,
    fused_score,
)


def _cand(chunk_id: int, score: float, excerpt: str = "") -> SearchCandidate:
    return SearchCandidate(
        id=chunk_id,
        source_path=f"doc{chunk_id}.md",
        excerpt=excerpt,
        score=score,
    )


class TestFusedScore:
    def test_weights(self) -> None:
        assert DENSE_WEIGHT == pytest.approx(0.65)
        assert SPARSE_WEIGHT == pytest.approx(0.35)

    def test_dense_only_contributes_dense_weight(self) -> None:
        assert fused_score(1.0, None) == pytest.approx(0.65)

    def test_sparse_only_contributes_sparse_weight(self) -> None:
        assert fused_score(0.0, 1.0) == pytest.approx(0.35)

    def test_monotone_in_each_channel(self) -> None:
        assert fused_score(0.6, 0.2) > fused_score(0.5, 0.2)
        assert fused_score(0.5, 0.3) > fused_score(0.5, 0.2)

    @pytest.mark.parametrize(("raw", "clamped"), [(-0.3, 0.0), (0.4, 0.4), (1.2, 1.0)])
    def test_clamp_similarity(self, raw: float, clamped: float) -> None:
        assert clamp_similarity(raw) == clamped


class TestFuseCandidates:
    def test_outer_join_marks_missing_channels(self) -> None:
        candidates = HybridCandidates(
            dense=[_cand(1, 0.9), _cand(2, 0.5)],
            sparse=[_cand(2, 0.4), _cand(3, 0.8)],
        )
        hits = {hit.id: hit for hit in fuse_candidates(candidates, k=10)}

        assert set(hits) == {1, 2, 3}
        assert hits[1].sparse_score is None
        assert hits[1].fused_score == pytest.approx(0.65 * 0.9)
        assert hits[2].fused_score == pytest.approx(0.65 * 0.5 + 0.35 * 0.4)
        assert hits[3].dense_score == 0.0
        assert hits[3].fused_score == pytest.approx(0.35 * 0.8)

    def test_sorted_descending_and_truncated(self) -> None:
        candidates = HybridCandidates(
            dense=[_cand(i, i / 10) for i in range(1, 8)],
            sparse=[],
        )
        hits = fuse_candidates(candidates, k=3)

        assert [hit.id for hit in hits] == [7, 6, 5]
        scores = [hit.fused_score for hit in hits]
        assert scores == sorted(scores, reverse=True)

    def test_ties_keep_dense_then_sparse_order(self) -> None:
        candidates = HybridCandidates(
            dense=[_cand(5, 0.0), _cand(4, 0.0)],
            sparse=[_cand(9, 0.0)],
        )
        assert [hit.id for hit in fuse_candidates(candidates, k=3)] == [5, 4, 9]

    def test_negative_similarity_is_clamped(self) -> None:
        hits = fuse_candidates(HybridCandidates(dense=[_cand(1, -0.2)]), k=1)
        assert hits[0].dense_score == 0.0
        assert hits[0].fused_score == 0.0

    def test_dense_row_metadata_wins(self) -> None:
        candidates = HybridCandidates(
            dense=[_cand(1, 0.5, excerpt="dense excerpt")],
            sparse=[_cand(1, 0.5, excerpt="sparse excerpt")],
        )
        assert fuse_candidates(candidates, k=1)[0].excerpt == "dense excerpt"

    def test_empty_candidates(self) -> None:
        assert fuse_candidates(HybridCandidates(), k=5) == []
