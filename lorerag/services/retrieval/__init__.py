"""Hybrid retrieval and grounded answering."""

from lorerag.services.retrieval.answer_service import AnswerService
from lorerag.services.retrieval.fusion import fuse_candidates
from lorerag.services.retrieval.retriever import HybridRetriever

__all__ = ["AnswerService", "HybridRetriever", "fuse_candidates"]
