"""Grounded question answering on top of hybrid retrieval.

Runs a lookup, formats the hits as a context block, and sends one prompt
to the chat provider.  The hits are returned alongside the answer as its
sources.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog

from lorerag.models.lore import AnswerResponse, SearchHit

if TYPE_CHECKING:
    from lorerag.config.settings import ChatSettings
    from lorerag.interfaces.chat_provider import IChatProvider
    from lorerag.services.retrieval.retriever import HybridRetriever

logger = structlog.get_logger(logger_name=__name__)

FALLBACK_ANSWER = "Unable to generate an answer."


def build_context(hits: list[SearchHit]) -> str:
    """Render *hits* as the knowledge-base context block of the prompt."""
    lines = ["Based on the following information from the knowledge base:", ""]
    for hit in hits:
        lines.append(f"**Source: {hit.source_path}**")
        if hit.title:
            lines.append(f"Section: {hit.title}")
        lines.append(f"Excerpt: {hit.excerpt}")
        lines.append(f"Relevance Score: {hit.fused_score:.2f}")
        lines.append("")
    return "\n".join(lines)


class AnswerService:
    """Answers questions from retrieved lore via a single chat completion."""

    _SYSTEM_PROMPT = (
        "You are a helpful assistant that answers questions based on the provided "
        "context from a knowledge base.\n\n"
        "Guidelines:\n"
        "- Answer from the context; if it does not contain enough information, "
        "say what is missing\n"
        "- Always cite which sources you are using\n"
        "- Do not ask follow-up questions"
    )

    def __init__(
        self,
        retriever: HybridRetriever,
        chat_provider: IChatProvider,
        settings: ChatSettings,
    ) -> None:
        self._retriever = retriever
        self._chat = chat_provider
        self._temperature = settings.temperature
        self._max_tokens = settings.max_tokens

    async def ask(self, question: str, k: int | None = None) -> AnswerResponse:
        """Answer *question* using the top *k* hits as grounding.

        Validation is the lookup's: empty or over-long questions raise
        ``InvalidInputError`` before anything is embedded or generated.
        With no hits the chat model is not called and the fallback answer
        is returned.
        """
        lookup = await self._retriever.lookup(question, k)
        if not lookup.hits:
            logger.info("lore_answer_no_hits", question_length=len(question))
            return AnswerResponse(
                question=question,
                answer=FALLBACK_ANSWER,
                sources=[],
                generated_at=datetime.now(tz=timezone.utc),
            )

        user_prompt = f"Context:\n{build_context(lookup.hits)}\nQuestion: {question}"
        answer = await self._chat.complete(
            system_prompt=self._SYSTEM_PROMPT,
            user_prompt=user_prompt,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        if not answer or not answer.strip():
            logger.warning("empty_chat_answer", provider=self._chat.get_provider_name())
            answer = FALLBACK_ANSWER

        logger.info(
            "lore_answer",
            question_length=len(question),
            sources=len(lookup.hits),
            answer_length=len(answer),
        )
        return AnswerResponse(
            question=question,
            answer=answer,
            sources=lookup.hits,
            generated_at=datetime.now(tz=timezone.utc),
        )
