"""Chat model contract used by the answer operation.

One call per question: a fixed grounding system prompt plus the numbered
excerpts and the question as the user turn.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class IChatProvider(ABC):
    """Answers a question from the excerpts placed in the prompt."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 1024,
    ) -> str:
        """Return the model's reply text, possibly empty.

        Parameters
        ----------
        system_prompt:
            Grounding rules: answer only from the excerpts, cite sources.
        user_prompt:
            Numbered excerpts followed by the question.
        temperature:
            Sampling temperature; the answer service uses a low value.
        max_tokens:
            Reply length cap.

        Raises
        ------
        lorerag.utils.errors.ChatError
            The completion request failed.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Identifier used in logs, e.g. ``"ollama_chat"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Credentials present (hosted) or server reachable (Ollama)."""
