"""Chat Completions call shared by the OpenAI, Azure OpenAI and Ollama adapters."""

from __future__ import annotations

import openai
import structlog

from lorerag.interfaces.chat_provider import IChatProvider
from lorerag.utils.errors import ChatError

logger = structlog.get_logger(logger_name=__name__)


class OpenAICompatibleChatProvider(IChatProvider):
    """Sends a system + user message pair and returns the first choice's text."""

    provider_name = "openai_compatible_chat"

    def __init__(self, client: openai.AsyncOpenAI, model: str) -> None:
        self._client = client
        self._model = model

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 1024,
    ) -> str:
        """Return the completion text; a ``None`` message content becomes ``""``."""
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APIError as exc:
            raise ChatError(
                message=f"Completion request to {self._model} failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info(
            "chat_completion",
            provider=self.get_provider_name(),
            model=self._model,
            prompt_chars=len(system_prompt) + len(user_prompt),
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return response.choices[0].message.content or ""

    def get_provider_name(self) -> str:
        return self.provider_name
