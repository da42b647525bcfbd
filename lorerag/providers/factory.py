"""Provider selection from validated settings.

Settings already guarantee a known ``provider`` value with its
credentials, so selection is a lookup on the backend's variant type.
Both the web app and the CLI build their providers here.
"""

from __future__ import annotations

from lorerag.config.settings import (
    AzureOpenAIChatBackend,
    AzureOpenAIEmbeddingBackend,
    ChatSettings,
    EmbeddingSettings,
    OllamaChatBackend,
    OllamaEmbeddingBackend,
    OpenAIChatBackend,
    OpenAIEmbeddingBackend,
)
from lorerag.interfaces.chat_provider import IChatProvider
from lorerag.interfaces.embedding_provider import IEmbeddingProvider
from lorerag.providers.embedding import (
    AzureOpenAIEmbeddingProvider,
    OllamaEmbeddingProvider,
    OpenAIEmbeddingProvider,
)
from lorerag.providers.llm import (
    AzureOpenAIChatProvider,
    OllamaChatProvider,
    OpenAIChatProvider,
)
from lorerag.utils.errors import ConfigurationError

_EMBEDDING_PROVIDERS: dict[type, type[IEmbeddingProvider]] = {
    OpenAIEmbeddingBackend: OpenAIEmbeddingProvider,
    AzureOpenAIEmbeddingBackend: AzureOpenAIEmbeddingProvider,
    OllamaEmbeddingBackend: OllamaEmbeddingProvider,
}

_CHAT_PROVIDERS: dict[type, type[IChatProvider]] = {
    OpenAIChatBackend: OpenAIChatProvider,
    AzureOpenAIChatBackend: AzureOpenAIChatProvider,
    OllamaChatBackend: OllamaChatProvider,
}


def build_embedding_provider(settings: EmbeddingSettings) -> IEmbeddingProvider:
    """Return the embedding adapter for ``settings.backend``."""
    provider_cls = _EMBEDDING_PROVIDERS.get(type(settings.backend))
    if provider_cls is None:
        raise ConfigurationError(
            f"Unsupported embedding provider: {settings.backend.provider}"
        )
    return provider_cls(settings.backend, settings.dimensions)


def build_chat_provider(settings: ChatSettings) -> IChatProvider:
    """Return the chat adapter for ``settings.backend``."""
    provider_cls = _CHAT_PROVIDERS.get(type(settings.backend))
    if provider_cls is None:
        raise ConfigurationError(f"Unsupported chat provider: {settings.backend.provider}")
    return provider_cls(settings.backend)
