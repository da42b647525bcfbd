"""Embedding provider implementations.

Three implementations of IEmbeddingProvider, one per ``provider`` value:
    - OpenAIEmbeddingProvider      - ``openai`` (text-embedding-3-small).
    - AzureOpenAIEmbeddingProvider - ``azure-openai`` (deployment name).
    - OllamaEmbeddingProvider      - ``ollama`` (nomic-embed-text, local).
"""

from lorerag.providers.embedding.azure_openai_embedding_provider import (
    AzureOpenAIEmbeddingProvider,
)
from lorerag.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider
from lorerag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = [
    "AzureOpenAIEmbeddingProvider",
    "OllamaEmbeddingProvider",
    "OpenAIEmbeddingProvider",
]
