"""Chat provider implementations (OpenAI, Azure OpenAI, Ollama)."""

from lorerag.providers.llm.azure_openai_provider import AzureOpenAIChatProvider
from lorerag.providers.llm.ollama_provider import OllamaChatProvider
from lorerag.providers.llm.openai_provider import OpenAIChatProvider

__all__ = ["AzureOpenAIChatProvider", "OllamaChatProvider", "OpenAIChatProvider"]
