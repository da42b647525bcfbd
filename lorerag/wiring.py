"""Dependency assembly shared by the web app and the CLI.

``build_components`` returns a flat dict of named components; the web app
stores each one on ``app.state`` and the CLI picks the ones a subcommand
needs.  Nothing here touches the network: the chunk store's pool stays
closed until ``store.initialize()`` is awaited.
"""

from __future__ import annotations

from typing import Any

from lorerag.config.settings import Settings
from lorerag.providers.chunk_store import PostgresChunkStore
from lorerag.providers.factory import build_chat_provider, build_embedding_provider
from lorerag.services.embedding_gateway import EmbeddingGateway
from lorerag.services.ingestion import ContentFingerprinter, IngestionService, MarkdownChunker
from lorerag.services.retrieval import AnswerService, HybridRetriever


def build_components(settings: Settings) -> dict[str, Any]:
    """Wire providers and services from validated settings."""
    embedding_provider = build_embedding_provider(settings.embedding)
    chat_provider = build_chat_provider(settings.chat)

    embedding_gateway = EmbeddingGateway(embedding_provider, settings.embedding)
    store = PostgresChunkStore(settings.database, settings.embedding.dimensions)

    chunker = MarkdownChunker(settings.chunking)
    fingerprinter = ContentFingerprinter(
        scope_to_source=settings.ingestion.scope_fingerprint_to_source,
    )
    ingestion_service = IngestionService(
        chunker=chunker,
        fingerprinter=fingerprinter,
        embedding_gateway=embedding_gateway,
        store=store,
        file_extensions=settings.ingestion.file_extensions,
    )

    retriever = HybridRetriever(embedding_gateway, store, settings.retrieval)
    answer_service = AnswerService(retriever, chat_provider, settings.chat)

    return {
        "settings": settings,
        "embedding_provider": embedding_provider,
        "chat_provider": chat_provider,
        "embedding_gateway": embedding_gateway,
        "store": store,
        "chunker": chunker,
        "fingerprinter": fingerprinter,
        "ingestion_service": ingestion_service,
        "retriever": retriever,
        "answer_service": answer_service,
    }
