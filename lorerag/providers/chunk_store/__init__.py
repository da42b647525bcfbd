"""Chunk store implementations."""

from lorerag.providers.chunk_store.postgres_chunk_store import PostgresChunkStore

__all__ = ["PostgresChunkStore"]
