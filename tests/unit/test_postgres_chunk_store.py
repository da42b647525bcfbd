"""Unit tests for PostgresChunkStore with a mocked connection pool."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import numpy as np
import psycopg
import pytest

from lorerag.config.settings import DatabaseSettings
from lorerag.models.lore import LoreChunk
from lorerag.providers.chunk_store.postgres_chunk_store import (
    PostgresChunkStore,
    _to_candidate,
)
from lorerag.utils.errors import ChunkStoreError

_POOL = "lorerag.providers.chunk_store.postgres_chunk_store.AsyncConnectionPool"


def _chunk(dim: int) -> LoreChunk:
    return LoreChunk(
        source_path="docs/a.md",
        anchor_id="intro",
        title="Intro",
        headings=["Intro"],
        content="Some lore.",
        tokens=2,
        word_count=2,
        updated_at=datetime.now(tz=timezone.utc),
        embedding=[0.5] * dim,
        content_hash="abc=",
    )


def _pool_with(conn: MagicMock) -> MagicMock:
    pool = MagicMock()
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=conn)
    context.__aexit__ = AsyncMock(return_value=False)
    pool.connection.return_value = context
    return pool


def _conn_returning(row: tuple | None) -> MagicMock:
    cursor = MagicMock()
    cursor.fetchone = AsyncMock(return_value=row)
    conn = MagicMock()
    conn.execute = AsyncMock(return_value=cursor)
    return conn


class TestPoolConfiguration:
    def test_pool_is_created_closed(self) -> None:
        with patch(_POOL) as pool_cls:
            PostgresChunkStore(DatabaseSettings(min_pool_size=2, max_pool_size=5), dimensions=3)

        kwargs = pool_cls.call_args.kwargs
        assert kwargs["open"] is False
        assert kwargs["min_size"] == 2
        assert kwargs["max_size"] == 5
        assert kwargs["kwargs"] == {"autocommit": True}
        assert kwargs["configure"] is not None


class TestInsert:
    @pytest.mark.asyncio
    async def test_dimension_mismatch_rejected_before_database(self) -> None:
        conn = _conn_returning((1,))
        with patch(_POOL, return_value=_pool_with(conn)):
            store = PostgresChunkStore(DatabaseSettings(), dimensions=4)
            with pytest.raises(ChunkStoreError, match="store expects 4"):
                await store.insert(_chunk(3))

        conn.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_insert_returns_new_id(self) -> None:
        conn = _conn_returning((42,))
        with patch(_POOL, return_value=_pool_with(conn)):
            store = PostgresChunkStore(DatabaseSettings(), dimensions=3)
            assert await store.insert(_chunk(3)) == 42

        params = conn.execute.call_args.args[1]
        assert params["content_hash"] == "abc="
        assert params["source_path"] == "docs/a.md"
        assert isinstance(params["embedding"], np.ndarray)
        assert params["embedding"].dtype == np.float32
        assert "id" not in params

    @pytest.mark.asyncio
    async def test_conflict_returns_none(self) -> None:
        conn = _conn_returning(None)
        with patch(_POOL, return_value=_pool_with(conn)):
            store = PostgresChunkStore(DatabaseSettings(), dimensions=3)
            assert await store.insert(_chunk(3)) is None

    @pytest.mark.asyncio
    async def test_database_error_wrapped(self) -> None:
        conn = MagicMock()
        conn.execute = AsyncMock(side_effect=psycopg.OperationalError("server closed"))
        with patch(_POOL, return_value=_pool_with(conn)):
            store = PostgresChunkStore(DatabaseSettings(), dimensions=3)
            with pytest.raises(ChunkStoreError) as exc_info:
                await store.insert(_chunk(3))

        assert exc_info.value.provider_name == "postgres"


class TestReads:
    @pytest.mark.asyncio
    async def test_exists(self) -> None:
        conn = _conn_returning((True,))
        with patch(_POOL, return_value=_pool_with(conn)):
            store = PostgresChunkStore(DatabaseSettings(), dimensions=3)
            assert await store.exists("abc=") is True
        assert conn.execute.call_args.args[1] == ("abc=",)

    @pytest.mark.asyncio
    async def test_count(self) -> None:
        conn = _conn_returning((7,))
        with patch(_POOL, return_value=_pool_with(conn)):
            store = PostgresChunkStore(DatabaseSettings(), dimensions=3)
            assert await store.count() == 7

    @pytest.mark.asyncio
    async def test_ping_true_when_select_succeeds(self) -> None:
        conn = _conn_returning((1,))
        with patch(_POOL, return_value=_pool_with(conn)):
            store = PostgresChunkStore(DatabaseSettings(), dimensions=3)
            assert await store.ping() is True

    @pytest.mark.asyncio
    async def test_ping_false_on_database_error(self) -> None:
        conn = MagicMock()
        conn.execute = AsyncMock(side_effect=psycopg.OperationalError("refused"))
        with patch(_POOL, return_value=_pool_with(conn)):
            store = PostgresChunkStore(DatabaseSettings(), dimensions=3)
            assert await store.ping() is False


class TestRowMapping:
    def test_to_candidate(self) -> None:
        candidate = _to_candidate(
            {
                "id": 3,
                "source_path": "a.md",
                "anchor_id": None,
                "title": None,
                "headings": None,
                "excerpt": None,
                "score": 0.25,
            }
        )
        assert candidate.id == 3
        assert candidate.excerpt == ""
        assert candidate.score == 0.25
