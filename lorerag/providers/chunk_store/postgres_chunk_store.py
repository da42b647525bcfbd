"""PostgreSQL chunk store using pgvector and built-in full-text search.

One table holds every chunk with its embedding (``vector(dim)``, HNSW
cosine index) and a generated ``tsvector`` column (GIN index), so the
dense and lexical channels read the same rows.

Connections come from a ``psycopg_pool`` async pool.  The pgvector type
adapter is registered on each pooled connection by the pool's
``configure`` callback, which this store owns; nothing is registered
process-wide.
"""

from __future__ import annotations

import numpy as np
import psycopg
import structlog
from pgvector.psycopg import register_vector_async
from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from lorerag.config.settings import DatabaseSettings
from lorerag.interfaces.chunk_store import IChunkStore
from lorerag.models.lore import HybridCandidates, LoreChunk, SearchCandidate
from lorerag.utils.errors import ChunkStoreError

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER = "postgres"

# ts_headline options: one fragment of 15-40 words around the query terms.
_HEADLINE_OPTIONS = "MaxFragments=1, MinWords=15, MaxWords=40"

_CREATE_EXTENSION = "CREATE EXTENSION IF NOT EXISTS vector"

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS {table} (
    id           BIGSERIAL PRIMARY KEY,
    source_path  TEXT NOT NULL,
    anchor_id    TEXT,
    title        TEXT,
    headings     TEXT[],
    content      TEXT NOT NULL,
    tokens       INTEGER NOT NULL DEFAULT 0,
    word_count   INTEGER NOT NULL DEFAULT 0,
    links_to     TEXT[],
    updated_at   TIMESTAMPTZ NOT NULL,
    embedding    VECTOR({dimensions}) NOT NULL,
    content_hash TEXT NOT NULL UNIQUE,
    tsv          TSVECTOR GENERATED ALWAYS AS (to_tsvector('english', content)) STORED
)
"""

_CREATE_INDEXES = (
    "CREATE INDEX IF NOT EXISTS {embedding_index} ON {table} "
    "USING hnsw (embedding vector_cosine_ops)",
    "CREATE INDEX IF NOT EXISTS {tsv_index} ON {table} USING gin (tsv)",
    "CREATE INDEX IF NOT EXISTS {source_index} ON {table} (source_path)",
)

_INSERT = """
INSERT INTO {table} (
    source_path, anchor_id, title, headings, content, tokens, word_count,
    links_to, updated_at, embedding, content_hash
) VALUES (
    %(source_path)s, %(anchor_id)s, %(title)s, %(headings)s, %(content)s,
    %(tokens)s, %(word_count)s, %(links_to)s, %(updated_at)s, %(embedding)s,
    %(content_hash)s
)
ON CONFLICT (content_hash) DO NOTHING
RETURNING id
"""

_EXISTS = "SELECT EXISTS (SELECT 1 FROM {table} WHERE content_hash = %s)"

_COUNT = "SELECT count(*) FROM {table}"

# Nearest neighbours by cosine distance; the headline is computed only for
# the limited set.
_DENSE_SEARCH = """
SELECT c.id, c.source_path, c.anchor_id, c.title, c.headings,
       ts_headline('english', c.content,
                   websearch_to_tsquery('english', %(query_text)s),
                   %(headline_options)s) AS excerpt,
       1 - c.distance AS score
FROM (
    SELECT id, source_path, anchor_id, title, headings, content,
           embedding <=> %(query_vector)s AS distance
    FROM {table}
    ORDER BY embedding <=> %(query_vector)s
    LIMIT %(limit)s
) AS c
ORDER BY c.distance, c.id
"""

_SPARSE_SEARCH = """
SELECT c.id, c.source_path, c.anchor_id, c.title, c.headings,
       ts_headline('english', c.content, c.query, %(headline_options)s) AS excerpt,
       c.lexical_rank AS score
FROM (
    SELECT t.id, t.source_path, t.anchor_id, t.title, t.headings, t.content,
           q.query, ts_rank(t.tsv, q.query) AS lexical_rank
    FROM {table} AS t,
         websearch_to_tsquery('english', %(query_text)s) AS q(query)
    WHERE t.tsv @@ q.query
    ORDER BY lexical_rank DESC, t.id
    LIMIT %(limit)s
) AS c
ORDER BY c.lexical_rank DESC, c.id
"""


async def _configure_connection(conn: psycopg.AsyncConnection) -> None:
    await register_vector_async(conn)


class PostgresChunkStore(IChunkStore):
    """Chunk store backed by PostgreSQL with the pgvector extension.

    Parameters
    ----------
    settings:
        DSN, pool bounds and table name.
    dimensions:
        Embedding length for the ``vector`` column; inserts with any other
        length are rejected.
    """

    def __init__(self, settings: DatabaseSettings, dimensions: int) -> None:
        self._dsn = settings.dsn
        self._dimensions = dimensions
        self._table = sql.Identifier(settings.table)
        self._table_name = settings.table
        self._pool = AsyncConnectionPool(
            conninfo=settings.dsn,
            min_size=settings.min_pool_size,
            max_size=settings.max_pool_size,
            kwargs={"autocommit": True},
            configure=_configure_connection,
            open=False,
        )

    def _sql(self, template: str) -> sql.Composed:
        return sql.SQL(template).format(table=self._table)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Create the extension, table and indexes, then open the pool.

        Schema work runs on a dedicated connection because the pool's
        ``configure`` callback needs the ``vector`` type to exist already.
        """
        try:
            async with await psycopg.AsyncConnection.connect(self._dsn, autocommit=True) as conn:
                await conn.execute(_CREATE_EXTENSION)
                await conn.execute(
                    sql.SQL(_CREATE_TABLE).format(
                        table=self._table,
                        dimensions=sql.Literal(self._dimensions),
                    )
                )
                for statement in _CREATE_INDEXES:
                    await conn.execute(
                        sql.SQL(statement).format(
                            table=self._table,
                            embedding_index=sql.Identifier(f"{self._table_name}_embedding_hnsw"),
                            tsv_index=sql.Identifier(f"{self._table_name}_tsv_gin"),
                            source_index=sql.Identifier(f"{self._table_name}_source_path_idx"),
                        )
                    )
            await self._pool.open(wait=True)
        except psycopg.Error as exc:
            raise ChunkStoreError(
                message=f"Failed to initialize chunk store: {exc}",
                provider_name=_PROVIDER,
            ) from exc

        logger.info(
            "chunk_store_initialized",
            table=self._table_name,
            dimensions=self._dimensions,
        )

    async def close(self) -> None:
        await self._pool.close()
        logger.info("chunk_store_closed", table=self._table_name)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert(self, chunk: LoreChunk) -> int | None:
        if len(chunk.embedding) != self._dimensions:
            raise ChunkStoreError(
                message=(
                    f"Embedding has {len(chunk.embedding)} dimensions, "
                    f"store expects {self._dimensions}"
                ),
                provider_name=_PROVIDER,
            )

        params = chunk.model_dump(exclude={"id", "embedding"})
        params["embedding"] = np.asarray(chunk.embedding, dtype=np.float32)
        try:
            async with self._pool.connection() as conn:
                cursor = await conn.execute(self._sql(_INSERT), params)
                row = await cursor.fetchone()
        except psycopg.Error as exc:
            raise ChunkStoreError(
                message=f"Insert failed for {chunk.source_path}: {exc}",
                provider_name=_PROVIDER,
            ) from exc

        return row[0] if row else None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def exists(self, content_hash: str) -> bool:
        try:
            async with self._pool.connection() as conn:
                cursor = await conn.execute(self._sql(_EXISTS), (content_hash,))
                row = await cursor.fetchone()
        except psycopg.Error as exc:
            raise ChunkStoreError(
                message=f"Existence check failed: {exc}",
                provider_name=_PROVIDER,
            ) from exc
        return bool(row and row[0])

    async def hybrid_search(
        self,
        query_vector: list[float],
        query_text: str,
        limit: int,
    ) -> HybridCandidates:
        params = {
            "query_vector": np.asarray(query_vector, dtype=np.float32),
            "query_text": query_text,
            "headline_options": _HEADLINE_OPTIONS,
            "limit": limit,
        }
        try:
            async with self._pool.connection() as conn:
                async with conn.cursor(row_factory=dict_row) as cur:
                    await cur.execute(self._sql(_DENSE_SEARCH), params)
                    dense_rows = await cur.fetchall()
                    await cur.execute(self._sql(_SPARSE_SEARCH), params)
                    sparse_rows = await cur.fetchall()
        except psycopg.Error as exc:
            raise ChunkStoreError(
                message=f"Hybrid search failed: {exc}",
                provider_name=_PROVIDER,
            ) from exc

        return HybridCandidates(
            dense=[_to_candidate(row) for row in dense_rows],
            sparse=[_to_candidate(row) for row in sparse_rows],
        )

    async def count(self) -> int:
        try:
            async with self._pool.connection() as conn:
                cursor = await conn.execute(self._sql(_COUNT))
                row = await cursor.fetchone()
        except psycopg.Error as exc:
            raise ChunkStoreError(
                message=f"Count failed: {exc}",
                provider_name=_PROVIDER,
            ) from exc
        return int(row[0]) if row else 0

    async def ping(self) -> bool:
        """Run ``SELECT 1``; any database or pool error reads as unhealthy."""
        try:
            async with self._pool.connection(timeout=5.0) as conn:
                await conn.execute("SELECT 1")
            return True
        except psycopg.Error as exc:
            logger.warning("chunk_store_ping_failed", error=str(exc))
            return False


def _to_candidate(row: dict) -> SearchCandidate:
    return SearchCandidate(
        id=row["id"],
        source_path=row["source_path"],
        anchor_id=row["anchor_id"],
        title=row["title"],
        headings=row["headings"],
        excerpt=row["excerpt"] or "",
        score=float(row["score"]),
    )
