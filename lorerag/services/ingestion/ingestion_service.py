"""Orchestrator for Markdown ingestion.

Pipeline stages: **segment -> fingerprint -> dedupe -> embed -> store**.

:class:`IngestionService` coordinates four collaborators (chunker,
fingerprinter, embedding gateway, chunk store) that know nothing about
each other.  All of them are injected through the constructor so the
embedding backend or the store can be swapped without touching this class.

Idempotency comes from the content hash: a chunk whose fingerprint is
already stored is skipped, so re-running a failed or repeated batch never
duplicates rows.  Nothing is retried.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from lorerag.models.lore import (
    ChunkDraft,
    ChunkOutcome,
    DocumentIngestionResult,
    IngestionResult,
    LoreChunk,
)
from lorerag.utils.errors import SourceNotFoundError

if TYPE_CHECKING:
    from lorerag.interfaces.chunk_store import IChunkStore
    from lorerag.services.embedding_gateway import EmbeddingGateway
    from lorerag.services.ingestion.chunker import MarkdownChunker
    from lorerag.services.ingestion.fingerprint import ContentFingerprinter

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_EXTENSIONS = (".md", ".markdown")


class IngestionService:
    """Ingests Markdown documents into the chunk store.

    Parameters
    ----------
    chunker:
        Splits documents into chunk drafts.
    fingerprinter:
        Computes the idempotency key of each chunk.
    embedding_gateway:
        Produces validated embeddings.
    store:
        Persists chunks and answers existence checks.
    file_extensions:
        Suffixes (case-insensitive) picked up by :meth:`ingest_directory`.
    """

    def __init__(
        self,
        chunker: MarkdownChunker,
        fingerprinter: ContentFingerprinter,
        embedding_gateway: EmbeddingGateway,
        store: IChunkStore,
        file_extensions: tuple[str, ...] | list[str] = DEFAULT_EXTENSIONS,
    ) -> None:
        self._chunker = chunker
        self._fingerprinter = fingerprinter
        self._embedding = embedding_gateway
        self._store = store
        self._extensions = frozenset(ext.lower() for ext in file_extensions)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest_document(self, source_path: str, text: str) -> DocumentIngestionResult:
        """Segment *text* and store every new chunk, in segmentation order.

        An embedding or store failure propagates and leaves the remaining
        chunks of this document unprocessed; chunks stored before the
        failure stay stored.
        """
        created = 0
        skipped = 0
        for draft in self._chunker.chunk(source_path, text):
            outcome = await self._ingest_chunk(draft)
            if outcome is ChunkOutcome.CREATED:
                created += 1
            else:
                skipped += 1

        logger.info(
            "document_ingested",
            source_path=source_path,
            created=created,
            skipped=skipped,
        )
        return DocumentIngestionResult(source_path=source_path, created=created, skipped=skipped)

    async def ingest_file(self, path: str | Path) -> DocumentIngestionResult:
        """Read a UTF-8 Markdown file and ingest it."""
        file_path = Path(path)
        text = await asyncio.to_thread(file_path.read_text, encoding="utf-8")
        return await self.ingest_document(str(file_path), text)

    async def ingest_directory(self, dir_path: str | Path) -> IngestionResult:
        """Ingest every Markdown file under *dir_path*, recursively.

        Files are processed one at a time in sorted path order.  A file that
        fails is recorded as ``"<path>: <message>"`` in ``errors`` and the
        run continues; ``files_processed`` counts only files that completed.

        Raises
        ------
        SourceNotFoundError
            If *dir_path* does not exist or is not a directory.
        """
        root = Path(dir_path)
        if not root.is_dir():
            logger.error("ingest_directory_not_found", dir_path=str(dir_path))
            raise SourceNotFoundError(f"Directory not found: {dir_path}")

        start = time.monotonic()
        files = await asyncio.to_thread(self.discover_files, root)
        logger.info("ingest_directory_start", dir_path=str(root), files=len(files))

        files_processed = 0
        created = 0
        skipped = 0
        errors: list[str] = []

        for file_path in files:
            try:
                result = await self.ingest_file(file_path)
            except Exception as exc:
                logger.error(
                    "ingest_file_failed",
                    source_path=str(file_path),
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                errors.append(f"{file_path}: {exc}")
                continue
            files_processed += 1
            created += result.created
            skipped += result.skipped

        elapsed_ms = round((time.monotonic() - start) * 1000, 2)
        logger.info(
            "ingest_directory_complete",
            dir_path=str(root),
            files_processed=files_processed,
            created=created,
            skipped=skipped,
            errors=len(errors),
            elapsed_ms=elapsed_ms,
        )
        return IngestionResult(
            files_processed=files_processed,
            created=created,
            skipped=skipped,
            errors=errors,
            elapsed_ms=elapsed_ms,
        )

    def discover_files(self, root: Path) -> list[Path]:
        """Return Markdown files beneath *root* in deterministic order."""
        return sorted(
            p for p in root.rglob("*") if p.is_file() and p.suffix.lower() in self._extensions
        )

    # ------------------------------------------------------------------
    # Per-chunk flow
    # ------------------------------------------------------------------

    async def _ingest_chunk(self, draft: ChunkDraft) -> ChunkOutcome:
        if not draft.content.strip():
            return ChunkOutcome.SKIPPED_EMPTY

        content_hash = self._fingerprinter.fingerprint(draft.content, draft.source_path)
        if await self._store.exists(content_hash):
            return ChunkOutcome.SKIPPED_DUPLICATE

        embedding = await self._embedding.embed(draft.content)
        chunk = LoreChunk(
            **draft.model_dump(),
            embedding=embedding,
            content_hash=content_hash,
        )
        chunk_id = await self._store.insert(chunk)
        if chunk_id is None:
            # Another run stored the same hash between exists() and insert().
            logger.debug("chunk_insert_conflict", content_hash=content_hash)
            return ChunkOutcome.SKIPPED_DUPLICATE
        return ChunkOutcome.CREATED
