"""Markdown ingestion for the LoreRAG knowledge base.

Stages:

1. **Segment** (chunker.py / MarkdownChunker) -- heading-scoped,
   token-budgeted chunks with overlap; code blocks kept whole.
2. **Fingerprint** (fingerprint.py / ContentFingerprinter) -- SHA-256 of
   the chunk text, the idempotency key.
3. **Embed** (via EmbeddingGateway) -- validated dense vectors.
4. **Store** (via IChunkStore) -- one row per new fingerprint.

IngestionService orchestrates all four.
"""

from lorerag.services.ingestion.chunker import MarkdownChunker
from lorerag.services.ingestion.fingerprint import ContentFingerprinter
from lorerag.services.ingestion.ingestion_service import IngestionService

__all__ = [
    "ContentFingerprinter",
    "IngestionService",
    "MarkdownChunker",
]
