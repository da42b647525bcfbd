"""Heading-aware Markdown chunking with overlapping windows.

Splits a Markdown document into :class:`~lorerag.models.lore.ChunkDraft`
objects sized for embedding models, using the ``len(text) // 4`` token
estimate throughout.

The strategy works at three levels:

1. **Sections** -- The document is cut at ATX heading lines (``#`` through
   ``######``).  Every chunk inherits the title and anchor slug of the
   heading it sits under; text before the first heading forms an untitled
   section.  Lines inside fenced code blocks never start a section.

2. **Paragraphs** -- A section that fits ``target_tokens`` is emitted
   verbatim.  Larger sections are split on blank lines and paragraphs are
   packed into chunks until the next one would pass the target.  Each new
   chunk is seeded with the tail of the previous one (``overlap_tokens``)
   so a thought that straddles a boundary survives in at least one chunk.
   Fenced code blocks are atomic: they are swapped for placeholders before
   the blank-line split and restored afterwards.

3. **Sentences / words** -- A single paragraph above ``max_tokens`` is
   packed from sentences, then from words, into pieces of at most
   ``target_tokens * 4`` characters.  A lone word longer than that is
   emitted whole so splitting always terminates.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import NamedTuple

import structlog

from lorerag.config.settings import ChunkingSettings
from lorerag.models.lore import ChunkDraft

logger = structlog.get_logger(logger_name=__name__)

_CHARS_PER_TOKEN = 4

_FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\n.*?\n---[ \t]*(?:\n|\Z)", re.DOTALL)
_HEADING_RE = re.compile(r"^(#{1,6})[ \t]+(.+?)[ \t]*$")
_CLOSING_HASHES_RE = re.compile(r"(?:^|[ \t]+)#+$")
_FENCE = "```"
_CODE_BLOCK_RE = re.compile(r"```[\s\S]*?```")
_CODE_SEGMENT_RE = re.compile(r"(```[\s\S]*?```)")
# NUL is not Markdown text; unmatched indexes are restored verbatim.
_PLACEHOLDER_RE = re.compile(r"\x00CODE(\d+)\x00")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n[ \t]*\n")
_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")
_ANCHOR_STRIP = str.maketrans("", "", ".,:;!?'\"()[]{}")


def estimate_tokens(text: str) -> int:
    """Return the ``len // 4`` token estimate used for every budget check."""
    return len(text) // _CHARS_PER_TOKEN


def slugify_heading(title: str) -> str:
    """Return the anchor id for *title*: lower-cased, spaces to hyphens, punctuation removed."""
    return title.lower().replace(" ", "-").translate(_ANCHOR_STRIP)


class _Section(NamedTuple):
    level: int
    title: str | None
    anchor_id: str | None
    body: str


class MarkdownChunker:
    """Splits Markdown into heading-scoped, token-budgeted chunk drafts.

    Parameters
    ----------
    settings:
        Token budgets.  ``0 < target_tokens <= max_tokens`` and
        ``overlap_tokens >= 0`` are guaranteed by settings validation.
    """

    def __init__(self, settings: ChunkingSettings) -> None:
        self._target = settings.target_tokens
        self._max = settings.max_tokens
        self._overlap = settings.overlap_tokens

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def chunk(self, source_path: str, raw_text: str) -> list[ChunkDraft]:
        """Segment *raw_text* into ordered drafts tagged with *source_path*.

        A heading whose section body is empty yields one draft with empty
        content; ingestion counts it as skipped.  Blank input yields ``[]``.
        """
        text = self.strip_front_matter(raw_text.replace("\r\n", "\n"))
        sections = self.parse_sections(text)

        drafts: list[ChunkDraft] = []
        for section in sections:
            for content in self._split_section(section.body):
                drafts.append(self._make_draft(source_path, section, content))

        logger.debug(
            "chunking_complete",
            source_path=source_path,
            num_sections=len(sections),
            num_chunks=len(drafts),
        )
        return drafts

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @staticmethod
    def strip_front_matter(text: str) -> str:
        """Remove a ``---`` delimited metadata block at the very start of *text*."""
        return _FRONT_MATTER_RE.sub("", text, count=1)

    @staticmethod
    def parse_sections(text: str) -> list[_Section]:
        """Cut *text* into sections at heading lines outside fenced code."""
        sections: list[_Section] = []
        level, title, anchor = 0, None, None
        body_lines: list[str] = []
        in_fence = False

        def close() -> None:
            body = "\n".join(body_lines).strip()
            # Preamble is only a section when it has text; headings always are.
            if title is not None or body:
                sections.append(_Section(level, title, anchor, body))

        for line in text.split("\n"):
            if line.lstrip().startswith(_FENCE):
                in_fence = not in_fence
                body_lines.append(line)
                continue

            match = None if in_fence else _HEADING_RE.match(line)
            heading_text = _CLOSING_HASHES_RE.sub("", match.group(2)).strip() if match else ""
            if not heading_text:
                body_lines.append(line)
                continue

            close()
            level = len(match.group(1))
            title = heading_text
            anchor = slugify_heading(heading_text)
            body_lines = []

        close()
        return sections

    # ------------------------------------------------------------------
    # Section splitting
    # ------------------------------------------------------------------

    def _split_section(self, body: str) -> list[str]:
        """Return the chunk contents for one section body, in order."""
        if estimate_tokens(body) <= self._target:
            return [body]

        chunks: list[str] = []
        buffer = ""
        for paragraph in self._split_paragraphs(body):
            if estimate_tokens(paragraph) > self._max and not _is_code_block(paragraph):
                if buffer:
                    chunks.append(buffer)
                    buffer = ""
                chunks.extend(self._split_oversized(paragraph))
                continue

            candidate = f"{buffer}\n\n{paragraph}" if buffer else paragraph
            if buffer and estimate_tokens(candidate) > self._target:
                chunks.append(buffer)
                seed = self._overlap_seed(chunks[-1], paragraph)
                candidate = f"{seed}\n\n{paragraph}" if seed else paragraph
            buffer = candidate

        if buffer:
            chunks.append(buffer)
        return chunks

    @staticmethod
    def _split_paragraphs(body: str) -> list[str]:
        """Split on blank lines, keeping fenced code blocks intact."""
        blocks: list[str] = []

        def protect(match: re.Match[str]) -> str:
            blocks.append(match.group(0))
            return f"\x00CODE{len(blocks) - 1}\x00"

        def restore(match: re.Match[str]) -> str:
            index = int(match.group(1))
            return blocks[index] if index < len(blocks) else match.group(0)

        protected = _CODE_BLOCK_RE.sub(protect, body)
        paragraphs: list[str] = []
        for part in _PARAGRAPH_SPLIT_RE.split(protected):
            part = part.strip()
            if part:
                paragraphs.append(_PLACEHOLDER_RE.sub(restore, part))
        return paragraphs

    def _overlap_seed(self, previous: str, paragraph: str) -> str:
        """Tail of *previous* to prepend to *paragraph*, within ``max_tokens``."""
        if self._overlap <= 0:
            return ""
        # Largest seed length with (seed + "\n\n" + paragraph) // 4 <= max.
        room = self._max * _CHARS_PER_TOKEN + 1 - len(paragraph)
        size = min(self._overlap * _CHARS_PER_TOKEN, room)
        if size <= 0:
            return ""
        return previous[-size:].strip()

    def _split_oversized(self, paragraph: str) -> list[str]:
        """Pack sentences, then words, into pieces of ``target_tokens * 4`` chars.

        Fenced code blocks inside the paragraph are indivisible: each one
        becomes its own piece, whatever its length.
        """
        limit = self._target * _CHARS_PER_TOKEN
        pieces: list[str] = []
        current = ""
        for segment in _CODE_SEGMENT_RE.split(paragraph):
            if _is_code_block(segment):
                if current:
                    pieces.append(current)
                    current = ""
                pieces.append(segment)
                continue

            for unit in self._prose_units(segment, limit):
                if current and len(current) + 1 + len(unit) > limit:
                    pieces.append(current)
                    current = ""
                current = f"{current} {unit}" if current else unit
        if current:
            pieces.append(current)
        return pieces

    @staticmethod
    def _prose_units(text: str, limit: int) -> list[str]:
        units: list[str] = []
        for sentence in _SENTENCE_SPLIT_RE.split(text):
            sentence = sentence.strip()
            if not sentence:
                continue
            if len(sentence) > limit:
                units.extend(sentence.split())
            else:
                units.append(sentence)
        return units

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _make_draft(source_path: str, section: _Section, content: str) -> ChunkDraft:
        return ChunkDraft(
            source_path=source_path,
            anchor_id=section.anchor_id,
            title=section.title,
            headings=[section.title] if section.title is not None else None,
            content=content,
            tokens=estimate_tokens(content),
            word_count=len(content.split()),
            updated_at=datetime.now(tz=timezone.utc),
        )


def _is_code_block(paragraph: str) -> bool:
    return paragraph.startswith(_FENCE) and paragraph.endswith(_FENCE) and len(paragraph) >= 6
