"""Paragraph-based chunking strategy."""

import bisect
import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, NamedTuple, Optional

from docrecall.models import Chunk, Document

logger = logging.getLogger(__name__)

# Default chunk configuration
DEFAULT_CHUNK_SIZE = 1000  # characters
DEFAULT_OVERLAP_SIZE = 200  # characters

PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
SENTENCE = re.compile(r"[^.!?]*[.!?]+|[^.!?]+$")
PAGE_MARKER = re.compile(r"\[Page (\d+)\]")

PIECE_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class ChunkingConfig:
    """Size limits for the paragraph chunker."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    overlap_size: int = DEFAULT_OVERLAP_SIZE
    split_on_sentences: bool = True

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if not 0 <= self.overlap_size < self.chunk_size:
            raise ValueError(
                f"overlap_size must be in [0, chunk_size), got {self.overlap_size}"
            )


class _Piece(NamedTuple):
    """Trimmed text with its span in the source document."""

    text: str
    start: int
    end: int


def _trimmed(text: str, start: int, end: int) -> Optional[_Piece]:
    raw = text[start:end]
    stripped = raw.strip()
    if not stripped:
        return None
    begin = start + len(raw) - len(raw.lstrip())
    return _Piece(stripped, begin, begin + len(stripped))


class ParagraphChunker:
    """Default chunking: split on blank lines, sentence-split long paragraphs,
    pack into chunks of at most chunk_size with overlap between neighbours.

    - Paragraph boundaries are preferred split points
    - Paragraphs over chunk_size are repacked from whole sentences
    - A piece that cannot be split is kept whole, never truncated
    - Each new chunk starts with the last overlap_size characters of the
      previous one, minus any leading whitespace, so the shared text can be
      shorter than overlap_size when the cut lands on a paragraph break
    """

    def __init__(self, config: ChunkingConfig | None = None):
        self.config = config or ChunkingConfig()

    def chunk(self, document: Document) -> list[Chunk]:
        """Split a document into ordered, overlapping chunks.

        Args:
            document: The document to split

        Returns:
            List of Chunk objects; start_char/end_char index into
            document.text and start_page is the last [Page N] marker at or
            before the chunk start.
        """
        text = document.text
        if not text or not text.strip():
            return []

        pages = [(m.start(), int(m.group(1))) for m in PAGE_MARKER.finditer(text)]
        chunk_size = self.config.chunk_size
        overlap_size = self.config.overlap_size

        chunks: list[Chunk] = []
        buffer = ""
        buffer_start = 0
        buffer_end = 0

        for piece in self._pieces(text):
            if buffer and len(buffer) + len(piece.text) > chunk_size:
                chunks.append(
                    self._make_chunk(document, len(chunks), buffer, buffer_start, buffer_end, pages)
                )

                # Seed the next chunk with the tail of the flushed one
                overlap = buffer[-overlap_size:].lstrip() if overlap_size else ""
                if overlap:
                    buffer_start = max(buffer_start, buffer_end - len(overlap))
                    buffer = overlap + PIECE_SEPARATOR + piece.text
                else:
                    buffer_start = piece.start
                    buffer = piece.text
            elif buffer:
                buffer += PIECE_SEPARATOR + piece.text
            else:
                buffer = piece.text
                buffer_start = piece.start

            buffer_end = piece.end

        # Trailing buffer is emitted regardless of size
        if buffer:
            chunks.append(
                self._make_chunk(document, len(chunks), buffer, buffer_start, buffer_end, pages)
            )

        logger.debug(f"Chunked {document.filename}: {len(text)} chars -> {len(chunks)} chunks")
        return chunks

    def _pieces(self, text: str) -> Iterator[_Piece]:
        """Yield paragraphs, sentence-split where they exceed chunk_size."""
        for paragraph in self._paragraphs(text):
            if self.config.split_on_sentences and len(paragraph.text) > self.config.chunk_size:
                yield from self._split_sentences(text, paragraph)
            else:
                yield paragraph

    @staticmethod
    def _paragraphs(text: str) -> Iterator[_Piece]:
        position = 0
        for match in PARAGRAPH_BREAK.finditer(text):
            paragraph = _trimmed(text, position, match.start())
            if paragraph:
                yield paragraph
            position = match.end()

        paragraph = _trimmed(text, position, len(text))
        if paragraph:
            yield paragraph

    def _split_sentences(self, text: str, paragraph: _Piece) -> Iterator[_Piece]:
        """Greedily pack whole sentences into pieces of at most chunk_size."""
        group_start: Optional[int] = None
        group_end = paragraph.start

        for match in SENTENCE.finditer(text, paragraph.start, paragraph.end):
            start, end = match.span()
            if group_start is None:
                group_start = start
            elif (group_end - group_start) + (end - start) > self.config.chunk_size:
                piece = _trimmed(text, group_start, group_end)
                if piece:
                    yield piece
                group_start = start
            group_end = end

        if group_start is not None:
            piece = _trimmed(text, group_start, group_end)
            if piece:
                yield piece

    @staticmethod
    def _make_chunk(
        document: Document,
        index: int,
        content: str,
        start: int,
        end: int,
        pages: list[tuple[int, int]],
    ) -> Chunk:
        position = bisect.bisect_right(pages, (start, float("inf"))) - 1
        chunk = Chunk(
            id=f"{document.id}_chunk_{index}",
            content=content,
            document_id=document.id,
            document_name=document.filename,
            chunk_index=index,
            start_char=start,
            end_char=end,
            start_page=pages[position][1] if position >= 0 else None,
        )
        logger.debug(f"  [Chunk {index}] {len(content)} chars ({start}-{end})")
        return chunk


def chunk_documents(
    documents: Iterable[Document],
    config: ChunkingConfig | None = None,
) -> list[Chunk]:
    """Chunk several documents with one chunker, preserving document order."""
    chunker = ParagraphChunker(config)
    return [chunk for document in documents for chunk in chunker.chunk(document)]
