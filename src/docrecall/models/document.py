"""Core data models for documents, chunks and search results."""

from dataclasses import asdict, dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Document:
    """A plain-text document produced by a document source."""

    id: str
    filename: str
    text: str


@dataclass(frozen=True)
class Chunk:
    """A bounded segment of a document's text, the unit that gets scored."""

    id: str
    content: str
    document_id: str
    document_name: str
    chunk_index: int
    start_char: int
    end_char: int
    start_page: Optional[int] = None


@dataclass(frozen=True)
class SearchResult:
    """A chunk matched by a query.

    relevance_score is normalized to [0, 1]. raw_score is the value the
    relevance threshold is compared against.
    """

    chunk: Chunk
    relevance_score: float
    matched_terms: list[str] = field(default_factory=list)
    raw_score: float = 0.0
    exact_match: bool = False


@dataclass(frozen=True)
class IndexStats:
    """Summary of the currently built index."""

    total_chunks: int = 0
    unique_terms: int = 0
    average_chunk_length: float = 0.0
    document_count: int = 0

    def to_dict(self) -> dict:
        return asdict(self)
