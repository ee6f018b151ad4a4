"""Protocol for text chunking strategies."""

from typing import Protocol, runtime_checkable

from docrecall.models import Chunk, Document


@runtime_checkable
class ChunkingStrategy(Protocol):
    """Protocol for text chunking strategies.

    Implementations must be deterministic for a fixed document and config.
    """

    def chunk(self, document: Document) -> list[Chunk]:
        """Split a document into ordered chunks."""
        ...
