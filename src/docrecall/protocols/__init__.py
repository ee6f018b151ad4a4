"""Protocol definitions for extensible components."""

from docrecall.protocols.chunker import ChunkingStrategy
from docrecall.protocols.source import DocumentSource

__all__ = ["DocumentSource", "ChunkingStrategy"]
