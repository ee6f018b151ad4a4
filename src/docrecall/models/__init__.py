"""Data models for DocRecall."""

from docrecall.models.document import Chunk, Document, IndexStats, SearchResult

__all__ = ["Document", "Chunk", "SearchResult", "IndexStats"]
