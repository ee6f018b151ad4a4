"""Chunking strategies for DocRecall."""

from docrecall.chunkers.paragraph_chunker import ChunkingConfig, ParagraphChunker, chunk_documents

__all__ = ["ChunkingConfig", "ParagraphChunker", "chunk_documents"]
