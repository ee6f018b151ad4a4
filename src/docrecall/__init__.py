"""DocRecall - lexical passage retrieval for grounded conversational agents."""

from docrecall.chunkers import ChunkingConfig, ParagraphChunker
from docrecall.models import Chunk, Document, IndexStats, SearchResult
from docrecall.retrieval import DocumentRetriever, RetrieverConfig
from docrecall.service import RetrievalService, ServiceState

__version__ = "0.1.0"

__all__ = [
    "ChunkingConfig",
    "ParagraphChunker",
    "Chunk",
    "Document",
    "IndexStats",
    "SearchResult",
    "DocumentRetriever",
    "RetrieverConfig",
    "RetrievalService",
    "ServiceState",
]
