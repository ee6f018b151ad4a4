"""Lexical retrieval over document chunks."""

from docrecall.retrieval.formatting import format_results
from docrecall.retrieval.index import LexicalIndex
from docrecall.retrieval.retriever import DocumentRetriever, RetrieverConfig, create_retriever
from docrecall.retrieval.tokenizer import split_terms, tokenize

__all__ = [
    "DocumentRetriever",
    "RetrieverConfig",
    "LexicalIndex",
    "create_retriever",
    "format_results",
    "split_terms",
    "tokenize",
]
