"""BM25-style lexical retriever for document chunks.

Scores chunks against a free-text query using term frequency, inverse
document frequency, partial (substring) matches and an early-position
bonus. No embeddings or external services are involved.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from docrecall.models import Chunk, IndexStats, SearchResult
from docrecall.retrieval.index import LexicalIndex
from docrecall.retrieval.tokenizer import tokenize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetrieverConfig:
    """Result limits and scoring constants.

    The scoring constants are empirical tuning values; changing them changes
    ranking order.
    """

    top_k: int = 5
    relevance_threshold: float = 0.15
    min_chunk_length: int = 50
    # BM25 parameters
    k1: float = 1.5
    b: float = 0.75
    # Credit per raw substring occurrence (inflected forms)
    partial_match_weight: float = 0.5
    # Position bonus decays linearly from start to end of the chunk
    position_bonus_start: float = 2.0
    position_bonus_end: float = 0.2
    position_weight: float = 0.5
    # Raw score of an exact match; also the normalisation divisor
    max_score: float = 10.0
    min_term_coverage: float = 0.5
    coverage_penalty: float = 0.5

    def __post_init__(self) -> None:
        if self.top_k < 1:
            raise ValueError(f"top_k must be at least 1, got {self.top_k}")
        if self.min_chunk_length < 0:
            raise ValueError(f"min_chunk_length must be >= 0, got {self.min_chunk_length}")
        if self.max_score <= 0:
            raise ValueError(f"max_score must be positive, got {self.max_score}")


class DocumentRetriever:
    """Lexical retriever over an immutable in-memory index.

    initialize() builds a complete new index and publishes it with a single
    reference assignment; search() reads that reference once, so a
    concurrent rebuild never exposes a partially built index.
    """

    def __init__(self, config: RetrieverConfig | None = None):
        self.config = config or RetrieverConfig()
        self._index = LexicalIndex.build(())

    @property
    def index(self) -> LexicalIndex:
        return self._index

    @property
    def chunks(self) -> list[Chunk]:
        """Retained chunks, in index order."""
        return list(self._index.chunks)

    @property
    def chunk_count(self) -> int:
        return len(self._index)

    def initialize(self, chunks: Iterable[Chunk]) -> None:
        """Rebuild the index from scratch.

        Args:
            chunks: Chunks to index; those shorter than min_chunk_length
                are dropped.
        """
        chunks = list(chunks)
        retained = [c for c in chunks if len(c.content) >= self.config.min_chunk_length]
        if len(retained) < len(chunks):
            logger.debug(
                f"Dropped {len(chunks) - len(retained)} chunks shorter than "
                f"{self.config.min_chunk_length} chars"
            )

        index = LexicalIndex.build(retained)
        self._index = index
        logger.info(f"Index built: {len(index)} chunks, {len(index.idf)} terms")

    def search(self, query: str) -> list[SearchResult]:
        """Rank chunks against a query.

        Args:
            query: Free-text query.

        Returns:
            At most top_k results whose raw score exceeds the relevance
            threshold. Exact (whole-query) matches come first, then by
            descending score; ties keep index order.
        """
        if not isinstance(query, str) or not query.strip():
            return []

        index = self._index
        if not index.chunks:
            return []

        cfg = self.config
        trimmed = query.strip()
        query_lower = trimmed.lower()
        terms = tokenize(trimmed)
        norms = index.length_norms(cfg.k1, cfg.b)

        scores = np.zeros(len(index), dtype=np.float64)
        exact = np.zeros(len(index), dtype=bool)
        matched: list[list[str]] = []

        for position, chunk in enumerate(index.chunks):
            content_lower = chunk.content.lower()

            if query_lower in content_lower:
                scores[position] = cfg.max_score
                exact[position] = True
                matched.append([trimmed])
                continue

            found = [term for term in terms if term in content_lower]
            score = self._score_chunk(index, position, content_lower, terms, norms[position])
            if terms and len(found) / len(terms) < cfg.min_term_coverage:
                score *= cfg.coverage_penalty

            scores[position] = score
            matched.append(found)

        candidates = np.flatnonzero(scores > cfg.relevance_threshold)
        # lexsort: last key is primary
        order = candidates[
            np.lexsort((candidates, -scores[candidates], (~exact[candidates]).astype(np.int8)))
        ][: cfg.top_k]

        results = [
            SearchResult(
                chunk=index.chunks[position],
                relevance_score=float(np.clip(scores[position] / cfg.max_score, 0.0, 1.0)),
                matched_terms=matched[position],
                raw_score=float(scores[position]),
                exact_match=bool(exact[position]),
            )
            for position in order
        ]

        logger.debug(
            f"Query {trimmed[:50]!r}: {len(candidates)} candidates, returning {len(results)}"
        )
        return results

    def _score_chunk(
        self,
        index: LexicalIndex,
        position: int,
        content_lower: str,
        terms: list[str],
        length_norm: float,
    ) -> float:
        """BM25 with partial-match credit plus a position bonus per term."""
        cfg = self.config
        counts = index.term_counts[position]
        score = 0.0

        for term in terms:
            tf = counts.get(term, 0)
            partial = content_lower.count(term)
            total = tf + partial * cfg.partial_match_weight

            if total > 0:
                idf = index.idf.get(term, 0.0)
                score += idf * (total * (cfg.k1 + 1)) / (total + length_norm)

            score += self._position_bonus(content_lower, term) * cfg.position_weight

        return max(0.0, score)

    def _position_bonus(self, text: str, term: str) -> float:
        """Earlier first occurrence earns more, zero when absent."""
        found_at = text.find(term)
        if found_at == -1:
            return 0.0

        cfg = self.config
        ratio = found_at / max(len(text), 1)
        return cfg.position_bonus_start - ratio * (cfg.position_bonus_start - cfg.position_bonus_end)

    def chunks_for_document(self, document_id: str) -> list[Chunk]:
        """Retained chunks belonging to one document."""
        return [chunk for chunk in self._index.chunks if chunk.document_id == document_id]

    def stats(self) -> IndexStats:
        return self._index.stats()


def create_retriever(chunks: Iterable[Chunk], config: RetrieverConfig | None = None) -> DocumentRetriever:
    """Build a retriever and index chunks in one step."""
    retriever = DocumentRetriever(config)
    retriever.initialize(chunks)
    return retriever
