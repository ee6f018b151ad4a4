"""Immutable lexical index over a chunk set."""

import math
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence

import numpy as np

from docrecall.models import Chunk, IndexStats
from docrecall.retrieval.tokenizer import split_terms


@dataclass(frozen=True)
class LexicalIndex:
    """Term statistics for one exact chunk set.

    IDF values are only meaningful for the chunks they were built from, so
    the whole structure is rebuilt and replaced, never patched.
    """

    chunks: tuple[Chunk, ...]
    term_counts: tuple[Mapping[str, int], ...]
    document_frequency: Mapping[str, int]
    idf: Mapping[str, float]
    lengths: np.ndarray
    average_length: float

    @classmethod
    def build(cls, chunks: Sequence[Chunk]) -> "LexicalIndex":
        term_counts: list[Mapping[str, int]] = []
        document_frequency: Counter[str] = Counter()

        for chunk in chunks:
            counts = Counter(split_terms(chunk.content))
            term_counts.append(MappingProxyType(dict(counts)))
            document_frequency.update(counts.keys())

        total = len(chunks)
        # Unsmoothed: a term present in every chunk gets idf 0.
        idf = {term: math.log(total / count) for term, count in document_frequency.items()}

        lengths = np.array([len(chunk.content) for chunk in chunks], dtype=np.float64)
        lengths.setflags(write=False)

        return cls(
            chunks=tuple(chunks),
            term_counts=tuple(term_counts),
            document_frequency=MappingProxyType(dict(document_frequency)),
            idf=MappingProxyType(idf),
            lengths=lengths,
            average_length=float(lengths.mean()) if total else 0.0,
        )

    def __len__(self) -> int:
        return len(self.chunks)

    def length_norms(self, k1: float, b: float) -> np.ndarray:
        """BM25 length normalisation term for every chunk."""
        if not self.chunks:
            return np.zeros(0, dtype=np.float64)
        return k1 * (1.0 - b + b * self.lengths / self.average_length)

    def stats(self) -> IndexStats:
        return IndexStats(
            total_chunks=len(self.chunks),
            unique_terms=len(self.idf),
            average_chunk_length=self.average_length,
            document_count=len({chunk.document_id for chunk in self.chunks}),
        )
