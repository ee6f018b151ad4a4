"""Exceptions raised by the retrieval pipeline."""


class RetrievalError(Exception):
    """Base class for retrieval failures."""


class IndexBuildError(RetrievalError):
    """Loading, chunking or indexing the document set failed."""


class NoDocumentsError(IndexBuildError):
    """The document source produced nothing that could be indexed."""


class IndexNotReadyError(RetrievalError):
    """The index was not ready within the configured wait."""
