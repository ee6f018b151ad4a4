"""Protocol for document sources."""

from typing import Protocol, runtime_checkable

from docrecall.models import Document


@runtime_checkable
class DocumentSource(Protocol):
    """Protocol for anything that yields the document set to index.

    Implementations handle different inputs (folder, zip). Uses structural
    subtyping - no inheritance required. load_documents may block on I/O;
    the service runs it off the event loop.
    """

    @property
    def source_type(self) -> str:
        """Return identifier for this source type (e.g., 'zip', 'folder')."""
        ...

    def load_documents(self) -> list[Document]:
        """Return every usable document. May be empty."""
        ...
