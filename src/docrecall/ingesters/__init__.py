"""Document sources (ingesters) for DocRecall."""

from pathlib import Path
from typing import Optional

from docrecall.ingesters.folder_ingester import FolderIngester
from docrecall.ingesters.zip_ingester import ZipIngester
from docrecall.protocols import DocumentSource

# Registry of available ingester types
_INGESTERS: list[type] = [
    ZipIngester,
    FolderIngester,
]


def get_ingester(source: Path | str, **options) -> Optional[DocumentSource]:
    """Create an ingester that can load the given source.

    Args:
        source: Path to the input source (folder or zip file)
        **options: Passed to the ingester (max_file_size, min_text_length)

    Returns:
        A DocumentSource bound to the source, or None
    """
    source_path = Path(source)
    for ingester_type in _INGESTERS:
        if ingester_type.can_handle(source_path):
            return ingester_type(source_path, **options)
    return None


def register_ingester(ingester_type: type) -> None:
    """Register a custom ingester type.

    Args:
        ingester_type: A class with a static can_handle(path) whose instances
            implement the DocumentSource protocol
    """
    _INGESTERS.append(ingester_type)


__all__ = ["get_ingester", "register_ingester", "ZipIngester", "FolderIngester"]
