"""Document source for ZIP archives."""

import logging
import zipfile
from pathlib import Path
from typing import Iterator

from docrecall.ingesters.extract import (
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_MIN_TEXT_LENGTH,
    build_documents,
    should_skip,
)
from docrecall.models import Document

logger = logging.getLogger(__name__)


class ZipIngester:
    """Loads .txt, .md and .pdf documents from a ZIP archive."""

    source_type = "zip"

    def __init__(
        self,
        archive: Path | str,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        min_text_length: int = DEFAULT_MIN_TEXT_LENGTH,
    ):
        self.archive = Path(archive)
        self.max_file_size = max_file_size
        self.min_text_length = min_text_length

    @staticmethod
    def can_handle(source: Path) -> bool:
        """Check if this is a zip file."""
        return source.suffix.lower() == ".zip" and source.exists()

    def load_documents(self) -> list[Document]:
        """Load every supported member of the archive.

        Raises:
            zipfile.BadZipFile: If the archive is corrupt.
        """
        with zipfile.ZipFile(self.archive, "r") as zf:
            documents = build_documents(
                self._read_members(zf), self.max_file_size, self.min_text_length
            )
        logger.info(f"Loaded {len(documents)} document(s) from {self.archive.name}")
        return documents

    def _read_members(self, zf: zipfile.ZipFile) -> Iterator[tuple[str, bytes]]:
        for info in sorted(zf.infolist(), key=lambda i: i.filename):
            if info.is_dir() or should_skip(info.filename):
                continue

            if info.file_size > self.max_file_size:
                logger.warning(f"Skipping {info.filename}: exceeds size limit")
                continue

            yield info.filename, zf.read(info.filename)
