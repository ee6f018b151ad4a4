"""Document source for local folders."""

import logging
import os
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


class FolderIngester:
    """Loads .txt, .md and .pdf documents from a folder, recursively."""

    source_type = "folder"

    def __init__(
        self,
        root: Path | str,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        min_text_length: int = DEFAULT_MIN_TEXT_LENGTH,
    ):
        self.root = Path(root)
        self.max_file_size = max_file_size
        self.min_text_length = min_text_length

    @staticmethod
    def can_handle(source: Path) -> bool:
        """Check if this is an existing directory."""
        return source.is_dir()

    def load_documents(self) -> list[Document]:
        """Load every supported file under the folder.

        Returns:
            Documents in path order; empty if the folder does not exist
        """
        if not self.root.is_dir():
            logger.warning(f"Documents directory not found at {self.root}")
            return []

        logger.info(f"Scanning {self.root}...")
        documents = build_documents(
            self._read_files(), self.max_file_size, self.min_text_length
        )
        logger.info(f"Loaded {len(documents)} document(s) from {self.root}")
        return documents

    def _read_files(self) -> Iterator[tuple[str, bytes]]:
        for root, dirs, files in os.walk(self.root):
            dirs.sort()
            for filename in sorted(files):
                full_path = Path(root) / filename
                rel_path = full_path.relative_to(self.root).as_posix()

                if should_skip(rel_path):
                    continue

                try:
                    if full_path.stat().st_size > self.max_file_size:
                        logger.warning(f"Skipping {rel_path}: exceeds size limit")
                        continue
                    raw_content = full_path.read_bytes()
                except (PermissionError, OSError) as e:
                    logger.warning(f"Cannot read {rel_path}: {e}")
                    continue

                yield rel_path, raw_content
