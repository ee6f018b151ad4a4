"""Turn raw file bytes into Documents."""

import io
import logging
import re
from pathlib import PurePosixPath
from typing import Iterable, Optional

from pypdf import PdfReader

from docrecall.models import Document
from docrecall.utils.binary import is_binary_content

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = {".txt", ".md"}
PDF_EXTENSIONS = {".pdf"}
SUPPORTED_EXTENSIONS = TEXT_EXTENSIONS | PDF_EXTENSIONS

DEFAULT_MAX_FILE_SIZE = 50 * 1024 * 1024  # 50 MB
DEFAULT_MIN_TEXT_LENGTH = 50

SKIP_PARTS = {
    "__pycache__",
    "node_modules",
    ".git",
    "venv",
    ".venv",
    "dist",
    "build",
    "__MACOSX",
}

# Signs that a PDF text layer is encoded glyph ids rather than text
HEX_GLYPH = re.compile(r"<[0-9a-f]{2,}>", re.IGNORECASE)
READABLE_CHAR = re.compile(r"[\x00-\x7f\u0590-\u05ff]")
READABLE_WORD = re.compile(r"[a-zA-Z]{3,}|[\u05d0-\u05ea]{2,}")


def should_skip(path: str) -> bool:
    """Skip hidden files, build artifacts and unsupported formats."""
    parts = PurePosixPath(path).parts
    if any(part.startswith(".") or part in SKIP_PARTS for part in parts):
        return True
    return PurePosixPath(path).suffix.lower() not in SUPPORTED_EXTENSIONS


def document_id(path: str, taken: set[str]) -> str:
    """Stable id from a relative path, e.g. 'hr/Leave Policy.txt' -> 'doc_hr_leave_policy'."""
    stem = str(PurePosixPath(path).with_suffix("")).lower()
    base = "doc_" + re.sub(r"\W+", "_", stem).strip("_")
    candidate = base
    n = 2
    while candidate in taken:
        candidate = f"{base}_{n}"
        n += 1
    taken.add(candidate)
    return candidate


def garbled_reason(text: str) -> Optional[str]:
    """Why extracted text looks like encoded garbage, or None if it reads as text."""
    words = len(text.split()) or 1
    hex_count = len(HEX_GLYPH.findall(text))
    if hex_count > 10 and hex_count / words > 0.1:
        return f"{hex_count} hex-encoded glyphs in {words} words"

    readable = len(READABLE_CHAR.findall(text)) / len(text)
    if readable < 0.5:
        return f"only {readable:.0%} readable characters"

    if len(text) > 100 and not READABLE_WORD.search(text):
        return "no readable words"
    return None


def extract_pdf_text(raw: bytes, name: str) -> str:
    """Extract text from all pages, each prefixed with a [Page N] marker.

    Raises:
        ValueError: If the PDF cannot be read or its text is garbled.
    """
    try:
        reader = PdfReader(io.BytesIO(raw))
        pages = [
            (number, (page.extract_text() or "").strip())
            for number, page in enumerate(reader.pages, 1)
        ]
    except Exception as e:
        raise ValueError(f"Failed to parse PDF file {name}: {e}") from e

    pages = [(number, page_text) for number, page_text in pages if page_text]
    # Checked without the page markers, which are themselves readable words
    body = "\n\n".join(page_text for _, page_text in pages)
    reason = garbled_reason(body) if body else None
    if reason:
        raise ValueError(f"Unreadable text in PDF file {name}: {reason}")

    return "\n\n".join(f"[Page {number}]\n{page_text}" for number, page_text in pages)


def extract_text(
    name: str,
    raw: bytes,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    min_text_length: int = DEFAULT_MIN_TEXT_LENGTH,
) -> Optional[str]:
    """Return the usable text of a file, or None if it should be skipped."""
    if len(raw) > max_file_size:
        logger.warning(f"Skipping {name}: {len(raw) / 1024 / 1024:.2f} MB exceeds size limit")
        return None

    suffix = PurePosixPath(name).suffix.lower()
    if suffix in PDF_EXTENSIONS:
        try:
            text = extract_pdf_text(raw, name)
        except ValueError as e:
            logger.warning(str(e))
            return None
    elif is_binary_content(raw):
        logger.warning(f"Skipping {name}: binary content")
        return None
    else:
        text = raw.decode("utf-8", errors="replace")

    text = text.strip()
    if len(text) < min_text_length:
        logger.warning(f"Skipping {name}: only {len(text)} chars of text")
        return None
    return text


def build_documents(
    files: Iterable[tuple[str, bytes]],
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    min_text_length: int = DEFAULT_MIN_TEXT_LENGTH,
) -> list[Document]:
    """Build Documents from (relative path, raw bytes) pairs, in order."""
    documents: list[Document] = []
    taken: set[str] = set()

    for name, raw in files:
        text = extract_text(name, raw, max_file_size, min_text_length)
        if text is None:
            continue
        documents.append(Document(id=document_id(name, taken), filename=name, text=text))
        logger.debug(f"  Extracted {len(text)} chars from {name}")

    return documents
