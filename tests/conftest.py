"""Pytest configuration and fixtures for DocRecall tests."""

import asyncio
import time

import pytest

from docrecall.models import Chunk, Document


# -------------------------------------------------------------------------
# Sample content
# -------------------------------------------------------------------------

LEAVE_TEXT = (
    "Annual Leave Policy\n\n"
    "Every full-time employee is entitled to paid time off. The annual leave is "
    "21 days per calendar year, accrued monthly from the first day of employment.\n\n"
    "Unused vacation days may be carried over to the next year, up to a maximum of "
    "10 days, subject to manager approval."
)

REMOTE_TEXT = (
    "Remote Work Policy\n\n"
    "Employees may work remotely up to two days per week with approval from their "
    "direct manager. Remote employees must be reachable during core hours."
)

NOTICE_TEXT = (
    "מדיניות סיום העסקה\n\n"
    "תקופת ההודעה המוקדמת היא שבועיים לפני סיום העבודה, בהתאם למדיניות החברה "
    "ולהוראות החוק. יש למסור הודעה בכתב למנהל הישיר."
)


def make_chunk(
    content: str,
    document_id: str = "doc_a",
    index: int = 0,
    name: str | None = None,
) -> Chunk:
    """Build a standalone chunk for retriever tests."""
    return Chunk(
        id=f"{document_id}_chunk_{index}",
        content=content,
        document_id=document_id,
        document_name=name or f"{document_id}.txt",
        chunk_index=index,
        start_char=0,
        end_char=len(content),
    )


# -------------------------------------------------------------------------
# Document sources
# -------------------------------------------------------------------------


class CountingSource:
    """Async in-memory source that counts pipeline executions."""

    source_type = "memory"

    def __init__(self, documents: list[Document], delay: float = 0.05):
        self.documents = documents
        self.delay = delay
        self.error: Exception | None = None
        self.calls = 0

    async def load_documents(self) -> list[Document]:
        self.calls += 1
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.documents)


class BlockingSource(CountingSource):
    """Synchronous variant; the service runs it in a worker thread."""

    def load_documents(self) -> list[Document]:  # type: ignore[override]
        self.calls += 1
        time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.documents)


@pytest.fixture
def documents() -> list[Document]:
    return [
        Document(id="doc_leave", filename="leave_policy.txt", text=LEAVE_TEXT),
        Document(id="doc_remote", filename="remote_work.txt", text=REMOTE_TEXT),
        Document(id="doc_notice", filename="notice_he.txt", text=NOTICE_TEXT),
    ]


@pytest.fixture
def source(documents: list[Document]) -> CountingSource:
    return CountingSource(documents)


@pytest.fixture
def blocking_source(documents: list[Document]) -> BlockingSource:
    return BlockingSource(documents)
