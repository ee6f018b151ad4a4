"""Retrieval service: owns the index lifecycle.

Loads documents, chunks them and builds the lexical index once, then serves
searches against that index until reset() swaps in a freshly built one.
Builds are single-flight: however many callers need the index at the same
time, one load -> chunk -> index pipeline runs and every caller receives its
outcome.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from docrecall.chunkers import ParagraphChunker
from docrecall.exceptions import IndexBuildError, IndexNotReadyError, NoDocumentsError
from docrecall.models import Document, IndexStats, SearchResult
from docrecall.protocols import ChunkingStrategy, DocumentSource
from docrecall.retrieval import DocumentRetriever, RetrieverConfig, format_results

logger = logging.getLogger(__name__)


def _consume_outcome(task: asyncio.Task) -> None:
    # Mark the outcome retrieved even if every waiter was cancelled
    if not task.cancelled():
        task.exception()


class ServiceState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


@dataclass(frozen=True)
class IndexSnapshot:
    """One complete build: the documents it was built from and its retriever."""

    generation: int
    documents: tuple[Document, ...]
    retriever: DocumentRetriever


class RetrievalService:
    """Lifecycle-managed handle over a document source and its index.

    Callers own the instance and pass it where it is needed.

    Searches capture the published snapshot once and use it for the whole
    call. A rebuild publishes its snapshot in a single assignment after it
    has fully succeeded, so readers see either the old index or the new one.
    A failed rebuild leaves the previous snapshot in place.

    If ready_timeout is set, every caller waiting on a build gives up after
    that many seconds with IndexNotReadyError; the build itself keeps running.
    """

    def __init__(
        self,
        source: DocumentSource,
        chunker: ChunkingStrategy | None = None,
        retriever_config: RetrieverConfig | None = None,
        ready_timeout: Optional[float] = None,
    ):
        self._source = source
        self._chunker = chunker or ParagraphChunker()
        self._retriever_config = retriever_config or RetrieverConfig()
        self._ready_timeout = ready_timeout

        self._snapshot: IndexSnapshot | None = None
        self._build: asyncio.Task | None = None
        self._follow_up: asyncio.Task | None = None
        self._generation = 0

    @property
    def state(self) -> ServiceState:
        if self._build is not None or self._follow_up is not None:
            return ServiceState.INITIALIZING
        if self._snapshot is not None:
            return ServiceState.READY
        return ServiceState.UNINITIALIZED

    @property
    def source(self) -> DocumentSource:
        return self._source

    @property
    def snapshot(self) -> IndexSnapshot | None:
        """The currently published build, if any."""
        return self._snapshot

    @property
    def documents(self) -> tuple[Document, ...]:
        snapshot = self._snapshot
        return snapshot.documents if snapshot else ()

    async def ensure_ready(self) -> IndexSnapshot:
        """Return the published snapshot, building it first if needed.

        Safe to call repeatedly and concurrently. Build failures propagate
        to every caller waiting on that build; the next call retries.
        """
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot
        return await self._wait(self._start_build())

    async def reset(self) -> IndexSnapshot:
        """Reload documents and rebuild the index from scratch.

        A build that is already running may have read the source before this
        call, so one more build is queued behind it; concurrent resets share
        that queued build. Until the rebuild succeeds, searches keep using the
        previous index.
        """
        logger.info("Index reset requested")
        if self._build is None:
            return await self._wait(self._start_build())

        if self._follow_up is None:
            task = asyncio.get_running_loop().create_task(self._rebuild_after(self._build))
            task.add_done_callback(_consume_outcome)
            self._follow_up = task
        return await self._wait(self._follow_up)

    async def search_raw(self, query: str) -> list[SearchResult]:
        """Ranked results for structured consumers."""
        if not isinstance(query, str) or not query.strip():
            return []
        snapshot = await self.ensure_ready()
        return snapshot.retriever.search(query)

    async def search(self, query: str) -> str:
        """Ranked results rendered for a conversational context."""
        return format_results(await self.search_raw(query))

    async def stats(self) -> IndexStats:
        snapshot = await self.ensure_ready()
        return snapshot.retriever.stats()

    async def enhance_prompt(self, base_prompt: str, user_query: str | None = None) -> str:
        """Append knowledge-base context to an agent's system prompt.

        With a query, the context is the formatted search results; without
        one, it lists the loaded documents.
        """
        snapshot = await self.ensure_ready()
        retriever = snapshot.retriever

        if user_query:
            context = format_results(retriever.search(user_query))
        else:
            names = "\n".join(f"- {doc.filename}" for doc in snapshot.documents)
            context = (
                f"Available Documents ({retriever.chunk_count} chunks total):\n"
                f"{names}\n\n"
                "You can reference information from these documents in your responses."
            )

        return f"{base_prompt}\n\nCONTEXT FROM KNOWLEDGE BASE:\n{context}"

    def _start_build(self) -> asyncio.Task:
        # No await between the check and the assignment: the first caller
        # creates the task, everyone else joins it.
        if self._build is None:
            self._generation += 1
            task = asyncio.get_running_loop().create_task(self._run_build(self._generation))
            task.add_done_callback(self._build_done)
            self._build = task
        return self._build

    def _build_done(self, task: asyncio.Task) -> None:
        if self._build is task:
            self._build = None
        _consume_outcome(task)

    async def _rebuild_after(self, previous: asyncio.Task) -> IndexSnapshot:
        # Outcome of the earlier build is irrelevant; its waiters already see it
        try:
            await asyncio.wait({previous})
        finally:
            self._follow_up = None
        logger.info("Starting queued rebuild")
        return await asyncio.shield(self._start_build())

    async def _wait(self, build: asyncio.Task) -> IndexSnapshot:
        # shield: a cancelled caller must not cancel the shared build
        waiter = asyncio.shield(build)
        if self._ready_timeout is None:
            return await waiter
        try:
            return await asyncio.wait_for(waiter, self._ready_timeout)
        except asyncio.TimeoutError:
            raise IndexNotReadyError(
                f"Index not ready after {self._ready_timeout}s"
            ) from None

    async def _run_build(self, generation: int) -> IndexSnapshot:
        logger.info(f"Building index (generation {generation})")
        try:
            documents = await self._load_documents()
            snapshot = await asyncio.to_thread(self._index_documents, generation, documents)
        except IndexBuildError as e:
            logger.error(f"Index build {generation} failed: {e}")
            raise
        finally:
            # Cleared before waiters resume so a failed build can be retried
            self._build = None

        self._snapshot = snapshot
        stats = snapshot.retriever.stats()
        logger.info(
            f"Index ready (generation {generation}): {stats.document_count} documents, "
            f"{stats.total_chunks} chunks, {stats.unique_terms} terms"
        )
        return snapshot

    async def _load_documents(self) -> list[Document]:
        load = self._source.load_documents
        try:
            if inspect.iscoroutinefunction(load):
                documents = await load()
            else:
                documents = await asyncio.to_thread(load)
        except Exception as e:
            raise IndexBuildError(f"Failed to load documents: {e}") from e

        documents = list(documents)
        if not documents:
            raise NoDocumentsError("Document source returned no documents")

        logger.info(f"Loaded {len(documents)} document(s)")
        for doc in documents:
            logger.debug(f"  - {doc.filename}: {len(doc.text)} chars")
        return documents

    def _index_documents(self, generation: int, documents: list[Document]) -> IndexSnapshot:
        try:
            chunks = [chunk for doc in documents for chunk in self._chunker.chunk(doc)]
        except Exception as e:
            raise IndexBuildError(f"Failed to chunk documents: {e}") from e

        retriever = DocumentRetriever(self._retriever_config)
        retriever.initialize(chunks)
        if retriever.chunk_count == 0:
            raise NoDocumentsError(
                f"No chunks of at least {self._retriever_config.min_chunk_length} chars "
                f"in {len(documents)} document(s)"
            )

        return IndexSnapshot(generation=generation, documents=tuple(documents), retriever=retriever)
