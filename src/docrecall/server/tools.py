"""Tool handlers a conversational agent calls to query the knowledge base.

Handlers never raise for bad input: invalid queries and retrieval failures
come back as an empty result set with an explanatory note.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from docrecall.exceptions import RetrievalError
from docrecall.service import RetrievalService

logger = logging.getLogger(__name__)

SEARCH_TOOL_NAME = "search_documents"

SEARCH_TOOL = {
    "type": "function",
    "name": SEARCH_TOOL_NAME,
    "description": (
        "Search the knowledge base for relevant information. Use this tool to find "
        "specific information from company documents like policies, standards, and "
        "guidelines. Returns raw text snippets from the most relevant sections."
    ),
    "parameters": {
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": (
                    "The search query describing what information you need. Be specific "
                    'and use keywords related to the topic (e.g., "annual leave", '
                    '"remote work policy", "security requirements")'
                ),
            },
        },
        "required": ["query"],
    },
}


@dataclass(frozen=True)
class SearchResultItem:
    source_document: str
    relevance_score: float  # percent
    text_snippet: str
    page: Optional[int] = None


@dataclass(frozen=True)
class SearchToolResponse:
    results: list[SearchResultItem] = field(default_factory=list)
    total_matches: int = 0
    note: str = ""
    formatted_response: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _error_response(note: str, message: str) -> SearchToolResponse:
    return SearchToolResponse(note=note, formatted_response=f"ERROR: {message}")


def format_tool_results(results: list[SearchResultItem]) -> str:
    """Render items so the agent quotes the source text rather than paraphrasing."""
    if not results:
        return "NO RESULTS FOUND - This information is not in the knowledge base."

    blocks = []
    for i, item in enumerate(results, 1):
        source = item.source_document
        if item.page is not None:
            source += f" (Page {item.page})"
        blocks.append(
            f"RESULT {i} (Relevance: {item.relevance_score}%):\n"
            f"Source: {source}\n"
            f'Content: "{item.text_snippet}"\n'
        )
    return "DOCUMENT SEARCH RESULTS:\n\n" + "\n".join(blocks)


async def handle_search(service: RetrievalService, query: Any) -> SearchToolResponse:
    """Handle a search_documents tool call."""
    logger.info(f"{SEARCH_TOOL_NAME}: {query!r}")

    if not isinstance(query, str) or not query:
        return _error_response(
            "Invalid query provided. Query must be a non-empty string.",
            "Invalid query. Please provide a valid search term.",
        )

    trimmed = query.strip()
    if not trimmed:
        return _error_response(
            "Query cannot be empty.",
            "Query cannot be empty. Please provide a search term.",
        )

    try:
        raw_results = await service.search_raw(trimmed)
    except RetrievalError:
        logger.exception(f"{SEARCH_TOOL_NAME} failed")
        return _error_response(
            "Error searching documents. Please try again with a different query.",
            "Could not search documents. Please try again.",
        )

    results = [
        SearchResultItem(
            source_document=r.chunk.document_name,
            relevance_score=round(r.relevance_score * 100, 1),
            text_snippet=r.chunk.content,
            page=r.chunk.start_page,
        )
        for r in raw_results
    ]
    logger.info(f"{len(results)} results for {trimmed!r}")

    note = (
        f"Found {len(results)} relevant sections."
        if results
        else "No matching documents found for the query."
    )
    return SearchToolResponse(
        results=results,
        total_matches=len(results),
        note=note,
        formatted_response=format_tool_results(results),
    )


async def handle_stats(service: RetrievalService) -> dict[str, Any]:
    """Handle a get_document_stats tool call."""
    try:
        stats = await service.stats()
    except RetrievalError:
        logger.exception("Error getting document stats")
        return {"error": "Failed to retrieve document statistics"}

    return {
        "total_documents": stats.document_count,
        "total_indexed_sections": stats.total_chunks,
        "unique_topics": stats.unique_terms,
        "average_section_size_chars": round(stats.average_chunk_length),
        "note": "The knowledge base is organized into searchable sections.",
    }


async def handle_reset(service: RetrievalService) -> dict[str, Any]:
    """Handle a reset_index tool call: reload documents and rebuild."""
    try:
        snapshot = await service.reset()
    except RetrievalError as e:
        logger.exception("Index reset failed")
        return {"reset": False, "error": str(e)}

    stats = snapshot.retriever.stats()
    return {
        "reset": True,
        "total_documents": stats.document_count,
        "total_indexed_sections": stats.total_chunks,
    }


def validate_tool_call(tool_name: str, arguments: dict[str, Any]) -> tuple[bool, Optional[str]]:
    """Check a raw tool call before dispatching it.

    Returns:
        (valid, error message or None)
    """
    if tool_name != SEARCH_TOOL_NAME:
        return False, f"Unknown tool: {tool_name}"
    if not arguments.get("query"):
        return False, "Missing required parameter: query"
    if not isinstance(arguments["query"], str):
        return False, "Parameter query must be a string"
    return True, None
