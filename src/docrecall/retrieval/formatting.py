"""Render search results as text for a conversational context."""

from docrecall.models import SearchResult

NO_RESULTS = "No relevant documents found."
PREVIEW_LENGTH = 500


def format_results(results: list[SearchResult], preview_length: int = PREVIEW_LENGTH) -> str:
    """Format results for injection into a prompt.

    Args:
        results: Ranked search results
        preview_length: Maximum characters of chunk content per result

    Returns:
        One block per result (source, score, content), separated by rules
    """
    if not results:
        return NO_RESULTS

    blocks = []
    for i, result in enumerate(results, 1):
        chunk = result.chunk
        source = chunk.document_name
        if chunk.start_page is not None:
            source += f" (Page {chunk.start_page})"

        content = chunk.content[:preview_length]
        if len(chunk.content) > preview_length:
            content += "..."

        blocks.append(
            f"[Document {i}: {source}]\n"
            f"Score: {result.relevance_score * 100:.1f}%\n"
            f"Content:\n{content}\n"
        )

    return "\n---\n\n".join(blocks)
