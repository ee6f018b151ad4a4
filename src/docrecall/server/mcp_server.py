"""FastMCP server implementation for DocRecall."""

import json

from mcp.server.fastmcp import FastMCP

from docrecall.server.tools import SEARCH_TOOL_NAME, handle_reset, handle_search, handle_stats
from docrecall.service import RetrievalService


def create_mcp_server(service: RetrievalService) -> FastMCP:
    """Create an MCP server over a retrieval service.

    Design: 1 process = 1 document collection. The index is built lazily
    on the first tool call.

    Args:
        service: The service owning the document index

    Returns:
        Configured FastMCP server instance
    """
    mcp = FastMCP(
        name="docrecall",
    )

    @mcp.tool(name=SEARCH_TOOL_NAME)
    async def search_documents(query: str) -> str:
        """Search the knowledge base for relevant information.

        Use this to find specific information from the loaded documents
        (policies, standards, guidelines). Returns raw text snippets from
        the most relevant sections, with source and relevance.

        Args:
            query: What you need to know; be specific and use topic keywords

        Returns:
            Ranked document excerpts, or a note that nothing matched
        """
        response = await handle_search(service, query)
        return response.formatted_response

    @mcp.tool()
    async def get_document_stats() -> str:
        """Get statistics about the loaded knowledge base.

        Returns:
            JSON with document count, indexed sections and average section size
        """
        return json.dumps(await handle_stats(service), ensure_ascii=False)

    @mcp.tool()
    async def reset_index() -> str:
        """Reload all documents and rebuild the search index.

        Returns:
            JSON describing the rebuilt index, or the error
        """
        return json.dumps(await handle_reset(service), ensure_ascii=False)

    return mcp
