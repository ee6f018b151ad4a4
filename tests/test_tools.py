"""Tests for the agent tool handlers and the MCP server."""

import pytest

from docrecall.server import create_mcp_server
from docrecall.server.tools import (
    SEARCH_TOOL,
    SEARCH_TOOL_NAME,
    handle_reset,
    handle_search,
    handle_stats,
    validate_tool_call,
)
from docrecall.service import RetrievalService


@pytest.fixture
def service(source):
    return RetrievalService(source)


class TestHandleSearch:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", [None, 42, ""])
    async def test_invalid_query(self, service, source, query):
        response = await handle_search(service, query)

        assert response.results == []
        assert response.total_matches == 0
        assert response.note == "Invalid query provided. Query must be a non-empty string."
        assert response.formatted_response.startswith("ERROR:")
        assert source.calls == 0

    @pytest.mark.asyncio
    async def test_whitespace_query(self, service, source):
        response = await handle_search(service, "   ")

        assert response.note == "Query cannot be empty."
        assert source.calls == 0

    @pytest.mark.asyncio
    async def test_results(self, service):
        response = await handle_search(service, "  annual leave is 21 days ")

        assert response.total_matches == len(response.results) >= 1
        top = response.results[0]
        assert top.source_document == "leave_policy.txt"
        assert top.relevance_score == 100.0
        assert top.page is None
        assert "21 days per calendar year" in top.text_snippet
        assert response.note == f"Found {response.total_matches} relevant sections."
        assert response.formatted_response.startswith("DOCUMENT SEARCH RESULTS:")
        assert "RESULT 1 (Relevance: 100.0%):\nSource: leave_policy.txt\n" in response.formatted_response

    @pytest.mark.asyncio
    async def test_no_results(self, service):
        response = await handle_search(service, "quantum chromodynamics")

        assert response.results == []
        assert response.note == "No matching documents found for the query."
        assert response.formatted_response.startswith("NO RESULTS FOUND")

    @pytest.mark.asyncio
    async def test_build_failure_becomes_note(self, service, source):
        source.error = RuntimeError("disk unavailable")

        response = await handle_search(service, "annual leave")

        assert response.results == []
        assert response.note == "Error searching documents. Please try again with a different query."
        assert response.formatted_response.startswith("ERROR:")

    @pytest.mark.asyncio
    async def test_to_dict(self, service):
        data = (await handle_search(service, "remote work")).to_dict()

        assert set(data) == {"results", "total_matches", "note", "formatted_response"}
        assert set(data["results"][0]) == {"source_document", "relevance_score", "text_snippet", "page"}


class TestStatsAndReset:
    @pytest.mark.asyncio
    async def test_stats(self, service):
        stats = await handle_stats(service)

        assert stats["total_documents"] == 3
        assert stats["total_indexed_sections"] == 3
        assert stats["unique_topics"] > 0
        assert isinstance(stats["average_section_size_chars"], int)

    @pytest.mark.asyncio
    async def test_stats_failure(self, service, source):
        source.error = RuntimeError("disk unavailable")
        assert await handle_stats(service) == {"error": "Failed to retrieve document statistics"}

    @pytest.mark.asyncio
    async def test_reset(self, service, source):
        await service.ensure_ready()

        result = await handle_reset(service)

        assert result == {"reset": True, "total_documents": 3, "total_indexed_sections": 3}
        assert source.calls == 2

    @pytest.mark.asyncio
    async def test_reset_failure(self, service, source):
        source.error = RuntimeError("disk unavailable")

        result = await handle_reset(service)

        assert result["reset"] is False
        assert "disk unavailable" in result["error"]


class TestValidateToolCall:
    def test_valid(self):
        assert validate_tool_call(SEARCH_TOOL_NAME, {"query": "leave"}) == (True, None)

    def test_unknown_tool(self):
        valid, error = validate_tool_call("delete_everything", {"query": "leave"})
        assert not valid
        assert error == "Unknown tool: delete_everything"

    @pytest.mark.parametrize("arguments", [{}, {"query": ""}, {"query": None}])
    def test_missing_query(self, arguments):
        assert validate_tool_call(SEARCH_TOOL_NAME, arguments) == (
            False,
            "Missing required parameter: query",
        )

    def test_query_not_a_string(self):
        valid, _ = validate_tool_call(SEARCH_TOOL_NAME, {"query": 42})
        assert not valid

    def test_tool_definition(self):
        assert SEARCH_TOOL["name"] == SEARCH_TOOL_NAME
        assert SEARCH_TOOL["parameters"]["required"] == ["query"]


class TestMcpServer:
    @pytest.mark.asyncio
    async def test_registered_tools(self, service):
        mcp = create_mcp_server(service)

        tools = await mcp.list_tools()

        assert {t.name for t in tools} == {SEARCH_TOOL_NAME, "get_document_stats", "reset_index"}

    @pytest.mark.asyncio
    async def test_tool_call_uses_service(self, service):
        mcp = create_mcp_server(service)

        await mcp.call_tool("get_document_stats", {})

        # The tool builds the index of the service it was given
        assert service.snapshot is not None
