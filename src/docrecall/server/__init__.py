"""Agent-facing surfaces: tool handlers and the MCP server."""

from docrecall.server.mcp_server import create_mcp_server

__all__ = ["create_mcp_server"]
