"""MCP server module - FastMCP tool registration and wiring."""

from contextstamp.mcp.context import AppContext
from contextstamp.mcp.registry import ToolRegistry, ToolSpec
from contextstamp.mcp.server import create_mcp_server

__all__ = ["AppContext", "ToolRegistry", "ToolSpec", "create_mcp_server"]
