"""MCP tool handlers."""

from contextstamp.mcp.tools import compare, snapshot

__all__ = ["compare", "snapshot"]
