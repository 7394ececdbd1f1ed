"""Tests for mcp/errors.py module."""

from __future__ import annotations

import pytest
from fastmcp.exceptions import ToolError

from contextstamp.core.errors import (
    ConfigError,
    CorruptDataError,
    InternalError,
    InvalidInputError,
    NotFoundError,
    UnsupportedError,
)
from contextstamp.mcp.errors import MCPError, MCPErrorCode, from_core_error


class TestMCPError:
    """Tests for MCPError."""

    def test_is_tool_error(self) -> None:
        """MCPError passes through FastMCP as a ToolError."""
        err = MCPError(MCPErrorCode.INVALID_PARAMS, "bad", "fix it")
        assert isinstance(err, ToolError)

    def test_to_dict(self) -> None:
        """to_dict carries every field."""
        err = MCPError(
            MCPErrorCode.FILE_NOT_FOUND, "missing", "generate", path="/p", error="INDEX_NOT_FOUND"
        )
        assert err.to_dict() == {
            "code": "FILE_NOT_FOUND",
            "message": "missing",
            "remediation": "generate",
            "path": "/p",
            "context": {"error": "INDEX_NOT_FOUND"},
        }


class TestFromCoreError:
    """Tests for core error translation."""

    @pytest.mark.parametrize(
        ("core", "expected"),
        [
            (NotFoundError.snapshot("snap_1_0"), MCPErrorCode.SNAPSHOT_NOT_FOUND),
            (NotFoundError.no_snapshot(), MCPErrorCode.SNAPSHOT_NOT_FOUND),
            (NotFoundError.index_file("context_main.json", "/p"), MCPErrorCode.FILE_NOT_FOUND),
            (NotFoundError.bundle("src/context.json", "Button"), MCPErrorCode.FILE_NOT_FOUND),
            (CorruptDataError.index("/p/context_main.json", "bad"), MCPErrorCode.CORRUPT_DATA),
            (CorruptDataError.bundle("/p/src/context.json", "bad"), MCPErrorCode.CORRUPT_DATA),
            (InvalidInputError.invalid("depth", 0, "x"), MCPErrorCode.INVALID_PARAMS),
            (InvalidInputError.missing("projectPath"), MCPErrorCode.INVALID_PARAMS),
            (UnsupportedError.baseline("git:main"), MCPErrorCode.UNSUPPORTED),
            (ConfigError.parse_error("/c.yaml", "bad"), MCPErrorCode.CONFIG_ERROR),
            (InternalError.unexpected("boom"), MCPErrorCode.INTERNAL_ERROR),
        ],
    )
    def test_code_mapping(self, core: Exception, expected: MCPErrorCode) -> None:
        """Each core code maps to an MCP code with a remediation hint."""
        err = from_core_error(core)  # type: ignore[arg-type]
        assert err.code == expected
        assert err.remediation

    def test_keeps_message_and_path(self) -> None:
        """Message and path come from the core error."""
        core = CorruptDataError.bundle("/p/src/context.json", "bad")
        err = from_core_error(core)
        assert err.message == core.message
        assert err.path == "/p/src/context.json"
        assert err.context == {"error": "CORRUPT_BUNDLE"}

    def test_bundle_path_used_as_path(self) -> None:
        """Bundle not-found errors report the bundle path."""
        err = from_core_error(NotFoundError.bundle("src/context.json", "Button"))
        assert err.path == "src/context.json"
