"""Structured error system for MCP tools.

Provides typed exceptions with error codes and remediation hints so agents
can understand failures and self-correct. Core errors raised by the
snapshot layer are translated with ``from_core_error``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from fastmcp.exceptions import ToolError

from contextstamp.core.errors import ContextStampError, ErrorCode


class MCPErrorCode(StrEnum):
    """Machine-readable error codes for MCP tool failures."""

    # Validation errors - agent should fix input
    INVALID_PARAMS = "INVALID_PARAMS"
    UNSUPPORTED = "UNSUPPORTED"

    # State errors - agent should refresh the snapshot
    SNAPSHOT_NOT_FOUND = "SNAPSHOT_NOT_FOUND"

    # File errors - agent should (re)generate context files
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    CORRUPT_DATA = "CORRUPT_DATA"

    # System errors
    CONFIG_ERROR = "CONFIG_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class MCPError(ToolError):
    """A tool failure an agent can act on.

    Subclasses FastMCP's ToolError so FastMCP surfaces it as is.
    ``remediation`` tells the caller what to do next.
    """

    def __init__(
        self,
        code: MCPErrorCode,
        message: str,
        remediation: str,
        path: str | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.remediation = remediation
        self.path = path
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "remediation": self.remediation,
            "path": self.path,
            "context": dict(self.context),
        }


# =============================================================================
# Core error translation
# =============================================================================

_CORE_MAPPING: dict[ErrorCode, tuple[MCPErrorCode, str]] = {
    ErrorCode.SNAPSHOT_NOT_FOUND: (
        MCPErrorCode.SNAPSHOT_NOT_FOUND,
        "Call refresh_snapshot to create a new snapshot, then retry with its snapshotId.",
    ),
    ErrorCode.INDEX_NOT_FOUND: (
        MCPErrorCode.FILE_NOT_FOUND,
        "Run 'stamp context' in the project to generate context files, then retry.",
    ),
    ErrorCode.BUNDLE_NOT_FOUND: (
        MCPErrorCode.FILE_NOT_FOUND,
        "Call list_bundles to see available bundle paths and component names.",
    ),
    ErrorCode.CORRUPT_INDEX: (
        MCPErrorCode.CORRUPT_DATA,
        "Regenerate context files with 'stamp context'; the index is unreadable.",
    ),
    ErrorCode.CORRUPT_BUNDLE: (
        MCPErrorCode.CORRUPT_DATA,
        "Regenerate context files with 'stamp context' and check bundlePath points at a JSON file.",
    ),
    ErrorCode.INVALID_PARAMETER: (
        MCPErrorCode.INVALID_PARAMS,
        "Fix the parameter value and retry.",
    ),
    ErrorCode.MISSING_PARAMETER: (
        MCPErrorCode.INVALID_PARAMS,
        "Provide the missing parameter and retry.",
    ),
    ErrorCode.UNSUPPORTED_BASELINE: (
        MCPErrorCode.UNSUPPORTED,
        "Use baseline='disk', 'snapshot', a snapshot id or a directory path.",
    ),
}


def from_core_error(err: ContextStampError) -> MCPError:
    """Translate a core error into an MCPError carrying a remediation hint."""
    if err.code in _CORE_MAPPING:
        code, remediation = _CORE_MAPPING[err.code]
    elif 2000 <= err.code < 3000:
        code, remediation = MCPErrorCode.CONFIG_ERROR, "Fix .contextstamp/config.yaml and restart."
    else:
        code, remediation = MCPErrorCode.INTERNAL_ERROR, "Retry; report the error if it persists."
    return MCPError(
        code=code,
        message=err.message,
        remediation=remediation,
        path=err.details.get("path") or err.details.get("bundle_path"),
        error=err.error_name,
    )
