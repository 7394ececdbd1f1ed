"""contextstamp error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Not found (snapshots, index files, bundles)
- 4xxx: Corrupt data (unparseable or wrongly shaped JSON)
- 5xxx: Request (invalid input, unsupported capability)
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Not found (3xxx)
    SNAPSHOT_NOT_FOUND = 3001
    INDEX_NOT_FOUND = 3002
    BUNDLE_NOT_FOUND = 3003

    # Corrupt (4xxx)
    CORRUPT_INDEX = 4001
    CORRUPT_BUNDLE = 4002

    # Request (5xxx)
    INVALID_PARAMETER = 5001
    MISSING_PARAMETER = 5002
    UNSUPPORTED_BASELINE = 5003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class ContextStampError(Exception):
    """Base error with structured context for tool responses."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'SNAPSHOT_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON/MCP responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(ContextStampError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class NotFoundError(ContextStampError):
    """A snapshot, index file or bundle could not be located."""

    @classmethod
    def snapshot(cls, snapshot_id: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.SNAPSHOT_NOT_FOUND,
            message=(
                f"Snapshot not found: {snapshot_id}. The snapshot may have expired "
                "(snapshots expire after 1 hour) or was never created. "
                "Run refresh_snapshot to create a new one."
            ),
            details={"snapshot_id": snapshot_id},
        )

    @classmethod
    def no_snapshot(cls) -> "NotFoundError":
        return cls(
            code=ErrorCode.SNAPSHOT_NOT_FOUND,
            message="No snapshot found. Run refresh_snapshot first to create a baseline.",
        )

    @classmethod
    def index_file(cls, path: str, directory: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.INDEX_NOT_FOUND,
            message=(
                f"{path} not found in {directory}. Run 'stamp context' to generate "
                "context files, then refresh_snapshot."
            ),
            details={"path": path, "directory": directory},
        )

    @classmethod
    def bundle(cls, bundle_path: str, root_component: str | None = None) -> "NotFoundError":
        if root_component:
            message = f"Bundle not found for component: {root_component} in {bundle_path}"
        else:
            message = f"No bundles found in {bundle_path}"
        return cls(
            code=ErrorCode.BUNDLE_NOT_FOUND,
            message=message,
            details={"bundle_path": bundle_path, "root_component": root_component},
        )


class CorruptDataError(ContextStampError):
    """An Index or Bundle file failed to parse or has the wrong shape."""

    @classmethod
    def index(cls, path: str, reason: str) -> "CorruptDataError":
        return cls(
            code=ErrorCode.CORRUPT_INDEX,
            message=f"Invalid index file {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def bundle(cls, path: str, reason: str) -> "CorruptDataError":
        return cls(
            code=ErrorCode.CORRUPT_BUNDLE,
            message=f"Invalid bundle file {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class InvalidInputError(ContextStampError):
    """Malformed or missing request parameter."""

    @classmethod
    def invalid(cls, field: str, value: Any, reason: str) -> "InvalidInputError":
        return cls(
            code=ErrorCode.INVALID_PARAMETER,
            message=f"Invalid {field} parameter: {value}. {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def missing(cls, field: str, hint: str = "") -> "InvalidInputError":
        message = f"{field} parameter is REQUIRED but was not provided."
        if hint:
            message = f"{message} {hint}"
        return cls(
            code=ErrorCode.MISSING_PARAMETER,
            message=message,
            details={"field": field},
        )


class UnsupportedError(ContextStampError):
    """A recognized request that is not implemented."""

    @classmethod
    def baseline(cls, baseline: str) -> "UnsupportedError":
        return cls(
            code=ErrorCode.UNSUPPORTED_BASELINE,
            message=f"Git baseline not yet implemented: {baseline}",
            details={"baseline": baseline},
        )


class InternalError(ContextStampError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
