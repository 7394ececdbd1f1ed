"""Core module exports."""

from contextstamp.core.errors import (
    ConfigError,
    ContextStampError,
    CorruptDataError,
    ErrorCode,
    InternalError,
    InvalidInputError,
    NotFoundError,
    UnsupportedError,
)
from contextstamp.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "ContextStampError",
    "CorruptDataError",
    "ErrorCode",
    "InternalError",
    "InvalidInputError",
    "NotFoundError",
    "UnsupportedError",
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
