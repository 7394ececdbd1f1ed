"""structlog setup for the CLI and the MCP server.

Every record flows through the stdlib root logger so that each configured
output gets its own handler, level and renderer. The stdio MCP transport
owns stdout; servers should log to stderr or a file.

A request id, when set, is stamped on every record emitted in the same
context. The MCP layer sets one per tool call.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from contextstamp.config.models import LoggingConfig, LogOutputConfig

_current_request: ContextVar[str | None] = ContextVar("contextstamp_request_id", default=None)

# Library loggers that emit a line per MCP message at INFO
_QUIET_LOGGERS = (
    "mcp.server.lowlevel.server",
    "fastmcp.server.context.to_client",
)


def set_request_id(request_id: str | None = None) -> str:
    """Bind a correlation id to the current context, generating one if absent."""
    value = request_id or uuid4().hex[:12]
    _current_request.set(value)
    return value


def get_request_id() -> str | None:
    return _current_request.get()


def clear_request_id() -> None:
    _current_request.set(None)


def _stamp_request_id(
    _logger: structlog.types.WrappedLogger,
    _method: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    request_id = _current_request.get()
    if request_id is not None:
        event_dict.setdefault("request_id", request_id)
    return event_dict


def _level_number(name: str | None, fallback: int = logging.INFO) -> int:
    if not name:
        return fallback
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else fallback


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
        _stamp_request_id,  # type: ignore[list-item]
    ]


def _renderer(output: LogOutputConfig) -> structlog.types.Processor:
    if output.format == "json":
        return structlog.processors.JSONRenderer()
    stream = sys.stdout if output.destination == "stdout" else sys.stderr
    tty = output.destination in ("stderr", "stdout") and stream.isatty()
    return structlog.dev.ConsoleRenderer(colors=tty, pad_event_to=0, pad_level=False)


def _open_handler(output: LogOutputConfig) -> logging.Handler:
    if output.destination == "stdout":
        return logging.StreamHandler(sys.stdout)
    if output.destination == "stderr":
        return logging.StreamHandler(sys.stderr)
    target = Path(output.destination)
    target.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(target, mode="a", encoding="utf-8")


def _build_handler(
    output: LogOutputConfig,
    pre_chain: list[structlog.types.Processor],
    level: int,
) -> logging.Handler:
    handler = _open_handler(output)
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_renderer(output),
            foreign_pre_chain=pre_chain,
        )
    )
    return handler


def _reset_root(level: int) -> logging.Logger:
    root = logging.getLogger()
    while root.handlers:
        stale = root.handlers[0]
        root.removeHandler(stale)
        stale.close()
    root.setLevel(level)
    return root


def configure_logging(
    *,
    config: LoggingConfig | None = None,
    json_format: bool = False,
    level: str = "INFO",
) -> None:
    """Install structlog over stdlib logging.

    Either pass a full ``LoggingConfig`` (one handler per output) or use the
    shorthand ``json_format``/``level`` for a single stderr output. Calling
    again replaces the previous handlers.
    """
    from contextstamp.config.models import LoggingConfig, LogOutputConfig

    if config is None:
        config = LoggingConfig(
            level=level.upper(),  # type: ignore[arg-type]
            outputs=[LogOutputConfig(format="json" if json_format else "console")],
        )

    root_level = _level_number(config.level)
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    root = _reset_root(root_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    for output in config.outputs:
        output_level = _level_number(output.level, fallback=root_level)
        root.addHandler(_build_handler(output, pre_chain, output_level))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a bound logger; ``name`` is attached as the ``logger`` field."""
    bound = structlog.get_logger()
    return bound.bind(logger=name) if name else bound  # type: ignore[no-any-return]
