"""FastMCP server creation and wiring.

Two-phase tool logging: tool_start with params, tool_complete with summary.
Expected failures log a warning without traceback; unexpected ones log an
error, with the traceback at DEBUG.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from fastmcp.utilities.json_schema import dereference_refs
from pydantic import BaseModel, Field, ValidationError

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from contextstamp.config.models import ContextStampConfig
    from contextstamp.mcp.context import AppContext
    from contextstamp.mcp.registry import ToolSpec

log = structlog.get_logger(__name__)


class ToolResponse(BaseModel):
    """Standardized tool response envelope."""

    result: Any = None
    meta: dict[str, Any] = Field(default_factory=dict)
    success: bool
    error: str | None = None


def _extract_log_params(kwargs: dict[str, Any]) -> dict[str, Any]:
    """Key params for the tool_start log line, with long values truncated."""
    params: dict[str, Any] = {}
    for key, value in kwargs.items():
        if isinstance(value, str) and len(value) > 80:
            params[key] = value[:80] + "..."
        elif value is not None:
            params[key] = value
    return params


def _extract_result_summary(result: dict[str, Any]) -> dict[str, Any]:
    """Summary metrics from a tool result for the tool_complete log line."""
    summary: dict[str, Any] = {}
    if "snapshotId" in result:
        summary["snapshot_id"] = result["snapshotId"]
    if "totalBundles" in result:
        summary["bundles"] = result["totalBundles"]
    if "status" in result:
        summary["status"] = result["status"]
    if isinstance(result.get("folderDiffs"), list):
        summary["folder_diffs"] = len(result["folderDiffs"])
    return summary


def create_mcp_server(context: AppContext) -> FastMCP:
    """Create FastMCP server with all tools wired to context.

    Args:
        context: AppContext with all ops instances

    Returns:
        Configured FastMCP server ready to run
    """
    from fastmcp import FastMCP

    from contextstamp.mcp.registry import registry

    # Import tools to trigger registration
    from contextstamp.mcp.tools import compare, snapshot  # noqa: F401

    log.info("mcp_server_creating", project_root=str(context.project_root))

    mcp = FastMCP(
        "contextstamp",
        instructions=(
            "Snapshot and diff LogicStamp context files. Call refresh_snapshot before "
            "edits, then compare_snapshot after edits to see what changed."
        ),
    )

    for spec in registry.get_all():
        _wire_tool(mcp, spec, context)

    log.info("mcp_server_created", tool_count=len(registry))
    return mcp


def _failure(request_id: str, error: str, /, **meta: Any) -> dict[str, Any]:
    return ToolResponse(
        success=False,
        error=error,
        meta={"request_id": request_id, **meta},
    ).model_dump()


def _validation_failure(request_id: str, exc: ValidationError) -> dict[str, Any]:
    errors = exc.errors()
    first = errors[0]["msg"] if errors else str(exc)
    return _failure(
        request_id,
        f"Validation error: {first}",
        error_type="validation",
        validation_errors=[
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in errors[:5]
        ],
    )


def _wire_tool(mcp: FastMCP, spec: ToolSpec, context: AppContext) -> None:
    """Register one ToolSpec on the server.

    The params model's JSON schema is published with $refs inlined, so
    clients see a flat parameter list. Every call runs under its own
    request id and returns a ToolResponse dict.
    """
    from fastmcp.tools.tool import FunctionTool

    from contextstamp.core.errors import ContextStampError, InternalError
    from contextstamp.core.logging import clear_request_id, set_request_id
    from contextstamp.mcp.errors import MCPError, MCPErrorCode, from_core_error

    async def invoke(request_id: str, kwargs: dict[str, Any], since: float) -> dict[str, Any]:
        def took() -> int:
            return int((time.perf_counter() - since) * 1000)

        try:
            params = spec.params_model(**kwargs)
        except ValidationError as e:
            log.warning("tool_validation_error", tool=spec.name, error=str(e), elapsed_ms=took())
            return _validation_failure(request_id, e)

        try:
            result = await spec.handler(context, params)
        except ContextStampError as e:
            failure = from_core_error(e)
        except MCPError as e:
            failure = e
        except Exception as e:
            log.error("tool_internal_error", tool=spec.name, error=str(e), elapsed_ms=took())
            log.debug("tool_internal_error_traceback", tool=spec.name, exc_info=True)
            failure = from_core_error(InternalError.unexpected(str(e), tool=spec.name))
        else:
            log.info("tool_complete", tool=spec.name, elapsed_ms=took(), **_extract_result_summary(result))
            return ToolResponse(
                success=True,
                result=result,
                meta={"request_id": request_id, "timestamp": int(time.time() * 1000)},
            ).model_dump()

        if failure.code != MCPErrorCode.INTERNAL_ERROR:
            log.warning(
                "tool_error",
                tool=spec.name,
                error_code=failure.code.value,
                error=failure.message,
                path=failure.path,
                elapsed_ms=took(),
            )
        return _failure(request_id, failure.message, error=failure.to_dict())

    async def handler(**kwargs: Any) -> dict[str, Any]:
        request_id = set_request_id()
        log.info("tool_start", tool=spec.name, **_extract_log_params(kwargs))
        try:
            return await invoke(request_id, kwargs, time.perf_counter())
        finally:
            clear_request_id()

    mcp.add_tool(
        FunctionTool(
            name=spec.name,
            description=spec.description,
            parameters=dereference_refs(spec.params_model.model_json_schema()),
            fn=handler,
        )
    )


def run_server(project_root: Path, config: ContextStampConfig | None = None) -> None:
    """Create and run the MCP server for a project."""
    from contextstamp.config.loader import load_config
    from contextstamp.core.logging import configure_logging
    from contextstamp.mcp.context import AppContext

    project_root = Path(project_root).resolve()
    config = config or load_config(project_root)
    configure_logging(config=config.logging)

    server = config.server
    log.info(
        "mcp_server_starting",
        project_root=str(project_root),
        transport=server.transport,
    )

    context = AppContext.create(project_root, config=config)
    mcp = create_mcp_server(context)

    log.info("mcp_server_running")
    if server.transport == "http":
        mcp.run(transport="http", host=server.host, port=server.port)
    else:
        mcp.run()
