"""Compare tools: compare_snapshot, last_compare_result."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import Field

from contextstamp.mcp.registry import registry
from contextstamp.mcp.tools.base import BaseParams
from contextstamp.snapshot.models import CompareResult

if TYPE_CHECKING:
    from contextstamp.mcp.context import AppContext


class CompareSnapshotParams(BaseParams):
    project_path: str | None = Field(
        None, description="Project whose current context files are compared. Defaults to the server root."
    )
    baseline: str = Field(
        "disk",
        description="'disk' or 'snapshot' (current snapshot), a snapshot id, or a directory "
        "path. 'git:<ref>' is not supported.",
    )


class LastCompareResultParams(BaseParams):
    pass


def describe(result: CompareResult) -> str:
    """One-line human summary of a compare result."""
    if result.status == "error":
        return f"error: {result.error}"
    s = result.summary
    if result.status == "pass":
        return f"pass: {s.total_folders} folders unchanged"
    return (
        f"diff: {s.changed_folders} changed, {s.added_folders} added, "
        f"{s.removed_folders} removed of {s.total_folders} folders "
        f"(tokens gpt4oMini {s.token_delta.gpt4o_mini:+d}, claude {s.token_delta.claude:+d})"
    )


@registry.register("compare_snapshot", CompareSnapshotParams)
async def compare_snapshot(ctx: AppContext, params: CompareSnapshotParams) -> dict[str, Any]:
    """Detect drift by comparing the current context files against a baseline.

    Reports folder, bundle and contract-level changes. Failures come back as
    status 'error' with a message, never as a tool error.
    """
    result = await ctx.snapshot_ops.compare(
        project_path=params.project_path,
        baseline=params.baseline,
    )
    out = result.to_dict()
    out["display_to_user"] = describe(result)
    return out


@registry.register("last_compare_result", LastCompareResultParams)
async def last_compare_result(ctx: AppContext, params: LastCompareResultParams) -> dict[str, Any]:  # noqa: ARG001
    """Return the most recent compare_snapshot result, if any."""
    result = ctx.snapshot_ops.last_compare_result()
    if result is None:
        return {"result": None, "display_to_user": "no compare has run yet"}
    return {"result": result.to_dict(), "display_to_user": describe(result)}
