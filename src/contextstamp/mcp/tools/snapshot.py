"""Snapshot tools: refresh_snapshot, list_bundles, read_bundle."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from pydantic import Field

from contextstamp.mcp.registry import registry
from contextstamp.mcp.tools.base import BaseParams

if TYPE_CHECKING:
    from contextstamp.mcp.context import AppContext


class RefreshSnapshotParams(BaseParams):
    project_path: str | None = Field(
        None, description="REQUIRED. Absolute path to the project root."
    )
    context_dir: str | None = Field(
        None,
        description="Directory holding context_main.json when it is not the project root.",
    )
    profile: Literal["llm-chat", "llm-safe", "ci-strict"] | None = Field(
        None, description="Analysis profile recorded on the snapshot."
    )
    mode: Literal["header", "full", "none"] | None = Field(
        None, description="Code inclusion mode recorded on the snapshot."
    )
    include_style: bool = Field(False, description="Whether style metadata was included.")
    depth: int | None = Field(
        None, description="Dependency traversal depth (positive integer, default 2)."
    )


class ListBundlesParams(BaseParams):
    snapshot_id: str | None = Field(None, description="Snapshot to list. Wins over projectPath.")
    project_path: str | None = Field(
        None, description="Project to read directly when no snapshotId is given."
    )
    folder_prefix: str | None = Field(
        None, description="Literal path prefix; 'src/' does not match 'srcTest'."
    )


class ReadBundleParams(BaseParams):
    bundle_path: str = Field(
        ...,
        description="Path relative to the context root, e.g. 'src/components/context.json' "
        "or 'context_main.json' for the index.",
    )
    snapshot_id: str | None = Field(None, description="Snapshot to read from.")
    project_path: str | None = Field(
        None, description="Project to read directly when no snapshotId is given."
    )
    root_component: str | None = Field(
        None, description="Component to return; defaults to the first bundle in the file."
    )


@registry.register("refresh_snapshot", RefreshSnapshotParams)
async def refresh_snapshot(ctx: AppContext, params: RefreshSnapshotParams) -> dict[str, Any]:
    """Register the project's context files as a new snapshot.

    Reads context_main.json from the project (or contextDir), pins it as the
    current snapshot and returns its id with the index summary and folders.
    Run 'stamp context' first; this tool does not generate context files.
    """
    result = await ctx.snapshot_ops.refresh(
        params.project_path,
        context_dir=params.context_dir,
        profile=params.profile,
        mode=params.mode,
        include_style=params.include_style,
        depth=params.depth,
    )
    summary = result["summary"]
    result["display_to_user"] = (
        f"{result['snapshotId']}: {summary['totalFolders']} folders, "
        f"{summary['totalBundles']} bundles"
    )
    return result


@registry.register("list_bundles", ListBundlesParams)
async def list_bundles(ctx: AppContext, params: ListBundlesParams) -> dict[str, Any]:
    """List bundle descriptors (component, folder, bundle path, hash, approx tokens).

    Use the returned bundlePath and rootComponent with read_bundle.
    """
    result = await ctx.snapshot_ops.list_bundles(
        snapshot_id=params.snapshot_id,
        project_path=params.project_path,
        folder_prefix=params.folder_prefix,
    )
    result["display_to_user"] = f"{result['totalBundles']} bundles"
    return result


@registry.register("read_bundle", ReadBundleParams)
async def read_bundle(ctx: AppContext, params: ReadBundleParams) -> dict[str, Any]:
    """Return one component's full bundle (contract and dependency graph).

    Pass the index file name as bundlePath to get the project index instead.
    """
    result = await ctx.snapshot_ops.read_bundle(
        bundle_path=params.bundle_path,
        snapshot_id=params.snapshot_id,
        project_path=params.project_path,
        root_component=params.root_component,
    )
    if "index" in result:
        result["display_to_user"] = f"index with {len(result['index'].get('folders', []))} folders"
    else:
        result["display_to_user"] = f"bundle {result['bundle'].get('entryId', '')}"
    return result
