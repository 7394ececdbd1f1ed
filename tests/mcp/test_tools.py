"""Tests for the MCP tool handlers, called directly with validated params."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from contextstamp.core.errors import NotFoundError
from contextstamp.mcp.context import AppContext
from contextstamp.mcp.tools.compare import (
    CompareSnapshotParams,
    LastCompareResultParams,
    compare_snapshot,
    describe,
    last_compare_result,
)
from contextstamp.mcp.tools.snapshot import (
    ListBundlesParams,
    ReadBundleParams,
    RefreshSnapshotParams,
    list_bundles,
    read_bundle,
    refresh_snapshot,
)
from contextstamp.snapshot.models import CompareResult, CompareSummary, TokenDelta


class TestParams:
    """Parameter models accept camelCase and reject unknown fields."""

    def test_camel_case_aliases(self) -> None:
        params = RefreshSnapshotParams.model_validate({"projectPath": "/p", "includeStyle": True})
        assert params.project_path == "/p"
        assert params.include_style is True

    def test_snake_case_accepted(self) -> None:
        params = ListBundlesParams(folder_prefix="src/")
        assert params.folder_prefix == "src/"

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ListBundlesParams.model_validate({"folder": "src"})

    def test_invalid_profile_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RefreshSnapshotParams.model_validate({"profile": "nope"})

    def test_bundle_path_required(self) -> None:
        with pytest.raises(ValidationError):
            ReadBundleParams.model_validate({})

    def test_baseline_defaults_to_disk(self) -> None:
        assert CompareSnapshotParams().baseline == "disk"


class TestSnapshotTools:
    @pytest.mark.asyncio
    async def test_refresh_then_list_then_read(self, app_context: AppContext, project: Path) -> None:
        # Given a refreshed snapshot
        refreshed = await refresh_snapshot(
            app_context, RefreshSnapshotParams(project_path=str(project))
        )
        snapshot_id = refreshed["snapshotId"]
        assert refreshed["display_to_user"] == f"{snapshot_id}: 2 folders, 3 bundles"

        # When listing its bundles
        listing = await list_bundles(app_context, ListBundlesParams(snapshot_id=snapshot_id))

        # Then each bundle can be read back by path and component
        assert listing["display_to_user"] == "3 bundles"
        entry = listing["bundles"][1]
        read = await read_bundle(
            app_context,
            ReadBundleParams(
                snapshot_id=snapshot_id,
                bundle_path=entry["bundlePath"],
                root_component=entry["rootComponent"],
            ),
        )
        assert read["bundle"]["bundleHash"] == entry["bundleHash"]
        assert read["display_to_user"] == "bundle src/components/Input.tsx"

    @pytest.mark.asyncio
    async def test_read_index(self, app_context: AppContext, project: Path) -> None:
        read = await read_bundle(
            app_context,
            ReadBundleParams(project_path=str(project), bundle_path="context_main.json"),
        )
        assert read["display_to_user"] == "index with 2 folders"

    @pytest.mark.asyncio
    async def test_core_errors_propagate(self, app_context: AppContext) -> None:
        with pytest.raises(NotFoundError):
            await list_bundles(app_context, ListBundlesParams(snapshot_id="snap_0_0"))


class TestCompareTools:
    @pytest.mark.asyncio
    async def test_last_result_empty(self, app_context: AppContext) -> None:
        out = await last_compare_result(app_context, LastCompareResultParams())
        assert out == {"result": None, "display_to_user": "no compare has run yet"}

    @pytest.mark.asyncio
    async def test_compare_error_is_result_not_exception(self, app_context: AppContext) -> None:
        out = await compare_snapshot(app_context, CompareSnapshotParams())

        assert out["status"] == "error"
        assert out["error"] == "No snapshot found. Run refresh_snapshot first to create a baseline."
        assert out["display_to_user"].startswith("error: No snapshot found")

    @pytest.mark.asyncio
    async def test_compare_stores_last_result(self, app_context: AppContext, project: Path) -> None:
        await refresh_snapshot(app_context, RefreshSnapshotParams(project_path=str(project)))

        out = await compare_snapshot(app_context, CompareSnapshotParams(project_path=str(project)))
        last = await last_compare_result(app_context, LastCompareResultParams())

        assert out["status"] == "pass"
        assert last["result"]["status"] == "pass"
        assert last["display_to_user"] == "pass: 2 folders unchanged"


class TestDescribe:
    def test_diff_line(self) -> None:
        summary = CompareSummary(
            total_folders=5,
            unchanged_folders=2,
            changed_folders=1,
            added_folders=1,
            removed_folders=1,
            token_delta=TokenDelta(gpt4o_mini=12, claude=-3),
        )
        result = CompareResult(baseline="disk", status="diff", summary=summary)
        assert describe(result) == (
            "diff: 1 changed, 1 added, 1 removed of 5 folders (tokens gpt4oMini +12, claude -3)"
        )

    def test_error_line(self) -> None:
        assert describe(CompareResult.failed("git:x", "nope")) == "error: nope"
