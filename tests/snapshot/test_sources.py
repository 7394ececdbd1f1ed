"""Tests for on-disk Index and Bundle loading."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from contextstamp.core.errors import CorruptDataError, ErrorCode, InvalidInputError, NotFoundError
from contextstamp.snapshot.sources import DiskDataset

BundleFactory = Callable[..., dict[str, Any]]
DatasetWriter = Callable[..., Path]


class TestLoadIndex:
    @pytest.mark.asyncio
    async def test_loads_valid_index(self, tmp_path: Path, dataset: DatasetWriter, bundle: BundleFactory) -> None:
        dataset(tmp_path, {"src/components": [bundle("Button")], "src/hooks": []})

        index = await DiskDataset(tmp_path).load_index()

        assert [f.path for f in index.folders] == ["src/components", "src/hooks"]

    @pytest.mark.asyncio
    async def test_missing_index_is_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await DiskDataset(tmp_path).load_index()
        assert exc_info.value.code == ErrorCode.INDEX_NOT_FOUND
        assert "context_main.json not found" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_invalid_json_is_corrupt(self, tmp_path: Path) -> None:
        (tmp_path / "context_main.json").write_text("{not json")
        with pytest.raises(CorruptDataError) as exc_info:
            await DiskDataset(tmp_path).load_index()
        assert exc_info.value.code == ErrorCode.CORRUPT_INDEX

    @pytest.mark.asyncio
    async def test_wrong_shape_is_corrupt(self, tmp_path: Path) -> None:
        (tmp_path / "context_main.json").write_text(json.dumps({"type": "Other"}))
        with pytest.raises(CorruptDataError) as exc_info:
            await DiskDataset(tmp_path).load_index()
        assert "type" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_typescript_source_is_corrupt(self, tmp_path: Path) -> None:
        (tmp_path / "context_main.json").write_text("import React from 'react';\n")
        with pytest.raises(CorruptDataError) as exc_info:
            await DiskDataset(tmp_path).load_index()
        assert "TypeScript" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_unreadable_index_is_corrupt_index(self, tmp_path: Path) -> None:
        (tmp_path / "context_main.json").mkdir()
        with pytest.raises(CorruptDataError) as exc_info:
            await DiskDataset(tmp_path).load_index()
        assert exc_info.value.code == ErrorCode.CORRUPT_INDEX

    @pytest.mark.asyncio
    async def test_custom_index_filename(self, tmp_path: Path, dataset: DatasetWriter) -> None:
        dataset(tmp_path, {})
        (tmp_path / "context_main.json").rename(tmp_path / "index.json")

        index = await DiskDataset(tmp_path, index_filename="index.json").load_index()

        assert index.folders == []


class TestLoadBundles:
    @pytest.mark.asyncio
    async def test_loads_bundle_array(self, tmp_path: Path, dataset: DatasetWriter, bundle: BundleFactory) -> None:
        dataset(tmp_path, {"src/components": [bundle("Button"), bundle("Input")]})

        bundles = await DiskDataset(tmp_path).load_bundles("src/components")

        assert [b.bundle_hash for b in bundles] == ["uifb:button", "uifb:input"]

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert await DiskDataset(tmp_path).load_bundles("src/nowhere") == []

    @pytest.mark.asyncio
    async def test_single_object_is_corrupt(self, tmp_path: Path, bundle: BundleFactory) -> None:
        path = tmp_path / "src" / "context.json"
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps(bundle("Button")))

        with pytest.raises(CorruptDataError) as exc_info:
            await DiskDataset(tmp_path).load_bundles("src")
        assert exc_info.value.code == ErrorCode.CORRUPT_BUNDLE

    @pytest.mark.asyncio
    async def test_invalid_json_is_corrupt(self, tmp_path: Path) -> None:
        path = tmp_path / "src" / "context.json"
        path.parent.mkdir(parents=True)
        path.write_text("[{")

        with pytest.raises(CorruptDataError):
            await DiskDataset(tmp_path).load_bundles("src")

    @pytest.mark.asyncio
    async def test_unreadable_file_is_corrupt_bundle(self, tmp_path: Path) -> None:
        (tmp_path / "src" / "context.json").mkdir(parents=True)

        with pytest.raises(CorruptDataError) as exc_info:
            await DiskDataset(tmp_path).load_bundles("src")
        assert exc_info.value.code == ErrorCode.CORRUPT_BUNDLE


class TestExplicitPaths:
    def test_bundle_rel_path(self, tmp_path: Path) -> None:
        ds = DiskDataset(tmp_path)
        assert ds.bundle_rel_path("src/components") == "src/components/context.json"
        assert ds.bundle_rel_path(".") == "context.json"
        assert ds.bundle_rel_path("") == "context.json"

    def test_is_index_path(self, tmp_path: Path) -> None:
        ds = DiskDataset(tmp_path)
        assert ds.is_index_path("context_main.json")
        assert ds.is_index_path("nested/context_main.json")
        assert not ds.is_index_path("src/context.json")
        assert not ds.is_index_path("my_context_main.json")

    def test_resolve_rejects_escape(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidInputError) as exc_info:
            DiskDataset(tmp_path / "ctx").resolve("../outside.json")
        assert exc_info.value.details["field"] == "bundlePath"

    @pytest.mark.asyncio
    async def test_read_bundle_file_missing_is_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await DiskDataset(tmp_path).read_bundle_file("src/context.json")
        assert exc_info.value.code == ErrorCode.BUNDLE_NOT_FOUND

    @pytest.mark.asyncio
    async def test_read_index_file(self, tmp_path: Path, dataset: DatasetWriter, bundle: BundleFactory) -> None:
        dataset(tmp_path, {"src": [bundle("App")]})
        index = await DiskDataset(tmp_path).read_index_file("context_main.json")
        assert index.summary.total_bundles == 1
