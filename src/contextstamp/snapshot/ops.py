"""Snapshot operations used by the MCP tools and the CLI.

Wires the registry, the disk sources and the diff engine together:
- refresh: register the context files of a project as a snapshot
- list_bundles / read_bundle: browse a snapshot or a project directly
- compare: diff a baseline against the project's current context files
"""

from __future__ import annotations

import asyncio
import shutil
import tempfile
import time
from pathlib import Path
from typing import Any

from contextstamp.config.models import ContextStampConfig
from contextstamp.core.errors import (
    CorruptDataError,
    InvalidInputError,
    NotFoundError,
    UnsupportedError,
)
from contextstamp.core.logging import get_logger
from contextstamp.snapshot.engine import compare_indexes, error_message
from contextstamp.snapshot.matching import BundleMatcher, component_name, filter_by_prefix
from contextstamp.snapshot.models import CompareResult, Snapshot
from contextstamp.snapshot.registry import SnapshotRegistry, is_snapshot_id
from contextstamp.snapshot.schema import LogicStampIndex, to_wire
from contextstamp.snapshot.sources import DiskDataset
from contextstamp.snapshot.tokens import TokenHeuristics

log = get_logger(__name__)

CURRENT_BASELINES = ("disk", "snapshot")
GIT_BASELINE_PREFIX = "git:"
PIN_DIR_PREFIX = "snap-"

_ZERO_TOKEN_ESTIMATES = {
    "gpt4oMini": 0,
    "gpt4oMiniFullCode": 0,
    "claude": 0,
    "claudeFullCode": 0,
}


def _pin_files(source: DiskDataset, index: LogicStampIndex, target: Path) -> None:
    """Copy the Index and every listed folder's Bundle file under ``target``."""
    target.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source.index_path, target / source.index_filename)
    for folder in index.folders:
        src = source.bundle_path(folder.path)
        if not src.is_file():
            continue
        dest = target / folder.path / source.bundle_filename
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dest)


def _index_summary(index: LogicStampIndex) -> dict[str, Any]:
    summary = index.summary
    estimates = dict(_ZERO_TOKEN_ESTIMATES)
    if summary.token_estimates is not None:
        estimates.update(to_wire(summary.token_estimates))
    return {
        "totalComponents": summary.total_components,
        "totalBundles": summary.total_bundles,
        "totalFolders": summary.total_folders,
        "totalTokenEstimate": summary.total_token_estimate,
        "tokenEstimates": estimates,
        "missingDependencies": list(summary.missing_dependencies or []),
    }


class SnapshotOps:
    """Snapshot lifecycle, browsing and comparison for one server."""

    def __init__(
        self,
        registry: SnapshotRegistry,
        config: ContextStampConfig,
        project_root: Path,
        matcher: BundleMatcher | None = None,
    ) -> None:
        self.registry = registry
        self.config = config
        self.project_root = Path(project_root)
        self.matcher = matcher
        self.heuristics = TokenHeuristics.from_config(config.tokens)
        self.prune_store()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def dataset(self, root: Path) -> DiskDataset:
        return DiskDataset(
            root,
            index_filename=self.config.snapshots.index_filename,
            bundle_filename=self.config.snapshots.bundle_filename,
        )

    def _resolve_path(self, value: str | Path) -> Path:
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = self.project_root / path
        return path.resolve()

    def _store_dir(self, project_path: Path) -> Path:
        if self.config.snapshots.store_dir:
            return Path(self.config.snapshots.store_dir).expanduser()
        return project_path / ".contextstamp" / "snapshots"

    def _is_pinned(self, snapshot: Snapshot) -> bool:
        return snapshot.context_dir.name.startswith(PIN_DIR_PREFIX) and (
            snapshot.context_dir.parent == self._store_dir(snapshot.project_path)
        )

    def _discard(self, snapshots: list[Snapshot]) -> None:
        for snapshot in snapshots:
            if self._is_pinned(snapshot):
                shutil.rmtree(snapshot.context_dir, ignore_errors=True)
                log.debug("snapshot_files_removed", snapshot_id=snapshot.id)

    def expire(self) -> list[str]:
        """Drop snapshots past the configured TTL and their pinned files."""
        before = {s.id: s for s in self.registry.all()}
        expired = self.registry.expire(int(self.config.snapshots.ttl_sec * 1000))
        self._discard([before[sid] for sid in expired if sid in before])
        self.prune_store()
        return expired

    def prune_store(self, project_path: Path | None = None) -> list[Path]:
        """Remove pinned copies older than the TTL that no live snapshot uses.

        Picks up copies left behind by earlier server processes.
        """
        store = self._store_dir(project_path or self.project_root)
        if not store.is_dir():
            return []
        live = {s.context_dir.resolve() for s in self.registry.all()}
        cutoff = time.time() - self.config.snapshots.ttl_sec
        removed: list[Path] = []
        for entry in store.glob(f"{PIN_DIR_PREFIX}*"):
            if not entry.is_dir() or entry.resolve() in live:
                continue
            if entry.stat().st_mtime < cutoff:
                shutil.rmtree(entry, ignore_errors=True)
                removed.append(entry)
        if removed:
            log.info("stale_pins_removed", store=str(store), count=len(removed))
        return removed

    def reset(self) -> None:
        snapshots = self.registry.all()
        self.registry.reset()
        self._discard(snapshots)

    def _source_root(self, snapshot_id: str | None, project_path: str | None) -> Path:
        """Context dir of a snapshot if given, else the project path."""
        if snapshot_id:
            self.expire()
            return self.registry.require(snapshot_id).context_dir
        if project_path:
            return self._resolve_path(project_path)
        raise InvalidInputError.missing(
            "projectPath",
            "Provide snapshotId or projectPath so the context files can be located.",
        )

    def resolve_baseline(self, baseline: str) -> Path:
        """Directory holding the baseline dataset.

        ``disk``/``snapshot`` mean the current snapshot; ``git:<ref>`` is not
        supported; a registered snapshot id selects that snapshot, and an
        unknown or expired one is SNAPSHOT_NOT_FOUND; anything else is a
        directory path.
        """
        self.expire()
        if baseline in CURRENT_BASELINES:
            snapshot = self.registry.current()
            if snapshot is None:
                raise NotFoundError.no_snapshot()
            return snapshot.context_dir
        if baseline.startswith(GIT_BASELINE_PREFIX):
            raise UnsupportedError.baseline(baseline)
        snapshot = self.registry.get(baseline)
        if snapshot is not None:
            return snapshot.context_dir
        if is_snapshot_id(baseline):
            raise NotFoundError.snapshot(baseline)
        return self._resolve_path(baseline)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def refresh(
        self,
        project_path: str | None,
        *,
        context_dir: str | None = None,
        profile: str | None = None,
        mode: str | None = None,
        include_style: bool = False,
        depth: int | None = None,
    ) -> dict[str, Any]:
        """Register the project's existing context files as the current snapshot."""
        defaults = self.config.defaults
        depth = defaults.depth if depth is None else depth
        if isinstance(depth, bool) or not isinstance(depth, int) or depth < 1:
            raise InvalidInputError.invalid(
                "depth",
                depth,
                "Depth must be a positive integer (1 or higher). depth=1 includes only "
                "direct dependencies, depth=2 also includes nested components.",
            )
        if not project_path:
            raise InvalidInputError.missing(
                "projectPath",
                "The MCP client must provide the absolute path to the project root.",
            )

        project = self._resolve_path(project_path)
        source = self.dataset(self._resolve_path(context_dir) if context_dir else project)
        index = await source.load_index()

        snapshot_dir = source.root
        if self.config.snapshots.pin:
            store = self._store_dir(project)
            store.mkdir(parents=True, exist_ok=True)
            self.prune_store(project)
            snapshot_dir = Path(tempfile.mkdtemp(prefix=PIN_DIR_PREFIX, dir=store))
            loop = asyncio.get_running_loop()
            try:
                await loop.run_in_executor(None, _pin_files, source, index, snapshot_dir)
            except BaseException:
                shutil.rmtree(snapshot_dir, ignore_errors=True)
                raise

        snapshot_id = self.registry.create(
            snapshot_dir,
            project_path=project,
            profile=profile or defaults.profile,
            mode=mode or defaults.mode,
            include_style=include_style,
            depth=depth,
        )
        snapshot = self.registry.require(snapshot_id)
        return {
            "snapshotId": snapshot_id,
            "projectPath": str(project),
            "contextDir": str(snapshot.context_dir),
            "profile": snapshot.profile,
            "mode": snapshot.mode,
            "includeStyle": snapshot.include_style,
            "depth": snapshot.depth,
            "summary": _index_summary(index),
            "folders": [to_wire(folder) for folder in index.folders],
        }

    async def list_bundles(
        self,
        *,
        snapshot_id: str | None = None,
        project_path: str | None = None,
        folder_prefix: str | None = None,
    ) -> dict[str, Any]:
        """Describe every bundle of the selected dataset, optionally by folder prefix."""
        dataset = self.dataset(self._source_root(snapshot_id, project_path))
        index = await dataset.load_index()

        bundles: list[dict[str, Any]] = []
        for folder in filter_by_prefix(index.folders, folder_prefix):
            try:
                folder_bundles = await dataset.load_bundles(folder.path)
            except CorruptDataError as e:
                log.warning("folder_bundles_skipped", folder=folder.path, error=error_message(e))
                continue
            for bundle in folder_bundles:
                root = bundle.root_node
                if root is None:
                    continue
                name = component_name(bundle)
                contract = root.contract
                bundles.append(
                    {
                        "id": f"bundle_{name}",
                        "rootComponent": name,
                        "filePath": (contract.entry_path_rel if contract else None)
                        or root.entry_id,
                        "folder": folder.path,
                        "bundlePath": dataset.bundle_rel_path(folder.path),
                        "position": bundle.position,
                        "bundleHash": bundle.bundle_hash,
                        "approxTokens": self.heuristics.estimate(bundle),
                    }
                )

        result: dict[str, Any] = {
            "projectPath": str(self._project_of(snapshot_id, dataset.root)),
            "totalBundles": len(bundles),
            "bundles": bundles,
        }
        if snapshot_id:
            result["snapshotId"] = snapshot_id
        return result

    async def read_bundle(
        self,
        *,
        bundle_path: str,
        snapshot_id: str | None = None,
        project_path: str | None = None,
        root_component: str | None = None,
    ) -> dict[str, Any]:
        """Full Index, or one component's Bundle (the first one if none is named)."""
        dataset = self.dataset(self._source_root(snapshot_id, project_path))
        result: dict[str, Any] = {
            "projectPath": str(self._project_of(snapshot_id, dataset.root)),
            "bundlePath": bundle_path,
        }
        if snapshot_id:
            result["snapshotId"] = snapshot_id

        if dataset.is_index_path(bundle_path):
            index = await dataset.read_index_file(bundle_path)
            result["index"] = to_wire(index)
            return result

        bundles = await dataset.read_bundle_file(bundle_path)
        if root_component:
            target = next(
                (b for b in bundles if b.root_node and component_name(b) == root_component),
                None,
            )
            if target is None:
                raise NotFoundError.bundle(bundle_path, root_component)
            result["rootComponent"] = root_component
        else:
            if not bundles:
                raise NotFoundError.bundle(bundle_path)
            target = bundles[0]

        result["bundle"] = to_wire(target)
        return result

    async def compare(
        self,
        *,
        project_path: str | None = None,
        baseline: str = "disk",
    ) -> CompareResult:
        """Diff a baseline against the current context files. Never raises.

        Every result, including error results, becomes the registry's last
        compare result.
        """
        try:
            current_root = self._resolve_path(project_path) if project_path else self.project_root
            baseline_set = self.dataset(self.resolve_baseline(baseline))
            current_set = self.dataset(current_root)
            baseline_index = await baseline_set.load_index()
            current_index = await current_set.load_index()
            result = await compare_indexes(
                baseline_index,
                current_index,
                baseline_set,
                current_set,
                baseline=baseline,
                matcher=self.matcher,
                heuristics=self.heuristics,
            )
        except Exception as e:
            log.warning("compare_failed", baseline=baseline, error=error_message(e))
            result = CompareResult.failed(baseline, error_message(e))

        self.registry.set_last_compare_result(result)
        return result

    def last_compare_result(self) -> CompareResult | None:
        return self.registry.last_compare_result()

    def _project_of(self, snapshot_id: str | None, root: Path) -> Path:
        if snapshot_id:
            snapshot = self.registry.get(snapshot_id)
            if snapshot is not None:
                return snapshot.project_path
        return root
