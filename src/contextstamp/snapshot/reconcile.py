"""Folder reconciler: turns one folder's bundle pairs into changes."""

from __future__ import annotations

import asyncio

from contextstamp.core.logging import get_logger
from contextstamp.snapshot.differ import compare_bundles
from contextstamp.snapshot.matching import BundleMatcher, BundlePair, TieredBundleMatcher, component_name
from contextstamp.snapshot.models import ComponentChange, FolderDiff
from contextstamp.snapshot.schema import FolderMetadata, LogicStampBundle
from contextstamp.snapshot.sources import BundleLoader
from contextstamp.snapshot.tokens import TokenHeuristics

log = get_logger(__name__)


class FolderReconciler:
    """Compares the bundles of one folder across baseline and current.

    The matcher decides which bundles correspond; the reconciler only
    classifies each correspondence.
    """

    def __init__(
        self,
        matcher: BundleMatcher | None = None,
        heuristics: TokenHeuristics | None = None,
    ) -> None:
        self.matcher = matcher or TieredBundleMatcher()
        self.heuristics = heuristics or TokenHeuristics()

    def added(self, bundle: LogicStampBundle, name: str | None = None) -> ComponentChange:
        contract = bundle.root_contract
        return ComponentChange(
            root_component=name or component_name(bundle),
            type="bundle_added",
            semantic_hash_after=contract.semantic_hash if contract else None,
            token_delta=self.heuristics.estimate(bundle),
        )

    def removed(self, bundle: LogicStampBundle, name: str | None = None) -> ComponentChange:
        contract = bundle.root_contract
        return ComponentChange(
            root_component=name or component_name(bundle),
            type="bundle_removed",
            semantic_hash_before=contract.semantic_hash if contract else None,
            token_delta=-self.heuristics.estimate(bundle),
        )

    def _classify(self, pair: BundlePair) -> ComponentChange | None:
        if pair.baseline is None and pair.current is not None:
            return self.added(pair.current, pair.name)
        if pair.current is None and pair.baseline is not None:
            return self.removed(pair.baseline, pair.name)
        if pair.baseline is not None and pair.current is not None:
            return compare_bundles(pair.baseline, pair.current, pair.name, self.heuristics)
        return None

    async def added_folder(self, path: str, loader: BundleLoader) -> FolderDiff:
        bundles = await loader.load_bundles(path)
        return FolderDiff(path=path, status="added", changes=[self.added(b) for b in bundles])

    async def removed_folder(self, path: str, loader: BundleLoader) -> FolderDiff:
        bundles = await loader.load_bundles(path)
        return FolderDiff(path=path, status="removed", changes=[self.removed(b) for b in bundles])

    async def reconcile(
        self,
        baseline_folder: FolderMetadata,
        current_folder: FolderMetadata,
        baseline_loader: BundleLoader,
        current_loader: BundleLoader,
    ) -> FolderDiff:
        """Diff a folder present on both sides."""
        path = current_folder.path
        loaded = await asyncio.gather(
            baseline_loader.load_bundles(path),
            current_loader.load_bundles(path),
            return_exceptions=True,
        )
        for outcome in loaded:
            if isinstance(outcome, BaseException):
                raise outcome
        baseline_bundles, current_bundles = loaded
        counts_differ = baseline_folder.bundles != current_folder.bundles
        pairs = self.matcher.match(baseline_bundles, current_bundles, counts_differ=counts_differ)

        changes: list[ComponentChange] = []
        for pair in pairs:
            change = self._classify(pair)
            if change is not None:
                changes.append(change)

        log.debug(
            "folder_reconciled",
            path=path,
            counts_differ=counts_differ,
            pairs=len(pairs),
            changes=len(changes),
        )
        return FolderDiff(path=path, status="changed" if changes else "unchanged", changes=changes)
