"""Snapshot diff engine.

Compares two Index datasets folder by folder and aggregates a
``CompareResult``. No registry or disk knowledge: bundles are pulled through
the loaders handed in by the caller.

- ``compare_indexes`` raises on any failure
- ``compare`` never raises; failures become ``status="error"`` results
"""

from __future__ import annotations

from contextstamp.core.errors import ContextStampError
from contextstamp.core.logging import get_logger
from contextstamp.snapshot.matching import BundleMatcher
from contextstamp.snapshot.models import CompareResult, CompareSummary, FolderDiff, TokenDelta
from contextstamp.snapshot.reconcile import FolderReconciler
from contextstamp.snapshot.schema import LogicStampIndex
from contextstamp.snapshot.sources import BundleLoader
from contextstamp.snapshot.tokens import TokenHeuristics

log = get_logger(__name__)


def error_message(e: Exception) -> str:
    """Human-readable message of a failure, without the error code prefix."""
    if isinstance(e, ContextStampError):
        return e.message
    return str(e)


def _folder_union(baseline: LogicStampIndex, current: LogicStampIndex) -> list[str]:
    """All folder paths: baseline order first, then paths only in current."""
    paths = dict.fromkeys(folder.path for folder in baseline.folders)
    paths.update(dict.fromkeys(folder.path for folder in current.folders))
    return list(paths)


def compute_token_delta(
    baseline: LogicStampIndex,
    current: LogicStampIndex,
    folder_diffs: list[FolderDiff],
    heuristics: TokenHeuristics,
) -> TokenDelta:
    """Aggregate token delta per cost model.

    Uses the Index summaries' own estimates when both carry them; otherwise
    sums weighted per-change deltas, which is only an approximation.
    """
    baseline_tokens = baseline.summary.token_estimates
    current_tokens = current.summary.token_estimates
    if baseline_tokens is not None and current_tokens is not None:
        return TokenDelta(
            gpt4o_mini=round(current_tokens.gpt4o_mini - baseline_tokens.gpt4o_mini),
            claude=round(current_tokens.claude - baseline_tokens.claude),
        )

    totals: dict[str, int] = {}
    for diff in folder_diffs:
        for change in diff.changes:
            if not change.token_delta:
                continue
            for model, share in heuristics.split(change.token_delta).items():
                totals[model] = totals.get(model, 0) + share
    return TokenDelta(gpt4o_mini=totals.get("gpt4oMini", 0), claude=totals.get("claude", 0))


async def compare_indexes(
    baseline_index: LogicStampIndex,
    current_index: LogicStampIndex,
    baseline_loader: BundleLoader,
    current_loader: BundleLoader,
    *,
    baseline: str = "disk",
    matcher: BundleMatcher | None = None,
    heuristics: TokenHeuristics | None = None,
) -> CompareResult:
    """Diff two datasets. Raises on unreadable or corrupt bundle files."""
    heuristics = heuristics or TokenHeuristics()
    reconciler = FolderReconciler(matcher=matcher, heuristics=heuristics)

    baseline_folders = baseline_index.folder_map()
    current_folders = current_index.folder_map()
    paths = _folder_union(baseline_index, current_index)

    summary = CompareSummary(total_folders=len(paths))
    folder_diffs: list[FolderDiff] = []

    for path in paths:
        base_folder = baseline_folders.get(path)
        cur_folder = current_folders.get(path)

        if base_folder is None:
            diff = await reconciler.added_folder(path, current_loader)
            summary.added_folders += 1
        elif cur_folder is None:
            diff = await reconciler.removed_folder(path, baseline_loader)
            summary.removed_folders += 1
        else:
            diff = await reconciler.reconcile(
                base_folder, cur_folder, baseline_loader, current_loader
            )
            if diff.status == "unchanged":
                summary.unchanged_folders += 1
                continue
            summary.changed_folders += 1

        folder_diffs.append(diff)

    summary.token_delta = compute_token_delta(
        baseline_index, current_index, folder_diffs, heuristics
    )
    status = "diff" if folder_diffs else "pass"

    log.info(
        "compare_complete",
        baseline=baseline,
        status=status,
        total_folders=summary.total_folders,
        changed=summary.changed_folders,
        added=summary.added_folders,
        removed=summary.removed_folders,
    )
    return CompareResult(
        baseline=baseline,
        status=status,
        summary=summary,
        folder_diffs=folder_diffs,
    )


async def compare(
    baseline_index: LogicStampIndex,
    current_index: LogicStampIndex,
    baseline_loader: BundleLoader,
    current_loader: BundleLoader,
    *,
    baseline: str = "disk",
    matcher: BundleMatcher | None = None,
    heuristics: TokenHeuristics | None = None,
) -> CompareResult:
    """Like ``compare_indexes`` but reports failures as an error result."""
    try:
        return await compare_indexes(
            baseline_index,
            current_index,
            baseline_loader,
            current_loader,
            baseline=baseline,
            matcher=matcher,
            heuristics=heuristics,
        )
    except Exception as e:
        log.warning("compare_failed", baseline=baseline, error=str(e))
        return CompareResult.failed(baseline, error_message(e))
