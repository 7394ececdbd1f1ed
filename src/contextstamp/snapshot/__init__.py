"""Snapshot registry and diff engine for Index/Bundle context datasets."""

from contextstamp.snapshot.engine import compare, compare_indexes
from contextstamp.snapshot.matching import (
    BundleMatcher,
    BundlePair,
    TieredBundleMatcher,
    component_name,
    component_name_from_entry_id,
    filter_by_prefix,
)
from contextstamp.snapshot.models import (
    ChangeDetails,
    CompareResult,
    CompareSummary,
    ComponentChange,
    FolderDiff,
    Snapshot,
    TokenDelta,
)
from contextstamp.snapshot.ops import SnapshotOps
from contextstamp.snapshot.registry import SnapshotRegistry
from contextstamp.snapshot.sources import BundleLoader, DiskDataset
from contextstamp.snapshot.tokens import TokenHeuristics, estimate_tokens

__all__ = [
    # Engine
    "compare",
    "compare_indexes",
    # Matching
    "BundleMatcher",
    "BundlePair",
    "TieredBundleMatcher",
    "component_name",
    "component_name_from_entry_id",
    "filter_by_prefix",
    # Models
    "ChangeDetails",
    "CompareResult",
    "CompareSummary",
    "ComponentChange",
    "FolderDiff",
    "Snapshot",
    "TokenDelta",
    # Services
    "BundleLoader",
    "DiskDataset",
    "SnapshotOps",
    "SnapshotRegistry",
    "TokenHeuristics",
    "estimate_tokens",
]
