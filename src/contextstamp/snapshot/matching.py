"""Bundle identity and matching.

A bundle's identity across two snapshots is the component name derived from
its root node's entry id. Matching is a two-tier strategy behind the
``BundleMatcher`` protocol:

- declared counts differ: match purely by component name
- declared counts equal: exact ``bundleHash`` first, then name fallback

A matcher only pairs bundles; turning pairs into changes is the
reconciler's job.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from contextstamp.config.constants import COMPONENT_EXTENSIONS
from contextstamp.snapshot.schema import FolderMetadata, LogicStampBundle

_PATH_SEPARATORS = re.compile(r"[/\\]")
_SOURCE_EXTENSION = re.compile("(?:" + "|".join(map(re.escape, COMPONENT_EXTENSIONS)) + ")$")


def component_name_from_entry_id(entry_id: str) -> str:
    """Last path segment (split on / and \\) without a .ts/.tsx/.js/.jsx suffix."""
    file_name = _PATH_SEPARATORS.split(entry_id)[-1]
    return _SOURCE_EXTENSION.sub("", file_name)


def component_name(bundle: LogicStampBundle) -> str:
    """Component name of a bundle's root node, falling back to the bundle entry id."""
    return component_name_from_entry_id(bundle.root_entry_id)


def filter_by_prefix(
    folders: Iterable[FolderMetadata], prefix: str | None
) -> list[FolderMetadata]:
    """Keep folders whose path starts with ``prefix`` as a literal string.

    Not path-segment aware: ``src/`` excludes ``srcTest``.
    """
    if not prefix:
        return list(folders)
    return [folder for folder in folders if folder.path.startswith(prefix)]


@dataclass(frozen=True, slots=True)
class BundlePair:
    """One correspondence produced by a matcher.

    Exactly one side is None for an addition or removal; both sides are set
    when the two bundles represent the same component.
    """

    name: str
    baseline: LogicStampBundle | None
    current: LogicStampBundle | None

    @property
    def is_added(self) -> bool:
        return self.baseline is None

    @property
    def is_removed(self) -> bool:
        return self.current is None


class BundleMatcher(Protocol):
    """Pairs the bundles of one folder across baseline and current."""

    def match(
        self,
        baseline: list[LogicStampBundle],
        current: list[LogicStampBundle],
        *,
        counts_differ: bool,
    ) -> list[BundlePair]: ...


class TieredBundleMatcher:
    """Default matcher: name-only when counts differ, hash then name otherwise."""

    def match(
        self,
        baseline: list[LogicStampBundle],
        current: list[LogicStampBundle],
        *,
        counts_differ: bool,
    ) -> list[BundlePair]:
        if counts_differ:
            return self._match_by_name(baseline, current)
        return self._match_by_hash(baseline, current)

    def _match_by_name(
        self,
        baseline: list[LogicStampBundle],
        current: list[LogicStampBundle],
    ) -> list[BundlePair]:
        # Last bundle with a given name wins
        baseline_by_name = {component_name(b): b for b in baseline}
        current_by_name = {component_name(b): b for b in current}

        pairs: list[BundlePair] = []
        for name, bundle in current_by_name.items():
            if name not in baseline_by_name:
                pairs.append(BundlePair(name, None, bundle))
        for name, bundle in baseline_by_name.items():
            if name not in current_by_name:
                pairs.append(BundlePair(name, bundle, None))
        for name, bundle in baseline_by_name.items():
            if name in current_by_name:
                pairs.append(BundlePair(name, bundle, current_by_name[name]))
        return pairs

    def _match_by_hash(
        self,
        baseline: list[LogicStampBundle],
        current: list[LogicStampBundle],
    ) -> list[BundlePair]:
        baseline_by_hash = {b.bundle_hash: b for b in baseline}
        current_by_hash = {b.bundle_hash: b for b in current}

        pairs: list[BundlePair] = []
        for bundle_hash, bundle in baseline_by_hash.items():
            if bundle_hash in current_by_hash:
                continue
            name = component_name(bundle)
            counterpart = _first_named(current, name)
            pairs.append(BundlePair(name, bundle, counterpart))

        for bundle_hash, bundle in current_by_hash.items():
            if bundle_hash in baseline_by_hash:
                continue
            name = component_name(bundle)
            if _first_named(baseline, name) is None:
                pairs.append(BundlePair(name, None, bundle))
        return pairs


def _first_named(bundles: list[LogicStampBundle], name: str) -> LogicStampBundle | None:
    return next((b for b in bundles if component_name(b) == name), None)
