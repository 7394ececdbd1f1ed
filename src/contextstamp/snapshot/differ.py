"""Contract differ: compares two bundles known to be the same component.

Decision order:
1. Either root contract missing: no change
2. semanticHash differs: ``uif_contract_changed`` with field details
3. semanticHash equal, bundleHash differs: ``hash_changed``
4. Otherwise no change

Field details cover ``version`` (functions, imports), ``exports`` (named
plus default) and ``logicSignature.props`` (key set only; a prop whose type
changed under the same key shows up only in ``modifiedFields``).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel

from contextstamp.snapshot.models import ChangeDetails, ComponentChange
from contextstamp.snapshot.schema import LogicStampBundle, UIFContract, to_wire
from contextstamp.snapshot.tokens import TokenHeuristics


def set_diff(before: Iterable[str], after: Iterable[str]) -> tuple[list[str], list[str]]:
    """Return (added, removed), each deduplicated in first-seen order."""
    before_set = dict.fromkeys(before)
    after_set = dict.fromkeys(after)
    added = [name for name in after_set if name not in before_set]
    removed = [name for name in before_set if name not in after_set]
    return added, removed


def _wire_equal(a: BaseModel | None, b: BaseModel | None) -> bool:
    def dump(m: BaseModel | None) -> Any:
        return None if m is None else to_wire(m)

    return dump(a) == dump(b)


def compare_contracts(
    baseline: UIFContract,
    current: UIFContract,
    name: str,
) -> ComponentChange:
    """Full field diff of two contracts whose semantic hashes differ."""
    details = ChangeDetails()

    if not _wire_equal(baseline.version, current.version):
        details.modified_fields.append("version")
        details.added_functions, details.removed_functions = set_diff(
            baseline.version.functions or [], current.version.functions or []
        )
        details.added_imports, details.removed_imports = set_diff(
            baseline.version.imports or [], current.version.imports or []
        )

    if not _wire_equal(baseline.exports, current.exports):
        details.modified_fields.append("exports")
        before = baseline.exports.names() if baseline.exports else []
        after = current.exports.names() if current.exports else []
        added, removed = set_diff(before, after)
        details.modified_exports = added + removed

    baseline_props = baseline.logic_signature.props
    current_props = current.logic_signature.props
    if to_wire(baseline.logic_signature).get("props") != to_wire(current.logic_signature).get(
        "props"
    ):
        details.modified_fields.append("logicSignature.props")
        details.added_props, details.removed_props = set_diff(baseline_props, current_props)

    return ComponentChange(
        root_component=name,
        type="uif_contract_changed",
        semantic_hash_before=baseline.semantic_hash,
        semantic_hash_after=current.semantic_hash,
        details=None if details.is_empty() else details,
    )


def compare_bundles(
    baseline: LogicStampBundle,
    current: LogicStampBundle,
    name: str,
    heuristics: TokenHeuristics | None = None,
) -> ComponentChange | None:
    """Classify the change between two versions of one component, if any."""
    baseline_contract = baseline.root_contract
    current_contract = current.root_contract
    if baseline_contract is None or current_contract is None:
        return None

    if baseline_contract.semantic_hash != current_contract.semantic_hash:
        return compare_contracts(baseline_contract, current_contract, name)

    if baseline.bundle_hash != current.bundle_hash:
        heuristics = heuristics or TokenHeuristics()
        return ComponentChange(
            root_component=name,
            type="hash_changed",
            semantic_hash_before=baseline_contract.semantic_hash,
            semantic_hash_after=current_contract.semantic_hash,
            token_delta=heuristics.estimate(current) - heuristics.estimate(baseline),
        )

    return None
