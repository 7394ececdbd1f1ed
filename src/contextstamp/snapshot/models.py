"""Data models for snapshots and compare results.

All models are plain dataclasses. ``to_dict`` produces the camelCase wire
form returned by tools and the CLI; unset optional values and empty detail
lists are dropped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Literal

ChangeType = Literal["bundle_added", "bundle_removed", "hash_changed", "uif_contract_changed"]
FolderStatus = Literal["added", "removed", "changed", "unchanged"]
CompareStatus = Literal["pass", "diff", "error"]


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Registered context dataset. Never mutated after creation."""

    id: str
    created_at: float  # epoch seconds
    context_dir: Path
    project_path: Path
    profile: str = "llm-chat"
    mode: str = "header"
    include_style: bool = False
    depth: int = 2

    @property
    def created_at_iso(self) -> str:
        return datetime.fromtimestamp(self.created_at, tz=UTC).isoformat()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "createdAt": self.created_at_iso,
            "projectPath": str(self.project_path),
            "contextDir": str(self.context_dir),
            "profile": self.profile,
            "mode": self.mode,
            "includeStyle": self.include_style,
            "depth": self.depth,
        }


@dataclass
class ChangeDetails:
    """Field-level detail of a ``uif_contract_changed`` change."""

    modified_fields: list[str] = field(default_factory=list)
    added_props: list[str] = field(default_factory=list)
    removed_props: list[str] = field(default_factory=list)
    added_functions: list[str] = field(default_factory=list)
    removed_functions: list[str] = field(default_factory=list)
    added_imports: list[str] = field(default_factory=list)
    removed_imports: list[str] = field(default_factory=list)
    modified_exports: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not any(self.to_dict().values())

    def to_dict(self) -> dict[str, list[str]]:
        raw = {
            "modifiedFields": self.modified_fields,
            "addedProps": self.added_props,
            "removedProps": self.removed_props,
            "addedFunctions": self.added_functions,
            "removedFunctions": self.removed_functions,
            "addedImports": self.added_imports,
            "removedImports": self.removed_imports,
            "modifiedExports": self.modified_exports,
        }
        return {key: list(value) for key, value in raw.items() if value}


@dataclass
class ComponentChange:
    """One bundle-level change inside a folder."""

    root_component: str
    type: ChangeType
    semantic_hash_before: str | None = None
    semantic_hash_after: str | None = None
    token_delta: int | None = None
    details: ChangeDetails | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"rootComponent": self.root_component, "type": self.type}
        if self.semantic_hash_before is not None:
            out["semanticHashBefore"] = self.semantic_hash_before
        if self.semantic_hash_after is not None:
            out["semanticHashAfter"] = self.semantic_hash_after
        if self.token_delta is not None:
            out["tokenDelta"] = self.token_delta
        if self.details is not None and not self.details.is_empty():
            out["details"] = self.details.to_dict()
        return out


@dataclass
class FolderDiff:
    path: str
    status: FolderStatus
    changes: list[ComponentChange] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "status": self.status,
            "changes": [c.to_dict() for c in self.changes],
        }


@dataclass
class TokenDelta:
    gpt4o_mini: int = 0
    claude: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"gpt4oMini": self.gpt4o_mini, "claude": self.claude}


@dataclass
class CompareSummary:
    """Folder counts by category. The four counts sum to ``total_folders``."""

    total_folders: int = 0
    unchanged_folders: int = 0
    changed_folders: int = 0
    added_folders: int = 0
    removed_folders: int = 0
    token_delta: TokenDelta = field(default_factory=TokenDelta)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalFolders": self.total_folders,
            "unchangedFolders": self.unchanged_folders,
            "changedFolders": self.changed_folders,
            "addedFolders": self.added_folders,
            "removedFolders": self.removed_folders,
            "tokenDelta": self.token_delta.to_dict(),
        }


@dataclass
class CompareResult:
    """Outcome of comparing a baseline dataset against a current one."""

    baseline: str
    status: CompareStatus
    summary: CompareSummary = field(default_factory=CompareSummary)
    folder_diffs: list[FolderDiff] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def failed(cls, baseline: str, error: str) -> CompareResult:
        """Error result: zeroed summary, no folder diffs."""
        return cls(baseline=baseline, status="error", error=error)

    def iter_changes(self) -> list[ComponentChange]:
        return [change for diff in self.folder_diffs for change in diff.changes]

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "baseline": self.baseline,
            "status": self.status,
            "summary": self.summary.to_dict(),
            "folderDiffs": [d.to_dict() for d in self.folder_diffs],
        }
        if self.error is not None:
            out["error"] = self.error
        return out
