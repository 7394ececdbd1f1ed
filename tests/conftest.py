"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages, and
provides builders that write Index/Bundle context files to disk.
"""

import json
import sys
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import pytest

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of contextstamp modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("contextstamp"):
        del sys.modules[module_name]


BundleFactory = Callable[..., dict[str, Any]]
DatasetWriter = Callable[..., Path]


def build_bundle(
    name: str,
    *,
    folder: str = "src/components",
    ext: str = ".tsx",
    bundle_hash: str | None = None,
    semantic_hash: str | None = None,
    props: Iterable[str] = (),
    functions: Iterable[str] = (),
    imports: Iterable[str] = (),
    named_exports: Iterable[str] | None = None,
    default_export: str | None = None,
    position: str = "1/1",
    code_header: str | None = None,
) -> dict[str, Any]:
    """Wire-format Bundle dict whose root component is ``name``."""
    entry_id = f"{folder}/{name}{ext}"
    exports: dict[str, Any] = {}
    if named_exports is not None:
        exports["named"] = list(named_exports)
    if default_export is not None:
        exports["default"] = default_export
    contract: dict[str, Any] = {
        "type": "UIFContract",
        "schemaVersion": "0.4",
        "kind": "react:component",
        "entryId": entry_id,
        "entryPathAbs": f"/project/{entry_id}",
        "entryPathRel": entry_id,
        "description": f"{name} component",
        "version": {
            "variables": [],
            "hooks": [],
            "components": [],
            "functions": list(functions),
            "imports": list(imports),
        },
        "logicSignature": {
            "props": {prop: {"type": "string"} for prop in props},
            "emits": {},
        },
        "semanticHash": semantic_hash or f"uif:{name.lower()}",
        "fileHash": f"file:{name.lower()}",
    }
    if exports:
        contract["exports"] = exports
    return {
        "$schema": "https://logicstamp.dev/schemas/context/v0.1.json",
        "position": position,
        "type": "LogicStampBundle",
        "schemaVersion": "0.1",
        "entryId": entry_id,
        "depth": 2,
        "createdAt": "2026-01-01T00:00:00.000Z",
        "bundleHash": bundle_hash or f"uifb:{name.lower()}",
        "graph": {
            "nodes": [
                {
                    "entryId": entry_id,
                    "contract": contract,
                    "codeHeader": code_header,
                }
            ],
            "edges": [],
        },
        "meta": {"missing": [], "source": "logicstamp-context@0.3.0"},
    }


def write_dataset(
    root: Path,
    folders: dict[str, list[dict[str, Any]]],
    *,
    declared: dict[str, int] | None = None,
    token_estimates: dict[str, int] | None = None,
    write_bundles: bool = True,
) -> Path:
    """Write context_main.json plus one context.json per folder under ``root``."""
    declared = declared or {}
    root.mkdir(parents=True, exist_ok=True)
    folder_entries = []
    for path, bundles in folders.items():
        folder_entries.append(
            {
                "path": path,
                "bundles": declared.get(path, len(bundles)),
                "components": [b["entryId"].rsplit("/", 1)[-1] for b in bundles],
                "tokenEstimate": 100 * len(bundles),
            }
        )
        if write_bundles:
            bundle_file = root / path / "context.json"
            bundle_file.parent.mkdir(parents=True, exist_ok=True)
            bundle_file.write_text(json.dumps(bundles, indent=2))

    summary: dict[str, Any] = {
        "totalComponents": sum(len(b) for b in folders.values()),
        "totalBundles": sum(len(b) for b in folders.values()),
        "totalFolders": len(folders),
        "totalTokenEstimate": 100 * sum(len(b) for b in folders.values()),
        "missingDependencies": [],
    }
    if token_estimates is not None:
        summary["tokenEstimates"] = token_estimates

    index = {
        "$schema": "https://logicstamp.dev/schemas/context/v0.1.json",
        "type": "LogicStampIndex",
        "schemaVersion": "0.2",
        "projectRoot": ".",
        "projectRootAbs": str(root),
        "summary": summary,
        "folders": folder_entries,
    }
    (root / "context_main.json").write_text(json.dumps(index, indent=2))
    return root


@pytest.fixture
def bundle() -> BundleFactory:
    """Factory for wire-format Bundle dicts."""
    return build_bundle


@pytest.fixture
def dataset() -> DatasetWriter:
    """Writer for an on-disk Index + Bundle dataset."""
    return write_dataset
