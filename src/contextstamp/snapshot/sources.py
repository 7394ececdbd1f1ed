"""Disk access to Index and Bundle files.

A context directory holds one Index file at its root and, per folder listed
in the Index, a Bundle array file at ``<folder>/<bundle_filename>``.

Contract with the engine:
- load_index: the Index at a fixed file name, validated; missing is NotFound
- load_bundles: the Bundle array of a folder, validated; missing is ``[]``

Anything unparseable or wrongly shaped is a CorruptDataError at load time.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol, TypeVar

from pydantic import ValidationError

from contextstamp.config.constants import BUNDLE_FILENAME, INDEX_FILENAME
from contextstamp.core.errors import CorruptDataError, InvalidInputError, NotFoundError
from contextstamp.core.logging import get_logger
from contextstamp.snapshot.schema import LogicStampBundle, LogicStampIndex, parse_bundles, parse_index

log = get_logger(__name__)

T = TypeVar("T")

_SOURCE_PREFIXES = ("import ", "export ")


class BundleLoader(Protocol):
    """Returns the Bundle array of a folder, or ``[]`` when it has none."""

    async def load_bundles(self, folder_path: str) -> list[LogicStampBundle]: ...


def _describe(e: ValidationError) -> str:
    err = e.errors()[0]
    loc = ".".join(str(part) for part in err["loc"]) or "<root>"
    return f"{loc}: {err['msg']}"


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None


def _decode(
    text: str,
    path: Path,
    parser: Callable[[Any], T],
    corrupt: Callable[[str, str], CorruptDataError],
) -> T:
    if text.lstrip().startswith(_SOURCE_PREFIXES):
        raise corrupt(
            str(path),
            "appears to be a TypeScript file, not JSON. Check that the path is correct.",
        )
    try:
        return parser(json.loads(text))
    except json.JSONDecodeError as e:
        raise corrupt(str(path), str(e)) from e
    except ValidationError as e:
        raise corrupt(str(path), _describe(e)) from e


class DiskDataset:
    """Index and Bundle files under one context directory."""

    def __init__(
        self,
        root: Path,
        *,
        index_filename: str = INDEX_FILENAME,
        bundle_filename: str = BUNDLE_FILENAME,
    ) -> None:
        self.root = Path(root)
        self.index_filename = index_filename
        self.bundle_filename = bundle_filename

    def __repr__(self) -> str:
        return f"DiskDataset({str(self.root)!r})"

    @property
    def index_path(self) -> Path:
        return self.root / self.index_filename

    def bundle_path(self, folder_path: str) -> Path:
        return self.root / folder_path / self.bundle_filename

    def bundle_rel_path(self, folder_path: str) -> str:
        """Slash-joined bundle path relative to the root, as listed to callers."""
        if folder_path in ("", "."):
            return self.bundle_filename
        return f"{folder_path.rstrip('/')}/{self.bundle_filename}"

    def is_index_path(self, relative_path: str) -> bool:
        name = self.index_filename
        return (
            relative_path == name
            or relative_path.endswith("/" + name)
            or relative_path.endswith("\\" + name)
        )

    def resolve(self, relative_path: str) -> Path:
        """Absolute path of a file inside the root. Rejects paths that escape it."""
        root = self.root.resolve()
        candidate = (root / relative_path).resolve()
        if not candidate.is_relative_to(root):
            raise InvalidInputError.invalid(
                "bundlePath", relative_path, "Path must stay inside the context directory."
            )
        return candidate

    async def _read(
        self, path: Path, corrupt: Callable[[str, str], CorruptDataError]
    ) -> str | None:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, _read_text, path)
        except (OSError, UnicodeDecodeError) as e:
            raise corrupt(str(path), str(e)) from e

    async def load_index(self) -> LogicStampIndex:
        path = self.index_path
        text = await self._read(path, CorruptDataError.index)
        if text is None:
            raise NotFoundError.index_file(self.index_filename, str(self.root))
        index = _decode(text, path, parse_index, CorruptDataError.index)
        log.debug("index_loaded", path=str(path), folders=len(index.folders))
        return index

    async def load_bundles(self, folder_path: str) -> list[LogicStampBundle]:
        path = self.bundle_path(folder_path)
        text = await self._read(path, CorruptDataError.bundle)
        if text is None:
            return []
        return _decode(text, path, parse_bundles, CorruptDataError.bundle)

    async def read_index_file(self, relative_path: str) -> LogicStampIndex:
        """Validated Index at an explicit path inside the root."""
        path = self.resolve(relative_path)
        text = await self._read(path, CorruptDataError.index)
        if text is None:
            raise NotFoundError.index_file(relative_path, str(self.root))
        return _decode(text, path, parse_index, CorruptDataError.index)

    async def read_bundle_file(self, relative_path: str) -> list[LogicStampBundle]:
        """Validated Bundle array at an explicit path inside the root.

        Unlike ``load_bundles`` a missing file is NotFound: the caller named it.
        """
        path = self.resolve(relative_path)
        text = await self._read(path, CorruptDataError.bundle)
        if text is None:
            raise NotFoundError.bundle(relative_path)
        return _decode(text, path, parse_bundles, CorruptDataError.bundle)
