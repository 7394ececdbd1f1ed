"""In-memory snapshot registry.

Holds named snapshots, the "current" pointer and the last compare result.
One registry is created per server and passed to everything that needs it;
tests build their own.

Snapshots are immutable once stored. ``current`` and the last compare result
are last-writer-wins. Expiry is lazy: callers invoke ``expire`` before
lookups, nothing runs on a timer.
"""

from __future__ import annotations

import re
import threading
import time
from collections.abc import Callable
from pathlib import Path

from contextstamp.config.constants import DEFAULT_SNAPSHOT_TTL_SEC, SNAPSHOT_ID_PREFIX
from contextstamp.core.errors import NotFoundError
from contextstamp.core.logging import get_logger
from contextstamp.snapshot.models import CompareResult, Snapshot

log = get_logger(__name__)

DEFAULT_MAX_AGE_MS = int(DEFAULT_SNAPSHOT_TTL_SEC * 1000)

_SNAPSHOT_ID = re.compile(rf"{SNAPSHOT_ID_PREFIX}_\d+_\d+")


def is_snapshot_id(value: str) -> bool:
    """True if ``value`` has the shape of an id this registry hands out."""
    return _SNAPSHOT_ID.fullmatch(value) is not None


class SnapshotRegistry:
    """Thread-safe store of snapshots keyed by id."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshots: dict[str, Snapshot] = {}
        self._current_id: str | None = None
        self._last_result: CompareResult | None = None
        self._counter = 0

    def __len__(self) -> int:
        return len(self._snapshots)

    def _next_id(self, now: float) -> str:
        # Caller holds the lock
        snapshot_id = f"{SNAPSHOT_ID_PREFIX}_{int(now * 1000)}_{self._counter}"
        self._counter += 1
        return snapshot_id

    def create(
        self,
        context_dir: Path,
        *,
        project_path: Path | None = None,
        profile: str = "llm-chat",
        mode: str = "header",
        include_style: bool = False,
        depth: int = 2,
    ) -> str:
        """Store a new snapshot, make it current and return its id."""
        with self._lock:
            now = self._clock()
            snapshot_id = self._next_id(now)
            self._snapshots[snapshot_id] = Snapshot(
                id=snapshot_id,
                created_at=now,
                context_dir=Path(context_dir),
                project_path=Path(project_path or context_dir),
                profile=profile,
                mode=mode,
                include_style=include_style,
                depth=depth,
            )
            self._current_id = snapshot_id
        log.info("snapshot_created", snapshot_id=snapshot_id, context_dir=str(context_dir))
        return snapshot_id

    def get(self, snapshot_id: str) -> Snapshot | None:
        with self._lock:
            return self._snapshots.get(snapshot_id)

    def require(self, snapshot_id: str) -> Snapshot:
        """Like ``get`` but raises NotFoundError for unknown or expired ids."""
        snapshot = self.get(snapshot_id)
        if snapshot is None:
            raise NotFoundError.snapshot(snapshot_id)
        return snapshot

    def current(self) -> Snapshot | None:
        with self._lock:
            if self._current_id is None:
                return None
            return self._snapshots.get(self._current_id)

    def all(self) -> list[Snapshot]:
        """Snapshots in creation order."""
        with self._lock:
            return list(self._snapshots.values())

    def set_last_compare_result(self, result: CompareResult) -> None:
        with self._lock:
            self._last_result = result

    def last_compare_result(self) -> CompareResult | None:
        with self._lock:
            return self._last_result

    def expire(self, max_age_ms: int = DEFAULT_MAX_AGE_MS) -> list[str]:
        """Drop snapshots older than ``max_age_ms``. Returns the removed ids."""
        with self._lock:
            now = self._clock()
            expired = [
                snapshot_id
                for snapshot_id, snapshot in self._snapshots.items()
                if (now - snapshot.created_at) * 1000 > max_age_ms
            ]
            for snapshot_id in expired:
                del self._snapshots[snapshot_id]
            if self._current_id in expired:
                self._current_id = None
        if expired:
            log.info("snapshots_expired", count=len(expired))
        return expired

    def reset(self) -> None:
        """Clear all snapshots, the current pointer and the last result."""
        with self._lock:
            self._snapshots.clear()
            self._current_id = None
            self._last_result = None
        log.debug("registry_reset")
