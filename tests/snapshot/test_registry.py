"""Tests for the in-memory snapshot registry."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from contextstamp.core.errors import ErrorCode, NotFoundError
from contextstamp.snapshot.models import CompareResult
from contextstamp.snapshot.registry import SnapshotRegistry


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock: FakeClock) -> SnapshotRegistry:
    return SnapshotRegistry(clock=clock)


class TestCreate:
    def test_ids_unique_within_same_millisecond(self, registry: SnapshotRegistry) -> None:
        first = registry.create(Path("/ctx"))
        second = registry.create(Path("/ctx"))

        assert first == "snap_1000000_0"
        assert second == "snap_1000000_1"
        assert len(registry) == 2

    def test_latest_becomes_current(self, registry: SnapshotRegistry) -> None:
        registry.create(Path("/one"))
        latest = registry.create(Path("/two"))

        current = registry.current()
        assert current is not None
        assert current.id == latest
        assert current.context_dir == Path("/two")

    def test_records_parameters(self, registry: SnapshotRegistry) -> None:
        sid = registry.create(
            Path("/ctx"),
            project_path=Path("/project"),
            profile="ci-strict",
            mode="full",
            include_style=True,
            depth=3,
        )

        snapshot = registry.require(sid)
        assert snapshot.project_path == Path("/project")
        assert (snapshot.profile, snapshot.mode, snapshot.include_style, snapshot.depth) == (
            "ci-strict",
            "full",
            True,
            3,
        )
        assert snapshot.to_dict()["createdAt"].startswith("1970-01-01T00:16:40")

    def test_project_path_defaults_to_context_dir(self, registry: SnapshotRegistry) -> None:
        sid = registry.create(Path("/ctx"))
        assert registry.require(sid).project_path == Path("/ctx")

    def test_snapshots_are_immutable(self, registry: SnapshotRegistry) -> None:
        snapshot = registry.require(registry.create(Path("/ctx")))
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.depth = 5  # type: ignore[misc]


class TestLookup:
    def test_get_unknown_is_none(self, registry: SnapshotRegistry) -> None:
        assert registry.get("snap_missing") is None

    def test_require_unknown_raises(self, registry: SnapshotRegistry) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            registry.require("snap_missing")
        assert exc_info.value.code == ErrorCode.SNAPSHOT_NOT_FOUND
        assert "snap_missing" in exc_info.value.message

    def test_current_none_when_empty(self, registry: SnapshotRegistry) -> None:
        assert registry.current() is None

    def test_all_in_creation_order(self, registry: SnapshotRegistry) -> None:
        ids = [registry.create(Path(f"/ctx{i}")) for i in range(3)]
        assert [s.id for s in registry.all()] == ids


class TestExpire:
    def test_exact_max_age_is_kept(self, registry: SnapshotRegistry, clock: FakeClock) -> None:
        sid = registry.create(Path("/ctx"))
        clock.now += 3600.0

        assert registry.expire() == []
        assert registry.get(sid) is not None

    def test_older_than_max_age_removed(self, registry: SnapshotRegistry, clock: FakeClock) -> None:
        old = registry.create(Path("/old"))
        clock.now += 3000.0
        fresh = registry.create(Path("/fresh"))
        clock.now += 601.0

        assert registry.expire() == [old]
        assert registry.get(old) is None
        assert registry.get(fresh) is not None

    def test_expired_current_clears_pointer(self, registry: SnapshotRegistry, clock: FakeClock) -> None:
        registry.create(Path("/ctx"))
        clock.now += 10.0

        registry.expire(max_age_ms=5000)

        assert registry.current() is None

    def test_custom_max_age(self, registry: SnapshotRegistry, clock: FakeClock) -> None:
        registry.create(Path("/ctx"))
        clock.now += 2.0
        assert registry.expire(max_age_ms=1000) != []


class TestCompareResultAndReset:
    def test_last_compare_result_last_writer_wins(self, registry: SnapshotRegistry) -> None:
        assert registry.last_compare_result() is None
        first = CompareResult(baseline="disk", status="pass")
        second = CompareResult.failed("disk", "boom")

        registry.set_last_compare_result(first)
        registry.set_last_compare_result(second)

        assert registry.last_compare_result() is second

    def test_reset_clears_everything(self, registry: SnapshotRegistry) -> None:
        registry.create(Path("/ctx"))
        registry.set_last_compare_result(CompareResult(baseline="disk", status="pass"))

        registry.reset()

        assert len(registry) == 0
        assert registry.current() is None
        assert registry.last_compare_result() is None
