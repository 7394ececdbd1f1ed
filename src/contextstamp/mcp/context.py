"""Application context for MCP handlers.

Single object passed to all tool handlers with access to ops classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from contextstamp.config.models import ContextStampConfig
    from contextstamp.snapshot.ops import SnapshotOps
    from contextstamp.snapshot.registry import SnapshotRegistry


@dataclass
class AppContext:
    """Context object passed to all MCP tool handlers.

    Owns the server's snapshot registry; nothing else holds snapshot state.
    """

    project_root: Path
    config: ContextStampConfig
    registry: SnapshotRegistry
    snapshot_ops: SnapshotOps

    @classmethod
    def create(
        cls,
        project_root: Path,
        config: ContextStampConfig | None = None,
        registry: SnapshotRegistry | None = None,
    ) -> AppContext:
        """Factory to create context with all ops wired together.

        Args:
            project_root: Project whose context files are served by default
            config: Resolved configuration (loaded from project_root if omitted)
            registry: Optional existing registry (reuses if provided)
        """
        from contextstamp.config.loader import load_config
        from contextstamp.snapshot.ops import SnapshotOps
        from contextstamp.snapshot.registry import SnapshotRegistry as Registry

        project_root = Path(project_root).resolve()
        if config is None:
            config = load_config(project_root)
        if registry is None:
            registry = Registry()

        return cls(
            project_root=project_root,
            config=config,
            registry=registry,
            snapshot_ops=SnapshotOps(registry, config, project_root),
        )
