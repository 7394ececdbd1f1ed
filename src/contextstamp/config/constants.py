"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
These are wire-format sentinels and protocol constraints.

For configurable values, see models.py (SnapshotsConfig, TokensConfig, etc.).
"""

# =============================================================================
# Wire Format
# =============================================================================
# Fixed by the external context generator; changing these breaks interop.

INDEX_FILENAME = "context_main.json"
"""Default Index file name at the root of a context directory."""

BUNDLE_FILENAME = "context.json"
"""Default Bundle array file name inside each folder."""

COMPONENT_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")
"""Source extensions stripped when deriving a component name."""

# =============================================================================
# Snapshot Registry
# =============================================================================

SNAPSHOT_ID_PREFIX = "snap"
"""Snapshot ids look like ``snap_<epoch-ms>_<counter>``."""

DEFAULT_SNAPSHOT_TTL_SEC = 3600.0
"""Default snapshot lifetime (1 hour)."""

DEFAULT_DEPTH = 2
"""Default dependency traversal depth recorded on snapshots."""

# =============================================================================
# Protocol/Validation Constants
# =============================================================================

PORT_MIN = 0
PORT_MAX = 65535
"""Valid port range."""
