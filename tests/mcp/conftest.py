"""Shared fixtures for MCP tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from contextstamp.config.models import ContextStampConfig
from contextstamp.mcp.context import AppContext


@pytest.fixture
def project(
    tmp_path: Path,
    dataset: Callable[..., Path],
    bundle: Callable[..., dict[str, Any]],
) -> Path:
    return dataset(
        tmp_path / "project",
        {
            "src/components": [bundle("Button"), bundle("Input")],
            "src/hooks": [bundle("useToggle", folder="src/hooks", ext=".ts")],
        },
    )


@pytest.fixture
def app_context(project: Path) -> AppContext:
    return AppContext.create(project, config=ContextStampConfig())
