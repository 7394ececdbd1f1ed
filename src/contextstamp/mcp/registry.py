"""Tool registry for the MCP server.

Tool modules register handlers with the module-level ``registry`` at import
time; ``create_mcp_server`` wires every registered spec into FastMCP.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

if TYPE_CHECKING:
    from contextstamp.mcp.context import AppContext

# Handler signature: (ctx, validated_params) -> dict
HandlerFn = Callable[["AppContext", Any], Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class ToolSpec:
    """A registered tool: name, handler, description and params model."""

    name: str
    handler: HandlerFn
    description: str
    params_model: type[BaseModel]


class ToolRegistry:
    """Ordered collection of tool specs, filled by the ``register`` decorator."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def register(
        self,
        name: str,
        params_model: type[BaseModel],
        description: str | None = None,
    ) -> Callable[[HandlerFn], HandlerFn]:
        """Decorator to register a tool handler.

        The description defaults to the handler's docstring. Registering a
        name twice replaces the earlier handler.

        Usage:
            @registry.register("list_bundles", ListBundlesParams)
            async def list_bundles(ctx: AppContext, params: ListBundlesParams) -> dict:
                \"\"\"List bundles in a snapshot.\"\"\"
        """

        def decorator(fn: HandlerFn) -> HandlerFn:
            self._tools[name] = ToolSpec(
                name=name,
                handler=fn,
                description=description or inspect.getdoc(fn) or name,
                params_model=params_model,
            )
            return fn

        return decorator

    def get_all(self) -> list[ToolSpec]:
        """All specs in registration order."""
        return list(self._tools.values())

    def get(self, name: str) -> ToolSpec | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def clear(self) -> None:
        """Clear all registrations (for testing)."""
        self._tools.clear()


registry = ToolRegistry()
