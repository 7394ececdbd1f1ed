"""Base classes for tool parameters."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseParams(BaseModel):
    """Base class for all tool parameters.

    Parameters are camelCase on the wire (``projectPath``, ``snapshotId``)
    and snake_case in Python. Uses extra="forbid" to reject unknown fields
    with clear errors.
    """

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )
