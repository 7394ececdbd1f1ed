"""Token estimation heuristics.

Token figures here are crude approximations of language-model cost derived
from serialized size. They only feed relative deltas between two snapshots
and carry no accuracy guarantee.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from contextstamp.snapshot.schema import to_wire

if TYPE_CHECKING:
    from contextstamp.config.models import TokensConfig

DEFAULT_CHARS_PER_TOKEN = 4.0
DEFAULT_FALLBACK_WEIGHTS: dict[str, float] = {"gpt4oMini": 0.6, "claude": 0.5}


def serialize_compact(payload: Any) -> str:
    """JSON text with no insignificant whitespace and non-ASCII kept as-is."""
    if isinstance(payload, BaseModel):
        payload = to_wire(payload)
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def estimate_tokens(payload: Any, chars_per_token: float = DEFAULT_CHARS_PER_TOKEN) -> int:
    """Estimate tokens as ceil(serialized length / chars_per_token)."""
    return math.ceil(len(serialize_compact(payload)) / chars_per_token)


def round_half_up(value: float) -> int:
    """Round to nearest integer, halves toward positive infinity."""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class TokenHeuristics:
    """Overridable constants for token estimation.

    ``fallback_weights`` split a raw bundle token delta across cost models
    when an Index carries no aggregate estimates. The default 0.6/0.5 split
    is arbitrary.
    """

    chars_per_token: float = DEFAULT_CHARS_PER_TOKEN
    fallback_weights: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_FALLBACK_WEIGHTS)
    )

    @classmethod
    def from_config(cls, config: TokensConfig) -> TokenHeuristics:
        return cls(
            chars_per_token=config.chars_per_token,
            fallback_weights=dict(config.fallback_weights),
        )

    def estimate(self, payload: Any) -> int:
        return estimate_tokens(payload, self.chars_per_token)

    def split(self, token_delta: int) -> dict[str, int]:
        """Weighted per-model share of one change's delta, rounded half up."""
        return {
            model: round_half_up(token_delta * weight)
            for model, weight in self.fallback_weights.items()
        }
