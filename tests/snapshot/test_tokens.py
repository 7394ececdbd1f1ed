"""Tests for token estimation heuristics."""

from __future__ import annotations

import pytest

from contextstamp.config.models import TokensConfig
from contextstamp.snapshot.schema import LogicStampBundle, to_wire
from contextstamp.snapshot.tokens import (
    TokenHeuristics,
    estimate_tokens,
    round_half_up,
    serialize_compact,
)


class TestSerializeCompact:
    def test_no_whitespace(self) -> None:
        assert serialize_compact({"a": [1, 2], "b": "x"}) == '{"a":[1,2],"b":"x"}'

    def test_keeps_non_ascii(self) -> None:
        assert serialize_compact({"k": "é"}) == '{"k":"é"}'


class TestEstimateTokens:
    @pytest.mark.parametrize(
        ("payload", "expected"),
        [
            ({"a": 1}, 2),  # 7 chars
            ("", 1),  # '""'
            ({"k": "é"}, 3),  # 9 chars
            ({}, 1),
        ],
    )
    def test_ceil_of_length_over_four(self, payload: object, expected: int) -> None:
        assert estimate_tokens(payload) == expected

    def test_custom_chars_per_token(self) -> None:
        # '{"a":1}' is 7 chars
        assert estimate_tokens({"a": 1}, chars_per_token=1) == 7

    def test_model_and_wire_dict_agree(self, bundle) -> None:  # type: ignore[no-untyped-def]
        model = LogicStampBundle.model_validate(bundle("Button"))
        assert estimate_tokens(model) == estimate_tokens(to_wire(model))

    def test_deterministic(self, bundle) -> None:  # type: ignore[no-untyped-def]
        first = estimate_tokens(bundle("Button"))
        second = estimate_tokens(bundle("Button"))
        assert first == second


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(2.5, 3), (2.4, 2), (-2.5, -2), (-2.6, -3), (0.0, 0)],
    )
    def test_rounds_halves_up(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected


class TestTokenHeuristics:
    def test_defaults(self) -> None:
        h = TokenHeuristics()
        assert h.chars_per_token == 4.0
        assert h.fallback_weights == {"gpt4oMini": 0.6, "claude": 0.5}

    def test_split_applies_weights(self) -> None:
        assert TokenHeuristics().split(10) == {"gpt4oMini": 6, "claude": 5}

    def test_split_rounds_each_share(self) -> None:
        # 1.8 -> 2, 1.5 -> 2
        assert TokenHeuristics().split(3) == {"gpt4oMini": 2, "claude": 2}

    def test_from_config(self) -> None:
        config = TokensConfig(chars_per_token=2, fallback_weights={"gpt4oMini": 1.0, "claude": 1.0})
        h = TokenHeuristics.from_config(config)
        assert h.estimate({"a": 1}) == 4
        assert h.split(7) == {"gpt4oMini": 7, "claude": 7}

    def test_default_weights_not_shared(self) -> None:
        a = TokenHeuristics()
        a.fallback_weights["claude"] = 9.0
        assert TokenHeuristics().fallback_weights["claude"] == 0.5
