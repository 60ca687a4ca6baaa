from __future__ import annotations

import pytest

from gopherlint.exceptions import NeverThrown
from gopherlint.order_contract import sort_once


def test_sort_once_sorts() -> None:
    assert sort_once([3, 1, 2], source="test") == [1, 2, 3]
    assert sort_once(iter(["b", "a"]), source="test") == ["a", "b"]


def test_sort_once_is_stable_by_key() -> None:
    items = [(2, "x"), (1, "b"), (1, "a")]
    assert sort_once(items, source="test", key=lambda item: item[0]) == [
        (1, "b"),
        (1, "a"),
        (2, "x"),
    ]


def test_sort_once_ignores_policy_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOPHERLINT_ORDER_POLICY", "enforce")
    assert sort_once([2, 1], source="env") == [1, 2]


def test_unorderable_values_name_their_source() -> None:
    with pytest.raises(NeverThrown, match="source='mixed'"):
        sort_once([1, "a"], source="mixed")
