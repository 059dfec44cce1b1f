from __future__ import annotations

import pytest

from dynaexpr.errors import ComparatorError
from dynaexpr.key_condition import (
    Comparator,
    build_key_condition,
    key_condition_placeholders,
    resolve_comparator,
)


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        (None, Comparator.EQUALS),
        ("EQUAL", Comparator.EQUALS),
        ("eq", Comparator.EQUALS),
        ("=", Comparator.EQUALS),
        ("LT", Comparator.LESS_THAN),
        ("greater_than", Comparator.GREATER_THAN),
        ("<=", Comparator.LESS_OR_EQUAL),
        ("GE", Comparator.GREATER_OR_EQUAL),
        ("begins_with", Comparator.BEGINS_WITH),
        ("BETWEEN", Comparator.BETWEEN),
    ],
)
def test_resolve_comparator(token: str | None, expected: Comparator) -> None:
    assert resolve_comparator(token) is expected


def test_unknown_comparator_is_rejected() -> None:
    with pytest.raises(ComparatorError, match="invalid comparator: LIKE") as excinfo:
        resolve_comparator("LIKE")
    assert excinfo.value.token == "LIKE"


def test_partition_only() -> None:
    assert build_key_condition() == "#pk = :pk"
    assert build_key_condition(None, None, "GT") == "#pk = :pk"


@pytest.mark.parametrize(
    ("token", "op"),
    [(None, "="), ("LESS_THAN", "<"), ("GT", ">"), ("LE", "<="), ("GREATER_THAN_OR_EQUAL", ">=")],
)
def test_binary_sort_conditions(token: str | None, op: str) -> None:
    assert build_key_condition("2024", None, token) == f"#pk = :pk AND #sk {op} :sk"


def test_begins_with_uses_second_placeholder() -> None:
    assert build_key_condition("ORDER#", None, "BEGINS_WITH") == "#pk = :pk AND begins_with(#sk, :skValue2)"


def test_between_spans_both_values() -> None:
    assert build_key_condition("a", "m", "BETWEEN") == "#pk = :pk AND #sk BETWEEN :sk AND :skValue2"


@pytest.mark.parametrize(
    ("sort_key", "value2", "token"),
    [(None, None, "BEGINS_WITH"), ("a", None, "BETWEEN"), (None, "m", "BETWEEN")],
)
def test_missing_operands_are_rejected(sort_key: str | None, value2: str | None, token: str) -> None:
    with pytest.raises(ComparatorError):
        build_key_condition(sort_key, value2, token)


def test_placeholders_follow_expression() -> None:
    assert key_condition_placeholders() == (":pk",)
    assert key_condition_placeholders("x") == (":pk", ":sk")
    assert key_condition_placeholders("x", "BEGINS_WITH") == (":pk", ":skValue2")
    assert key_condition_placeholders("x", "BETWEEN") == (":pk", ":sk", ":skValue2")
