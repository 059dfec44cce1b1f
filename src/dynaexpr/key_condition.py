from __future__ import annotations

from enum import StrEnum

from .errors import ComparatorError

PARTITION_TERM = "#pk = :pk"


class Comparator(StrEnum):
    EQUALS = "="
    LESS_THAN = "<"
    GREATER_THAN = ">"
    LESS_OR_EQUAL = "<="
    GREATER_OR_EQUAL = ">="
    BEGINS_WITH = "begins_with"
    BETWEEN = "between"


_TOKENS: dict[str, Comparator] = {
    "EQUAL": Comparator.EQUALS,
    "EQUALS": Comparator.EQUALS,
    "EQ": Comparator.EQUALS,
    "=": Comparator.EQUALS,
    "LESS_THAN": Comparator.LESS_THAN,
    "LT": Comparator.LESS_THAN,
    "<": Comparator.LESS_THAN,
    "GREATER_THAN": Comparator.GREATER_THAN,
    "GT": Comparator.GREATER_THAN,
    ">": Comparator.GREATER_THAN,
    "LESS_THAN_OR_EQUAL": Comparator.LESS_OR_EQUAL,
    "LE": Comparator.LESS_OR_EQUAL,
    "<=": Comparator.LESS_OR_EQUAL,
    "GREATER_THAN_OR_EQUAL": Comparator.GREATER_OR_EQUAL,
    "GE": Comparator.GREATER_OR_EQUAL,
    ">=": Comparator.GREATER_OR_EQUAL,
    "BEGINS_WITH": Comparator.BEGINS_WITH,
    "BETWEEN": Comparator.BETWEEN,
}


def resolve_comparator(token: str | Comparator | None) -> Comparator:
    if token is None:
        return Comparator.EQUALS
    if isinstance(token, Comparator):
        return token

    resolved = _TOKENS.get(str(token).strip().upper())
    if resolved is None:
        raise ComparatorError(f"invalid comparator: {token}", token=str(token))
    return resolved


def build_key_condition(
    sort_key: str | None = None,
    sort_key_value2: str | None = None,
    comparator: str | Comparator | None = None,
) -> str:
    """Build a key-condition expression over the ``#pk``/``#sk`` placeholders.

    The partition term is always present. ``BEGINS_WITH`` compares against
    ``:skValue2`` and ``BETWEEN`` spans ``:sk`` to ``:skValue2``; both raise
    ``ComparatorError`` when an operand they need is missing.
    """
    op = resolve_comparator(comparator)

    if op is Comparator.BEGINS_WITH:
        if not sort_key:
            raise ComparatorError("begins_with requires a sort key value", token=str(comparator))
        return f"{PARTITION_TERM} AND begins_with(#sk, :skValue2)"

    if op is Comparator.BETWEEN:
        if not sort_key or not sort_key_value2:
            raise ComparatorError("between requires both sort key values", token=str(comparator))
        return f"{PARTITION_TERM} AND #sk BETWEEN :sk AND :skValue2"

    if not sort_key:
        return PARTITION_TERM
    return f"{PARTITION_TERM} AND #sk {op.value} :sk"


def key_condition_placeholders(
    sort_key: str | None = None,
    comparator: str | Comparator | None = None,
) -> tuple[str, ...]:
    """Value placeholders referenced by the matching ``build_key_condition`` output."""
    op = resolve_comparator(comparator)
    if op is Comparator.BEGINS_WITH:
        return (":pk", ":skValue2")
    if op is Comparator.BETWEEN:
        return (":pk", ":sk", ":skValue2")
    if not sort_key:
        return (":pk",)
    return (":pk", ":sk")
