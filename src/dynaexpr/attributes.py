from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .reserved import RESERVED_WORDS, ReservedWordTable

_SEGMENT = re.compile(r"^(?P<name>[^\[\]]+)(?P<index>(?:\[\d+\])*)$")


@dataclass(frozen=True)
class ExpressionAttributeMap:
    names: dict[str, str] = field(default_factory=dict)
    values: dict[str, Any] = field(default_factory=dict)

    def merge(
        self,
        names: Mapping[str, str] | None = None,
        values: Mapping[str, Any] | None = None,
    ) -> ExpressionAttributeMap:
        """Return a new map with ``names``/``values`` layered on top; the argument wins."""
        merged_names = dict(self.names)
        merged_names.update(names or {})
        merged_values = dict(self.values)
        merged_values.update(values or {})
        return ExpressionAttributeMap(names=merged_names, values=merged_values)

    def __bool__(self) -> bool:
        return bool(self.names or self.values)


def merge_attribute_maps(
    base: ExpressionAttributeMap,
    extra_names: Mapping[str, str] | None = None,
    extra_values: Mapping[str, Any] | None = None,
) -> ExpressionAttributeMap:
    return base.merge(extra_names, extra_values)


def _alias_segment(segment: str, names: dict[str, str], table: ReservedWordTable) -> str:
    m = _SEGMENT.match(segment)
    if m is None:
        return segment

    name, index = m.group("name"), m.group("index")
    if name.startswith("#"):
        names.setdefault(name, name[1:])
        return segment
    if table.is_reserved(name):
        alias = f"#{name}"
        names[alias] = name
        return alias + index
    return segment


def alias_path(
    path: str,
    names: dict[str, str],
    *,
    table: ReservedWordTable = RESERVED_WORDS,
) -> str:
    """Alias the reserved segments of a document path, registering them in ``names``."""
    stripped = path.strip()
    if not stripped:
        return path
    return ".".join(_alias_segment(seg, names, table) for seg in stripped.split("."))


def alias_projection(
    projection: str,
    *,
    table: ReservedWordTable = RESERVED_WORDS,
) -> tuple[str, dict[str, str]]:
    """Replace reserved attribute names in a projection list with ``#`` aliases.

    Names that are not reserved are left as-is, so the result may mix raw and
    aliased names. Tokens that already carry a ``#`` prefix are registered as
    ``#name -> name``.
    """
    names: dict[str, str] = {}
    parts = [alias_path(token, names, table=table) for token in projection.split(",")]
    return ", ".join(p.strip() for p in parts if p.strip()), names


def _split_top_level(expression: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in expression:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(0, depth - 1)
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return parts


def alias_update_expression(
    expression: str,
    *,
    table: ReservedWordTable = RESERVED_WORDS,
) -> tuple[str, dict[str, str]]:
    """Alias reserved names on the left-hand side of each assignment in a SET clause."""
    names: dict[str, str] = {}
    stripped = expression.strip()
    if not stripped[:4].upper() == "SET ":
        return expression, names

    assignments: list[str] = []
    for assignment in _split_top_level(stripped[4:]):
        left, sep, right = assignment.partition("=")
        if not sep:
            assignments.append(assignment.strip())
            continue
        target = alias_path(left, names, table=table)
        assignments.append(f"{target} = {right.strip()}")

    return "SET " + ", ".join(assignments), names


def alias_item_names(
    attribute_names: Iterable[str],
    expression: str,
    *,
    table: ReservedWordTable = RESERVED_WORDS,
) -> dict[str, str]:
    """Register aliases for reserved item attributes the expression refers to as ``#name``."""
    names: dict[str, str] = {}
    for name in attribute_names:
        if not table.is_reserved(name):
            continue
        alias = f"#{name}"
        if re.search(re.escape(alias) + r"(?![A-Za-z0-9_])", expression):
            names[alias] = name
    return names
