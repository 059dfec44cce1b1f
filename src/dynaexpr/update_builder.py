from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .attributes import ExpressionAttributeMap, alias_update_expression
from .errors import EmptyUpdateError


@dataclass(frozen=True)
class UpdateClause:
    expression: str
    attributes: ExpressionAttributeMap


class UpdateBuilder:
    """Accumulates ``field = value`` assignments into a single SET clause.

    Placeholders are ``:<field>`` unless that token is already taken by the
    caller's value map (or by an earlier assignment), in which case
    ``:<field>_update_<n>`` is used for the smallest free ``n``.
    """

    def __init__(self, existing_values: Mapping[str, Any] | None = None) -> None:
        self._existing = dict(existing_values or {})
        self._assignments: list[tuple[str, Any]] = []

    def set(self, field: str, value: Any) -> UpdateBuilder:
        self._assignments.append((field, value))
        return self

    def set_all(self, entity: Mapping[str, Any]) -> UpdateBuilder:
        for field, value in entity.items():
            self.set(str(field), value)
        return self

    def build(self) -> UpdateClause:
        if not self._assignments:
            raise EmptyUpdateError("either an update expression or at least one item field is required")

        values: dict[str, Any] = {}
        parts: list[str] = []
        for field, value in self._assignments:
            placeholder = self._placeholder(field, values)
            values[placeholder] = value
            parts.append(f"{field} = {placeholder}")

        expression, names = alias_update_expression("SET " + ", ".join(parts))
        return UpdateClause(expression=expression, attributes=ExpressionAttributeMap(names=names, values=values))

    def _placeholder(self, field: str, taken: Mapping[str, Any]) -> str:
        ref = f":{field}"
        counter = 0
        while ref in self._existing or ref in taken:
            counter += 1
            ref = f":{field}_update_{counter}"
        return ref


def generate_update(
    entity: Mapping[str, Any],
    existing_values: Mapping[str, Any] | None = None,
) -> UpdateClause:
    return UpdateBuilder(existing_values).set_all(entity).build()


def resolve_update(
    *,
    item: Mapping[str, Any] | None = None,
    update_expression: str | None = None,
    names: Mapping[str, str] | None = None,
    values: Mapping[str, Any] | None = None,
    extra_names: Mapping[str, str] | None = None,
    extra_values: Mapping[str, Any] | None = None,
) -> UpdateClause:
    """Resolve the update expression and attribute maps for an update command.

    An explicit ``update_expression`` is passed through untouched with the
    caller's maps merged (extras last). Otherwise the expression is generated
    from ``item``; the caller's names override generated aliases, and generated
    placeholders never collide with the caller's values.
    """
    caller = ExpressionAttributeMap().merge(names, values).merge(extra_names, extra_values)

    if update_expression:
        return UpdateClause(expression=update_expression, attributes=caller)

    if not item:
        raise EmptyUpdateError("either an update expression or at least one item field is required")

    generated = generate_update(item, caller.values)
    merged = ExpressionAttributeMap(names=generated.attributes.names).merge(
        caller.names, {**caller.values, **generated.attributes.values}
    )
    return UpdateClause(expression=generated.expression, attributes=merged)
