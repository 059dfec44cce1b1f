from __future__ import annotations

from dynaexpr.attributes import (
    ExpressionAttributeMap,
    alias_item_names,
    alias_path,
    alias_projection,
    alias_update_expression,
    merge_attribute_maps,
)
from dynaexpr.reserved import ReservedWordTable


def test_alias_projection_mixes_raw_and_aliased_names() -> None:
    expr, names = alias_projection("id, name, status,title")
    assert expr == "id, #name, #status, title"
    assert names == {"#name": "name", "#status": "status"}


def test_alias_projection_registers_pre_aliased_tokens() -> None:
    expr, names = alias_projection("#data, email")
    assert expr == "#data, email"
    assert names == {"#data": "data"}


def test_alias_path_handles_nested_segments_and_indexes() -> None:
    names: dict[str, str] = {}
    assert alias_path("profile.name", names) == "profile.#name"
    assert alias_path("items[2].size", names) == "#items[2].#size"
    assert names == {"#name": "name", "#items": "items", "#size": "size"}


def test_alias_path_uses_given_table() -> None:
    names: dict[str, str] = {}
    table = ReservedWordTable(["title"])
    assert alias_path("title", names, table=table) == "#title"
    assert alias_path("status", names, table=table) == "status"


def test_alias_update_expression_only_touches_targets() -> None:
    expr, names = alias_update_expression("SET name = :name, total = if_not_exists(total, :zero), title = :t")
    assert expr == "SET #name = :name, #total = if_not_exists(total, :zero), title = :t"
    assert names == {"#name": "name", "#total": "total"}


def test_alias_update_expression_leaves_other_clauses_alone() -> None:
    expr, names = alias_update_expression("ADD count :one")
    assert expr == "ADD count :one"
    assert names == {}


def test_alias_item_names_only_registers_referenced_aliases() -> None:
    names = alias_item_names(["status", "name", "title"], "attribute_not_exists(#status) AND #names = :n")
    assert names == {"#status": "status"}


def test_merge_extras_win() -> None:
    base = ExpressionAttributeMap(names={"#a": "a", "#b": "b"}, values={":a": 1})
    merged = merge_attribute_maps(base, {"#b": "bee"}, {":a": 2, ":c": 3})
    assert merged.names == {"#a": "a", "#b": "bee"}
    assert merged.values == {":a": 2, ":c": 3}
    assert base.names == {"#a": "a", "#b": "b"}


def test_empty_map_is_falsy() -> None:
    assert not ExpressionAttributeMap()
    assert ExpressionAttributeMap(values={":x": 1})
