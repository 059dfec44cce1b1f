from __future__ import annotations

import pytest

from dynaexpr.errors import EmptyUpdateError
from dynaexpr.update_builder import UpdateBuilder, generate_update, resolve_update


def test_generate_update_aliases_reserved_fields() -> None:
    clause = generate_update({"title": "Hi", "status": "open"})
    assert clause.expression == "SET title = :title, #status = :status"
    assert clause.attributes.names == {"#status": "status"}
    assert clause.attributes.values == {":title": "Hi", ":status": "open"}


def test_placeholders_avoid_existing_values() -> None:
    clause = generate_update({"title": "new"}, {":title": "old", ":title_update_1": "older"})
    assert clause.expression == "SET title = :title_update_2"
    assert clause.attributes.values == {":title_update_2": "new"}


def test_placeholders_avoid_each_other() -> None:
    clause = UpdateBuilder().set("title", "a").set("title", "b").build()
    assert clause.expression == "SET title = :title, title = :title_update_1"


def test_empty_builder_raises() -> None:
    with pytest.raises(EmptyUpdateError):
        UpdateBuilder().build()


def test_resolve_passes_explicit_expression_through() -> None:
    clause = resolve_update(
        item={"ignored": 1},
        update_expression="ADD #count :one",
        names={"#count": "count"},
        values={":one": 1},
        extra_values={":one": 2},
    )
    assert clause.expression == "ADD #count :one"
    assert clause.attributes.names == {"#count": "count"}
    assert clause.attributes.values == {":one": 2}


def test_resolve_generated_keeps_caller_values_and_names() -> None:
    clause = resolve_update(
        item={"name": "x", "title": "t"},
        names={"#name": "displayName"},
        values={":title": "caller"},
    )
    assert clause.expression == "SET #name = :name, title = :title_update_1"
    assert clause.attributes.names == {"#name": "displayName"}
    assert clause.attributes.values == {":title": "caller", ":name": "x", ":title_update_1": "t"}


def test_resolve_without_item_or_expression_raises() -> None:
    with pytest.raises(EmptyUpdateError):
        resolve_update(item={})


def test_reserved_fields_keep_input_order() -> None:
    clause = generate_update({"status": "DONE", "size": 3})
    assert clause.expression == "SET #status = :status, #size = :size"
    assert clause.attributes.names == {"#status": "status", "#size": "size"}


def test_first_collision_gets_first_suffix() -> None:
    clause = generate_update({"email": "new@example.com"}, {":email": "old@example.com"})
    assert clause.expression == "SET email = :email_update_1"
