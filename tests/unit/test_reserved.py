from __future__ import annotations

import pytest

from dynaexpr.reserved import RESERVED_WORDS, ReservedWordTable, is_reserved


@pytest.mark.parametrize("word", ["status", "STATUS", "Name", "data", "date", "Timestamp", "user"])
def test_reserved_words_match_case_insensitively(word: str) -> None:
    assert is_reserved(word) is True
    assert word in RESERVED_WORDS


@pytest.mark.parametrize("word", ["title", "email", "customerId", "pk", ""])
def test_ordinary_names_are_not_reserved(word: str) -> None:
    assert is_reserved(word) is False


def test_bundled_table_is_loaded_once_and_complete() -> None:
    assert len(RESERVED_WORDS) == 573
    assert 42 not in RESERVED_WORDS  # type: ignore[operator]


def test_custom_table_normalizes_and_dedupes() -> None:
    table = ReservedWordTable(["foo", " FOO ", "", "bar"])
    assert len(table) == 2
    assert table.is_reserved("Foo")
    assert not table.is_reserved("status")
