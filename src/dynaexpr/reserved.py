from __future__ import annotations

from collections.abc import Iterable
from importlib.resources import files


class ReservedWordTable:
    """Read-only set of words DynamoDB reserves in expression grammar.

    Lookups are case-insensitive. A single instance is built at import time and
    shared by every builder; it is never mutated afterwards.
    """

    __slots__ = ("_words",)

    def __init__(self, words: Iterable[str]) -> None:
        self._words = frozenset(w.strip().upper() for w in words if w and w.strip())

    @classmethod
    def from_resource(cls, name: str = "reserved_words.txt") -> ReservedWordTable:
        raw = files(__package__).joinpath(name).read_text(encoding="utf-8")
        return cls(raw.splitlines())

    def is_reserved(self, name: str) -> bool:
        return name.strip().upper() in self._words

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.is_reserved(name)

    def __len__(self) -> int:
        return len(self._words)


RESERVED_WORDS = ReservedWordTable.from_resource()


def is_reserved(name: str) -> bool:
    return RESERVED_WORDS.is_reserved(name)
