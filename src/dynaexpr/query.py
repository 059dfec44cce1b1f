from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any

from .pagination import SortOrder

DEFAULT_LIMIT = 20
MIN_LIMIT = 1
MAX_LIMIT = 100

# Query-string parameter name -> QueryRequest field.
RAW_PARAMETERS: dict[str, str] = {
    "pKey": "partition_key",
    "pKeyType": "partition_key_type",
    "pKeyProp": "partition_key_prop",
    "sKey": "sort_key",
    "sKeyType": "sort_key_type",
    "sKeyProp": "sort_key_prop",
    "skValue2": "sort_key_value2",
    "skValue2Type": "sort_key_value2_type",
    "skComparator": "comparator",
    "index": "index_name",
    "limit": "limit",
    "lastEvaluatedKey": "cursor",
    "sorting": "sorting",
}

FIELD_PARAMETERS: dict[str, str] = {v: k for k, v in RAW_PARAMETERS.items()}


@dataclass(frozen=True)
class QueryRequest:
    partition_key: str | None = None
    partition_key_type: str | None = None
    partition_key_prop: str | None = None
    sort_key: str | None = None
    sort_key_type: str | None = None
    sort_key_prop: str | None = None
    sort_key_value2: str | None = None
    sort_key_value2_type: str | None = None
    comparator: str | None = None
    index_name: str | None = None
    limit: int | None = None
    cursor: str | None = None
    sorting: SortOrder | None = None

    def with_updates(self, **changes: Any) -> QueryRequest:
        return replace(self, **changes)

    def to_params(self) -> dict[str, str]:
        """Render back to query-string parameters, omitting absent fields."""
        out: dict[str, str] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            out[FIELD_PARAMETERS[f.name]] = str(value)
        return out


@dataclass(frozen=True)
class Page:
    items: list[dict[str, Any]]
    next_cursor: str | None
