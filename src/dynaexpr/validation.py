from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .errors import FieldIssue, ValidationError
from .pagination import SortOrder
from .query import DEFAULT_LIMIT, FIELD_PARAMETERS, MAX_LIMIT, MIN_LIMIT, RAW_PARAMETERS, QueryRequest
from .typed_value import TypeTag

logger = logging.getLogger(__name__)

_TYPE_TAGS = frozenset(tag.value for tag in TypeTag)
_INDEX_NAME = re.compile(r"^[a-zA-Z0-9_.-]{3,255}$")

_PARTITION_FIELDS = ("partition_key", "partition_key_type", "partition_key_prop")
_INHERITABLE_FIELDS = (
    "sort_key",
    "sort_key_type",
    "sort_key_prop",
    "sort_key_value2",
    "sort_key_value2_type",
    "comparator",
    "cursor",
    "sorting",
)
_PAGING_ONLY_FIELDS = frozenset({"limit", "sorting"})

_SORT_ALIASES: dict[str, SortOrder] = {
    "ASC": "ASC",
    "ASCENDING": "ASC",
    "DESC": "DESC",
    "DESCENDING": "DESC",
}


@dataclass(frozen=True)
class FieldRule:
    field: str
    required: bool = False
    required_if: tuple[str, ...] = ()
    choices: frozenset[str] | None = None
    pattern: re.Pattern[str] | None = None


QUERY_REQUEST_RULES: tuple[FieldRule, ...] = (
    FieldRule("partition_key", required=True),
    FieldRule("partition_key_type", required=True, choices=_TYPE_TAGS),
    FieldRule("partition_key_prop", required=True),
    FieldRule("sort_key", required_if=("comparator",)),
    FieldRule("sort_key_type", required_if=("comparator",), choices=_TYPE_TAGS),
    FieldRule("sort_key_prop", required_if=("comparator", "sort_key")),
    FieldRule("sort_key_value2_type", choices=_TYPE_TAGS),
    FieldRule("index_name", pattern=_INDEX_NAME),
)


def _param(field: str) -> str:
    return FIELD_PARAMETERS.get(field, field)


def check_query_request(
    request: QueryRequest,
    rules: Sequence[FieldRule] = QUERY_REQUEST_RULES,
) -> list[FieldIssue]:
    """Evaluate ``rules`` against ``request`` and return every violation found."""
    issues: list[FieldIssue] = []
    for rule in rules:
        value = getattr(request, rule.field)
        present = value is not None and value != ""

        if not present:
            if rule.required:
                issues.append(FieldIssue(_param(rule.field), "is required"))
                continue
            triggers = [t for t in rule.required_if if getattr(request, t) not in (None, "")]
            if triggers:
                issues.append(
                    FieldIssue(
                        _param(rule.field),
                        f"is required when {_param(triggers[0])} is present",
                    )
                )
            continue

        if rule.choices is not None and str(value) not in rule.choices:
            issues.append(FieldIssue(_param(rule.field), f"must be one of {sorted(rule.choices)}"))
        if rule.pattern is not None and rule.pattern.match(str(value)) is None:
            issues.append(FieldIssue(_param(rule.field), "has an invalid format"))

    return issues


def clamp_limit(limit: int, max_limit: int = MAX_LIMIT) -> int:
    return max(MIN_LIMIT, min(max_limit, limit))


def normalize_sorting(raw: str | None) -> SortOrder | None:
    if raw is None:
        return None
    value = raw.strip().upper()
    if not value:
        return None
    sort = _SORT_ALIASES.get(value)
    if sort is None:
        logger.warning("ignoring unrecognized sorting value %r", raw)
    return sort


def normalize_params(
    raw: Mapping[str, Any],
    *,
    max_limit: int = MAX_LIMIT,
) -> tuple[dict[str, Any], list[FieldIssue]]:
    """Map raw query-string parameters onto ``QueryRequest`` field values.

    Strings are trimmed and blanks dropped; ``limit`` is parsed and clamped,
    ``sorting`` is canonicalized, and type tags are upper-cased. Parameters
    this module does not know about are ignored.
    """
    params: dict[str, Any] = {}
    issues: list[FieldIssue] = []
    for name, value in raw.items():
        field = RAW_PARAMETERS.get(name)
        if field is None or value is None:
            continue
        text = str(value).strip()
        if not text:
            continue

        if field == "limit":
            try:
                params["limit"] = clamp_limit(int(text), max_limit)
            except ValueError:
                issues.append(FieldIssue(name, "must be an integer"))
            continue
        if field == "sorting":
            sort = normalize_sorting(text)
            if sort is not None:
                params["sorting"] = sort
            continue
        if field.endswith("_type"):
            text = text.upper()
        params[field] = text
    return params, issues


def _validated(request: QueryRequest, context: str, max_limit: int) -> QueryRequest:
    if request.limit is not None:
        request = request.with_updates(limit=clamp_limit(request.limit, max_limit))
    issues = check_query_request(request)
    if issues:
        err = ValidationError(context, issues)
        logger.warning("%s", err)
        raise err
    return request


def resolve_query_request(
    raw: Mapping[str, Any] | None,
    default: QueryRequest,
    *,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> QueryRequest:
    """Resolve client query parameters against a caller-defined default request.

    1. No parameters: the default is validated and returned.
    2. Only ``limit``/``sorting``: they are applied on top of the default.
    3. ``index`` matches the default's index and no ``pKey`` is given: the
       partition key comes from the default; sort-key, cursor and sorting
       parameters override the default's values.
    4. Anything else: the request is built from the parameters alone, with the
       default's index name and ``default_limit`` as the only fallbacks.
    """
    params, issues = normalize_params(raw or {}, max_limit=max_limit)
    if issues:
        err = ValidationError("bad request", issues)
        logger.warning("%s", err)
        raise err

    if not params:
        return _validated(default, "invalid default query", max_limit)

    if set(params) <= _PAGING_ONLY_FIELDS:
        return _validated(default.with_updates(**params), "bad request", max_limit)

    raw_index = params.get("index_name")
    if raw_index is not None and raw_index == default.index_name and not params.get("partition_key"):
        merged: dict[str, Any] = {f: getattr(default, f) for f in _PARTITION_FIELDS}
        merged["index_name"] = default.index_name
        for f in _INHERITABLE_FIELDS:
            merged[f] = params.get(f) or getattr(default, f)
        merged["limit"] = params.get("limit") or default.limit or default_limit
        return _validated(QueryRequest(**merged), "bad request", max_limit)

    built = dict(params)
    built.setdefault("index_name", default.index_name)
    built.setdefault("limit", default_limit)
    return _validated(QueryRequest(**built), "bad request", max_limit)


def query_params_from_event(event: Mapping[str, Any] | None) -> dict[str, str]:
    """Return the query-string parameters of an API Gateway proxy event."""
    if not event:
        return {}
    params = event.get("queryStringParameters") or {}
    return {str(k): str(v) for k, v in params.items() if v is not None}
