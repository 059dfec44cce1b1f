from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Literal

from .errors import CursorError
from .serialization import deserialize_value, serialize_map

type SortOrder = Literal["ASC", "DESC"]

_SCALAR_STRING_KINDS = {"S", "N"}
_STRING_LIST_KINDS = {"SS", "NS"}


@dataclass(frozen=True)
class Cursor:
    last_key: dict[str, Any]
    index: str | None = None
    sort: SortOrder | None = None


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _av_to_json(av: Mapping[str, Any]) -> dict[str, Any]:
    ((kind, value),) = av.items()
    if kind == "B":
        return {"B": _b64(bytes(value))}
    if kind == "BS":
        return {"BS": sorted(_b64(bytes(v)) for v in value)}
    if kind in _STRING_LIST_KINDS:
        return {kind: sorted(value)}
    if kind == "L":
        return {"L": [_av_to_json(v) for v in value]}
    if kind == "M":
        return {"M": {k: _av_to_json(value[k]) for k in sorted(value)}}
    return {kind: value}


def _av_from_json(enc: Any) -> dict[str, Any]:
    if not isinstance(enc, dict) or len(enc) != 1:
        raise ValueError("attribute value must be a single-key map")
    ((kind, value),) = enc.items()

    if kind in _SCALAR_STRING_KINDS:
        if not isinstance(value, str):
            raise ValueError(f"{kind} value must be a string")
        return {kind: value}
    if kind == "B":
        if not isinstance(value, str):
            raise ValueError("B value must be a base64 string")
        return {"B": base64.b64decode(value, validate=True)}
    if kind == "BOOL":
        if not isinstance(value, bool):
            raise ValueError("BOOL value must be a boolean")
        return {"BOOL": value}
    if kind == "NULL":
        if value is not True:
            raise ValueError("NULL value must be true")
        return {"NULL": True}
    if kind in _STRING_LIST_KINDS:
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ValueError(f"{kind} value must be a list of strings")
        return {kind: value}
    if kind == "BS":
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ValueError("BS value must be a list of base64 strings")
        return {"BS": [base64.b64decode(v, validate=True) for v in value]}
    if kind == "L":
        if not isinstance(value, list):
            raise ValueError("L value must be a list")
        return {"L": [_av_from_json(v) for v in value]}
    if kind == "M":
        if not isinstance(value, dict):
            raise ValueError("M value must be a map")
        return {"M": {str(k): _av_from_json(v) for k, v in value.items()}}

    raise ValueError(f"unsupported attribute value type: {kind}")


def encode_cursor(
    last_key: Mapping[str, Any] | None,
    *,
    index: str | None = None,
    sort: SortOrder | None = None,
) -> str:
    """Encode a key-attribute map (native values) as an opaque, URL-safe cursor.

    The payload is canonical JSON (sorted keys, compact separators) holding the
    typed key plus the index and sort order the page was read with.

    Numbers travel as DynamoDB ``N`` strings, so ``decode_cursor`` hands every
    number back as ``Decimal`` (``0.1`` becomes ``Decimal("0.1")``). An empty or
    missing key encodes as ``""``, which decodes to ``None``: the first page.
    """
    if not last_key:
        return ""
    if not isinstance(last_key, Mapping):
        raise CursorError("last_key must be a map")

    try:
        typed = serialize_map(last_key)
    except TypeError as err:
        raise CursorError(f"last_key is not serializable: {err}") from err

    payload: dict[str, Any] = {"lastKey": {k: _av_to_json(typed[k]) for k in sorted(typed)}}
    if index is not None:
        payload["index"] = index
    if sort is not None:
        payload["sort"] = sort

    data = json.dumps(payload, separators=(",", ":"), sort_keys=True, ensure_ascii=False).encode("utf-8")
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _decode_legacy(raw: str) -> Cursor:
    try:
        parsed = json.loads(raw, parse_float=Decimal)
    except json.JSONDecodeError as err:
        raise CursorError("cursor is not valid JSON") from err
    if not isinstance(parsed, dict) or not parsed:
        raise CursorError("cursor must decode to a non-empty object")
    return Cursor(last_key=parsed)


def decode_cursor(cursor: str | None) -> Cursor | None:
    """Decode a cursor produced by ``encode_cursor``.

    Empty or missing cursors mean "start of the result set" and return ``None``.
    A raw JSON object (the plain ``LastEvaluatedKey`` form older clients send) is
    accepted as-is.
    """
    raw = str(cursor or "").strip()
    if not raw:
        return None
    if raw.startswith("{"):
        return _decode_legacy(raw)

    try:
        padding = "=" * (-len(raw) % 4)
        data = base64.urlsafe_b64decode(raw + padding).decode("utf-8")
        parsed = json.loads(data)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError, ValueError) as err:
        raise CursorError("cursor is malformed") from err

    if not isinstance(parsed, dict):
        raise CursorError("cursor must decode to an object")

    last_key_raw = parsed.get("lastKey")
    if not isinstance(last_key_raw, dict) or not last_key_raw:
        raise CursorError("cursor lastKey is invalid")

    try:
        last_key = {str(k): deserialize_value(_av_from_json(v)) for k, v in last_key_raw.items()}
    except (ValueError, TypeError, binascii.Error) as err:
        raise CursorError(f"cursor lastKey is invalid: {err}") from err

    index = parsed.get("index")
    sort = parsed.get("sort")
    return Cursor(
        last_key=last_key,
        index=index if isinstance(index, str) else None,
        sort=sort if sort in {"ASC", "DESC"} else None,
    )
