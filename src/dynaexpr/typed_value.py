from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import Any

from .errors import UnsupportedTypeError


class TypeTag(StrEnum):
    S = "S"
    N = "N"
    BOOL = "BOOL"
    NULL = "NULL"
    M = "M"
    L = "L"
    SS = "SS"
    NS = "NS"
    BS = "BS"


def resolve_type_tag(tag: str | TypeTag) -> TypeTag:
    if isinstance(tag, TypeTag):
        return tag
    try:
        return TypeTag(str(tag).strip().upper())
    except ValueError:
        raise UnsupportedTypeError(f"unsupported type tag: {tag}", tag=str(tag)) from None


@dataclass(frozen=True)
class TypedValue:
    tag: TypeTag
    value: Any

    @staticmethod
    def parse(raw: str, tag: str | TypeTag) -> TypedValue:
        resolved = resolve_type_tag(tag)
        return TypedValue(tag=resolved, value=_parse(raw, resolved))

    def format(self) -> tuple[str, str]:
        return _format(self.value, self.tag), self.tag.value


def parse_typed_value(raw: str, tag: str | TypeTag) -> Any:
    return TypedValue.parse(raw, tag).value


def _split_items(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",")]


def _parse_number(raw: str) -> Decimal:
    try:
        num = Decimal(raw.strip())
    except InvalidOperation:
        raise UnsupportedTypeError(f"invalid number for type N: {raw!r}", tag="N") from None
    if not num.is_finite():
        raise UnsupportedTypeError(f"invalid number for type N: {raw!r}", tag="N")
    return num


def _parse_json(raw: str, tag: TypeTag, expected: type) -> Any:
    label = "Map" if tag is TypeTag.M else "List"
    try:
        parsed = json.loads(raw, parse_float=Decimal)
    except json.JSONDecodeError:
        raise UnsupportedTypeError(f"invalid JSON format for type {tag} ({label})", tag=tag.value) from None
    if not isinstance(parsed, expected):
        raise UnsupportedTypeError(f"JSON for type {tag} must be a {label.lower()}", tag=tag.value)
    return parsed


def _parse(raw: str, tag: TypeTag) -> Any:
    match tag:
        case TypeTag.S:
            return raw
        case TypeTag.N:
            return _parse_number(raw)
        case TypeTag.BOOL:
            return raw.strip().lower() == "true"
        case TypeTag.NULL:
            return None
        case TypeTag.M:
            return _parse_json(raw, tag, dict)
        case TypeTag.L:
            return _parse_json(raw, tag, list)
        case TypeTag.SS:
            return set(_split_items(raw))
        case TypeTag.NS:
            # Unparseable items are dropped, not reported.
            out: set[Decimal] = set()
            for item in _split_items(raw):
                try:
                    num = Decimal(item)
                except InvalidOperation:
                    continue
                if num.is_finite():
                    out.add(num)
            return out
        case TypeTag.BS:
            try:
                return {base64.b64decode(item, validate=True) for item in _split_items(raw)}
            except binascii.Error:
                raise UnsupportedTypeError("invalid base64 item for type BS", tag=tag.value) from None


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    raise TypeError(f"unsupported JSON value: {type(value).__name__}")


def _format(value: Any, tag: TypeTag) -> str:
    match tag:
        case TypeTag.S:
            return str(value)
        case TypeTag.N:
            return str(value)
        case TypeTag.BOOL:
            return "true" if value else "false"
        case TypeTag.NULL:
            return ""
        case TypeTag.M | TypeTag.L:
            return json.dumps(value, separators=(",", ":"), sort_keys=True, default=_json_default)
        case TypeTag.SS:
            return ",".join(sorted(value))
        case TypeTag.NS:
            return ",".join(str(v) for v in sorted(value))
        case TypeTag.BS:
            return ",".join(sorted(base64.b64encode(bytes(v)).decode("ascii") for v in value))
