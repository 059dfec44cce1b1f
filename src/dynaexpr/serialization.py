from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from boto3.dynamodb.types import Binary, TypeDeserializer, TypeSerializer

_SER = TypeSerializer()
_DESER = TypeDeserializer()


def to_native(value: Any) -> Any:
    """Normalize a Python value into something ``TypeSerializer`` accepts."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, Mapping):
        return {str(k): to_native(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_native(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return {to_native(v) for v in value}
    return value


def serialize_value(value: Any) -> dict[str, Any]:
    return _SER.serialize(to_native(value))


def serialize_map(values: Mapping[str, Any]) -> dict[str, Any]:
    return {k: serialize_value(v) for k, v in values.items()}


def _unwrap(value: Any) -> Any:
    if isinstance(value, Binary):
        return bytes(value.value)
    if isinstance(value, dict):
        return {k: _unwrap(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_unwrap(v) for v in value]
    if isinstance(value, set):
        return {_unwrap(v) for v in value}
    return value


def deserialize_value(av: Mapping[str, Any]) -> Any:
    return _unwrap(_DESER.deserialize(dict(av)))


def deserialize_map(item: Mapping[str, Any]) -> dict[str, Any]:
    return {k: deserialize_value(v) for k, v in item.items()}
