from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, ClassVar

from .attributes import ExpressionAttributeMap, alias_item_names, alias_projection
from .errors import CursorError, FieldIssue, ValidationError
from .key_condition import Comparator, build_key_condition, key_condition_placeholders, resolve_comparator
from .pagination import SortOrder, decode_cursor
from .query import QueryRequest
from .serialization import serialize_map
from .typed_value import parse_typed_value
from .update_builder import resolve_update
from .validation import check_query_request

RETURN_VALUES = frozenset({"NONE", "ALL_OLD", "UPDATED_OLD", "ALL_NEW", "UPDATED_NEW"})
RETURN_CONSUMED_CAPACITY = frozenset({"INDEXES", "TOTAL", "NONE"})
RETURN_ITEM_COLLECTION_METRICS = frozenset({"SIZE", "NONE"})


def _frozen(values: Mapping[str, Any] | None) -> Mapping[str, Any] | None:
    if not values:
        return None
    return MappingProxyType(dict(values))


def _compact(fields: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for k, v in fields.items():
        if v is None:
            continue
        if isinstance(v, Mapping):
            if not v:
                continue
            v = dict(v)
        out[k] = v
    return out


def _check_choice(name: str, value: str | None, allowed: frozenset[str]) -> None:
    if value is not None and value not in allowed:
        raise ValidationError(f"invalid {name}", [FieldIssue(name, f"must be one of {sorted(allowed)}")])


@dataclass(frozen=True)
class GetCommand:
    operation: ClassVar[str] = "get_item"

    table_name: str
    key: Mapping[str, Any]
    projection_expression: str | None = None
    expression_attribute_names: Mapping[str, str] | None = None
    consistent_read: bool | None = None
    return_consumed_capacity: str | None = None

    def to_request(self) -> dict[str, Any]:
        return _compact(
            {
                "TableName": self.table_name,
                "Key": self.key,
                "ProjectionExpression": self.projection_expression,
                "ExpressionAttributeNames": self.expression_attribute_names,
                "ConsistentRead": self.consistent_read,
                "ReturnConsumedCapacity": self.return_consumed_capacity,
            }
        )

    def to_client_request(self) -> dict[str, Any]:
        req = self.to_request()
        req["Key"] = serialize_map(self.key)
        return req


@dataclass(frozen=True)
class PutCommand:
    operation: ClassVar[str] = "put_item"

    table_name: str
    item: Mapping[str, Any]
    condition_expression: str | None = None
    expression_attribute_names: Mapping[str, str] | None = None
    expression_attribute_values: Mapping[str, Any] | None = None
    return_values: str = "NONE"
    return_consumed_capacity: str | None = None
    return_item_collection_metrics: str | None = None

    def to_request(self) -> dict[str, Any]:
        return _compact(
            {
                "TableName": self.table_name,
                "Item": self.item,
                "ConditionExpression": self.condition_expression,
                "ExpressionAttributeNames": self.expression_attribute_names,
                "ExpressionAttributeValues": self.expression_attribute_values,
                "ReturnValues": self.return_values,
                "ReturnConsumedCapacity": self.return_consumed_capacity,
                "ReturnItemCollectionMetrics": self.return_item_collection_metrics,
            }
        )

    def to_client_request(self) -> dict[str, Any]:
        req = self.to_request()
        req["Item"] = serialize_map(self.item)
        if self.expression_attribute_values:
            req["ExpressionAttributeValues"] = serialize_map(self.expression_attribute_values)
        return req


@dataclass(frozen=True)
class QueryCommand:
    operation: ClassVar[str] = "query"

    table_name: str
    key_condition_expression: str
    expression_attribute_names: Mapping[str, str] | None = None
    expression_attribute_values: Mapping[str, Any] | None = None
    index_name: str | None = None
    projection_expression: str | None = None
    filter_expression: str | None = None
    scan_index_forward: bool | None = None
    limit: int | None = None
    exclusive_start_key: Mapping[str, Any] | None = None
    consistent_read: bool | None = None
    return_consumed_capacity: str | None = None

    @property
    def sort_order(self) -> SortOrder:
        return "DESC" if self.scan_index_forward is False else "ASC"

    def to_request(self) -> dict[str, Any]:
        return _compact(
            {
                "TableName": self.table_name,
                "IndexName": self.index_name,
                "KeyConditionExpression": self.key_condition_expression,
                "ExpressionAttributeNames": self.expression_attribute_names,
                "ExpressionAttributeValues": self.expression_attribute_values,
                "ProjectionExpression": self.projection_expression,
                "FilterExpression": self.filter_expression,
                "ScanIndexForward": self.scan_index_forward,
                "Limit": self.limit,
                "ExclusiveStartKey": self.exclusive_start_key,
                "ConsistentRead": self.consistent_read,
                "ReturnConsumedCapacity": self.return_consumed_capacity,
            }
        )

    def to_client_request(self) -> dict[str, Any]:
        req = self.to_request()
        if self.expression_attribute_values:
            req["ExpressionAttributeValues"] = serialize_map(self.expression_attribute_values)
        if self.exclusive_start_key:
            req["ExclusiveStartKey"] = serialize_map(self.exclusive_start_key)
        return req


@dataclass(frozen=True)
class UpdateCommand:
    operation: ClassVar[str] = "update_item"

    table_name: str
    key: Mapping[str, Any]
    update_expression: str
    condition_expression: str | None = None
    expression_attribute_names: Mapping[str, str] | None = None
    expression_attribute_values: Mapping[str, Any] | None = None
    return_values: str = "NONE"
    return_consumed_capacity: str | None = None
    return_item_collection_metrics: str | None = None

    def to_request(self) -> dict[str, Any]:
        return _compact(
            {
                "TableName": self.table_name,
                "Key": self.key,
                "UpdateExpression": self.update_expression,
                "ConditionExpression": self.condition_expression,
                "ExpressionAttributeNames": self.expression_attribute_names,
                "ExpressionAttributeValues": self.expression_attribute_values,
                "ReturnValues": self.return_values,
                "ReturnConsumedCapacity": self.return_consumed_capacity,
                "ReturnItemCollectionMetrics": self.return_item_collection_metrics,
            }
        )

    def to_client_request(self) -> dict[str, Any]:
        req = self.to_request()
        req["Key"] = serialize_map(self.key)
        if self.expression_attribute_values:
            req["ExpressionAttributeValues"] = serialize_map(self.expression_attribute_values)
        return req


type Command = GetCommand | PutCommand | QueryCommand | UpdateCommand


def build_get_command(
    table_name: str,
    key: Mapping[str, Any],
    *,
    projection: str | None = None,
    extra_names: Mapping[str, str] | None = None,
    consistent_read: bool | None = None,
    return_consumed_capacity: str | None = None,
) -> GetCommand:
    _check_choice("ReturnConsumedCapacity", return_consumed_capacity, RETURN_CONSUMED_CAPACITY)

    projection_expression: str | None = None
    attrs = ExpressionAttributeMap()
    if projection:
        projection_expression, names = alias_projection(projection)
        attrs = attrs.merge(names)
    attrs = attrs.merge(extra_names)

    return GetCommand(
        table_name=table_name,
        key=MappingProxyType(dict(key)),
        projection_expression=projection_expression,
        expression_attribute_names=_frozen(attrs.names),
        consistent_read=consistent_read,
        return_consumed_capacity=return_consumed_capacity,
    )


def build_put_command(
    table_name: str,
    item: Mapping[str, Any],
    *,
    condition_expression: str | None = None,
    extra_names: Mapping[str, str] | None = None,
    extra_values: Mapping[str, Any] | None = None,
    return_values: str = "NONE",
    return_consumed_capacity: str | None = None,
    return_item_collection_metrics: str | None = None,
) -> PutCommand:
    """Build a put command.

    When a condition is present, reserved item attributes the condition refers
    to as ``#name`` get their alias registered; caller names win on conflict.
    """
    _check_choice("ReturnValues", return_values, RETURN_VALUES)
    _check_choice("ReturnConsumedCapacity", return_consumed_capacity, RETURN_CONSUMED_CAPACITY)
    _check_choice("ReturnItemCollectionMetrics", return_item_collection_metrics, RETURN_ITEM_COLLECTION_METRICS)

    generated: dict[str, str] = {}
    if condition_expression:
        generated = alias_item_names(item.keys(), condition_expression)
    attrs = ExpressionAttributeMap(names=generated).merge(extra_names, extra_values)

    return PutCommand(
        table_name=table_name,
        item=MappingProxyType(dict(item)),
        condition_expression=condition_expression or None,
        expression_attribute_names=_frozen(attrs.names),
        expression_attribute_values=_frozen(attrs.values),
        return_values=return_values,
        return_consumed_capacity=return_consumed_capacity,
        return_item_collection_metrics=return_item_collection_metrics,
    )


def _key_attributes(request: QueryRequest) -> ExpressionAttributeMap:
    comparator = resolve_comparator(request.comparator)
    placeholders = key_condition_placeholders(request.sort_key, comparator)

    names: dict[str, str] = {"#pk": str(request.partition_key_prop)}
    values: dict[str, Any] = {
        ":pk": parse_typed_value(str(request.partition_key), str(request.partition_key_type)),
    }
    if len(placeholders) > 1:
        names["#sk"] = str(request.sort_key_prop)
    if ":sk" in placeholders:
        values[":sk"] = parse_typed_value(str(request.sort_key), request.sort_key_type or "S")
    if ":skValue2" in placeholders:
        if comparator is Comparator.BEGINS_WITH and not request.sort_key_value2:
            # begins_with compares against the sort key value itself.
            raw, tag = str(request.sort_key), request.sort_key_type or "S"
        else:
            raw, tag = str(request.sort_key_value2), request.sort_key_value2_type or "S"
        values[":skValue2"] = parse_typed_value(raw, tag)
    return ExpressionAttributeMap(names=names, values=values)


def build_query_command(
    table_name: str,
    request: QueryRequest,
    *,
    projection: str | None = None,
    filter_expression: str | None = None,
    extra_names: Mapping[str, str] | None = None,
    extra_values: Mapping[str, Any] | None = None,
    scan_forward: bool | None = None,
    consistent_read: bool | None = None,
    return_consumed_capacity: str | None = None,
) -> QueryCommand:
    """Assemble a query command from a validated ``QueryRequest``.

    Name and value maps are layered as: projection aliases, key placeholders,
    then the caller's extras. ``request.sorting`` takes precedence over
    ``scan_forward``; the cursor must have been issued for the same index and
    sort order.
    """
    issues = check_query_request(request)
    if issues:
        raise ValidationError("invalid query request", issues)
    _check_choice("ReturnConsumedCapacity", return_consumed_capacity, RETURN_CONSUMED_CAPACITY)

    key_expr = build_key_condition(request.sort_key, request.sort_key_value2, request.comparator)
    key_attrs = _key_attributes(request)

    projection_expression: str | None = None
    attrs = ExpressionAttributeMap()
    if projection:
        projection_expression, names = alias_projection(projection)
        attrs = attrs.merge(names)
    attrs = attrs.merge(key_attrs.names, key_attrs.values).merge(extra_names, extra_values)

    if request.sorting is not None:
        scan_forward = request.sorting == "ASC"

    start_key: Mapping[str, Any] | None = None
    cursor = decode_cursor(request.cursor)
    if cursor is not None:
        if cursor.index is not None and cursor.index != request.index_name:
            raise CursorError("cursor index does not match query")
        expected_sort = "DESC" if scan_forward is False else "ASC"
        if cursor.sort is not None and cursor.sort != expected_sort:
            raise CursorError("cursor sort does not match query")
        start_key = MappingProxyType(dict(cursor.last_key))

    return QueryCommand(
        table_name=table_name,
        key_condition_expression=key_expr,
        expression_attribute_names=_frozen(attrs.names),
        expression_attribute_values=_frozen(attrs.values),
        index_name=request.index_name,
        projection_expression=projection_expression,
        filter_expression=filter_expression or None,
        scan_index_forward=scan_forward,
        limit=request.limit,
        exclusive_start_key=start_key,
        consistent_read=consistent_read,
        return_consumed_capacity=return_consumed_capacity,
    )


def build_update_command(
    table_name: str,
    key: Mapping[str, Any],
    *,
    item: Mapping[str, Any] | None = None,
    update_expression: str | None = None,
    condition_expression: str | None = None,
    names: Mapping[str, str] | None = None,
    values: Mapping[str, Any] | None = None,
    extra_names: Mapping[str, str] | None = None,
    extra_values: Mapping[str, Any] | None = None,
    return_values: str = "NONE",
    return_consumed_capacity: str | None = None,
    return_item_collection_metrics: str | None = None,
) -> UpdateCommand:
    _check_choice("ReturnValues", return_values, RETURN_VALUES)
    _check_choice("ReturnConsumedCapacity", return_consumed_capacity, RETURN_CONSUMED_CAPACITY)
    _check_choice("ReturnItemCollectionMetrics", return_item_collection_metrics, RETURN_ITEM_COLLECTION_METRICS)

    clause = resolve_update(
        item=item,
        update_expression=update_expression,
        names=names,
        values=values,
        extra_names=extra_names,
        extra_values=extra_values,
    )

    return UpdateCommand(
        table_name=table_name,
        key=MappingProxyType(dict(key)),
        update_expression=clause.expression,
        condition_expression=condition_expression or None,
        expression_attribute_names=_frozen(clause.attributes.names),
        expression_attribute_values=_frozen(clause.attributes.values),
        return_values=return_values,
        return_consumed_capacity=return_consumed_capacity,
        return_item_collection_metrics=return_item_collection_metrics,
    )
