from __future__ import annotations

import json
from decimal import Decimal

from botocore.exceptions import ClientError

from dynaexpr.aws_errors import map_client_error
from dynaexpr.errors import (
    ComparatorError,
    CursorError,
    ErrorKind,
    FieldIssue,
    StorageEngineError,
    ValidationError,
    error_response,
    json_response,
)


def test_validation_error_lists_issue_paths() -> None:
    err = ValidationError("bad request", [FieldIssue("pKey", "is required"), FieldIssue("limit", "must be an integer")])
    assert str(err) == "bad request: pKey: is required, limit: must be an integer"
    assert err.paths == ("pKey", "limit")
    assert err.kind is ErrorKind.VALIDATION


def test_error_response_shapes() -> None:
    resp = error_response(ValidationError("bad request", [FieldIssue("pKey", "is required")]))
    assert resp["statusCode"] == 400
    assert resp["headers"] == {"Content-Type": "application/json"}
    assert isinstance(resp["body"], str)
    assert json.loads(resp["body"]) == {
        "error": "validation",
        "message": "bad request: pKey: is required",
        "fields": ["pKey"],
    }

    assert json.loads(error_response(ComparatorError("invalid comparator: X", token="X"))["body"]) == {
        "error": "comparator",
        "message": "invalid comparator: X",
    }
    assert error_response(CursorError("cursor is malformed"))["statusCode"] == 400


def test_storage_errors_hide_engine_details() -> None:
    err = StorageEngineError(code="InternalServerError", message="disk on fire", operation="query")
    resp = error_response(err)
    assert resp["statusCode"] == 500
    assert json.loads(resp["body"]) == {"error": "storage_engine", "message": "storage engine request failed"}


def test_json_response_stringifies_decimals() -> None:
    resp = json_response(200, {"items": [{"pk": "a", "n": Decimal("1.5")}], "lastEvaluatedKey": None})
    assert json.loads(resp["body"]) == {"items": [{"pk": "a", "n": "1.5"}], "lastEvaluatedKey": None}


def test_map_client_error() -> None:
    err = ClientError({"Error": {"Code": "ValidationException", "Message": "bad"}}, "Query")
    mapped = map_client_error(err, table_name="orders")
    assert mapped.code == "ValidationException"
    assert mapped.message == "bad"
    assert mapped.operation == "Query"
    assert mapped.table_name == "orders"

    unknown = map_client_error(ClientError({}, "GetItem"), operation="get_item")
    assert unknown.code == "UnknownError"
    assert unknown.operation == "get_item"
