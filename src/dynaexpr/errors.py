from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    VALIDATION = "validation"
    COMPARATOR = "comparator"
    UNSUPPORTED_TYPE = "unsupported_type"
    CURSOR = "cursor"
    EMPTY_UPDATE = "empty_update"
    STORAGE_ENGINE = "storage_engine"


class DynaexprError(Exception):
    kind: ErrorKind
    http_status: int = 400


@dataclass(frozen=True)
class FieldIssue:
    path: str
    message: str


class ValidationError(DynaexprError):
    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, issues: Sequence[FieldIssue] = ()) -> None:
        self.issues = tuple(issues)
        if self.issues:
            detail = ", ".join(f"{issue.path}: {issue.message}" for issue in self.issues)
            message = f"{message}: {detail}"
        super().__init__(message)

    @property
    def paths(self) -> tuple[str, ...]:
        return tuple(issue.path for issue in self.issues)


class ComparatorError(DynaexprError):
    kind = ErrorKind.COMPARATOR

    def __init__(self, message: str, *, token: str | None = None) -> None:
        super().__init__(message)
        self.token = token


class UnsupportedTypeError(DynaexprError):
    kind = ErrorKind.UNSUPPORTED_TYPE

    def __init__(self, message: str, *, tag: str | None = None) -> None:
        super().__init__(message)
        self.tag = tag


class CursorError(DynaexprError):
    kind = ErrorKind.CURSOR


class EmptyUpdateError(DynaexprError):
    kind = ErrorKind.EMPTY_UPDATE


class StorageEngineError(DynaexprError):
    kind = ErrorKind.STORAGE_ENGINE
    http_status = 500

    def __init__(
        self,
        *,
        code: str,
        message: str,
        operation: str | None = None,
        table_name: str | None = None,
    ) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message
        self.operation = operation
        self.table_name = table_name


def json_response(status_code: int, body: Any) -> dict[str, Any]:
    """Build an API Gateway proxy response with a JSON-encoded body."""
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, default=str),
    }


def error_response(err: DynaexprError) -> dict[str, Any]:
    """Render an error as an API Gateway style response payload.

    Client-facing kinds keep their message; storage failures are reduced to a
    generic body so engine details stay in the logs.
    """
    body: dict[str, Any] = {"error": err.kind.value}
    match err.kind:
        case ErrorKind.VALIDATION:
            assert isinstance(err, ValidationError)
            body["message"] = str(err)
            body["fields"] = list(err.paths)
        case ErrorKind.COMPARATOR | ErrorKind.UNSUPPORTED_TYPE | ErrorKind.CURSOR | ErrorKind.EMPTY_UPDATE:
            body["message"] = str(err)
        case ErrorKind.STORAGE_ENGINE:
            body["message"] = "storage engine request failed"
    return json_response(err.http_status, body)
