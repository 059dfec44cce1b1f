from __future__ import annotations

from collections import deque
from collections.abc import Mapping
from typing import Any, NamedTuple

from botocore.exceptions import ClientError

ANY: Any = type("_Any", (), {"__repr__": lambda self: "ANY"})()


def client_error(code: str, message: str = "", *, operation: str = "Query") -> ClientError:
    """Build a botocore ``ClientError`` shaped like a DynamoDB service error."""
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def _first_difference(expected: Mapping[str, Any], actual: Mapping[str, Any], prefix: str) -> str | None:
    for name, want in expected.items():
        where = f"{prefix}.{name}"
        if name not in actual:
            return f"{where} is missing"
        got = actual[name]
        if want is ANY:
            continue
        if isinstance(want, Mapping) and isinstance(got, Mapping):
            diff = _first_difference(want, got, where)
            if diff:
                return diff
        elif want != got:
            return f"{where}: expected {want!r}, got {got!r}"
    return None


class _Scripted(NamedTuple):
    operation: str
    request: Mapping[str, Any] | None
    response: Mapping[str, Any] | None
    error: Exception | None


class FakeDynamoDBClient:
    """Low-level DynamoDB client double that replays a script of calls.

    Each ``expect`` queues one call; request parameters listed there must be
    present in the real call (nested maps compare by subset, ``ANY`` skips a
    value). Every call made is recorded, matched or not.
    """

    def __init__(self) -> None:
        self._script: deque[_Scripted] = deque()
        self._log: list[tuple[str, dict[str, Any]]] = []

    def expect(
        self,
        operation: str,
        request: Mapping[str, Any] | None = None,
        *,
        response: Mapping[str, Any] | None = None,
        error: Exception | None = None,
    ) -> FakeDynamoDBClient:
        self._script.append(_Scripted(operation, request, response, error))
        return self

    def assert_no_pending(self) -> None:
        if self._script:
            left = ", ".join(step.operation for step in self._script)
            raise AssertionError(f"script not exhausted: {left}")

    def requests(self, operation: str) -> list[dict[str, Any]]:
        return [params for name, params in self._log if name == operation]

    def _replay(self, operation: str, params: dict[str, Any]) -> dict[str, Any]:
        self._log.append((operation, params))
        if not self._script:
            raise AssertionError(f"{operation} called with nothing scripted")
        step = self._script.popleft()
        if step.operation != operation:
            raise AssertionError(f"{operation} called, {step.operation} was scripted")
        if step.request is not None:
            diff = _first_difference(step.request, params, operation)
            if diff:
                raise AssertionError(diff)
        if step.error is not None:
            raise step.error
        return dict(step.response or {})

    def get_item(self, **params: Any) -> dict[str, Any]:
        return self._replay("get_item", params)

    def put_item(self, **params: Any) -> dict[str, Any]:
        return self._replay("put_item", params)

    def query(self, **params: Any) -> dict[str, Any]:
        return self._replay("query", params)

    def update_item(self, **params: Any) -> dict[str, Any]:
        return self._replay("update_item", params)

    def describe_table(self, **params: Any) -> dict[str, Any]:
        return self._replay("describe_table", params)
