from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from types import MappingProxyType
from typing import Any

from botocore.exceptions import ClientError

from .aws_errors import map_client_error
from .commands import Command, GetCommand, PutCommand, QueryCommand, UpdateCommand
from .pagination import encode_cursor
from .query import Page
from .runtime import get_lambda_dynamodb_client
from .serialization import deserialize_map

logger = logging.getLogger(__name__)


class StorageGateway:
    """Sends assembled commands to DynamoDB through a low-level boto3 client.

    The gateway performs no retries of its own; configure them on the client
    (see ``runtime.create_lambda_boto3_config``).
    """

    def __init__(self, client: Any | None = None) -> None:
        self._client: Any = client if client is not None else get_lambda_dynamodb_client()

    def _send(self, cmd: Command) -> Mapping[str, Any]:
        req = cmd.to_client_request()
        logger.debug("dynamodb %s on %s", cmd.operation, cmd.table_name)
        try:
            return getattr(self._client, cmd.operation)(**req)
        except ClientError as err:
            mapped = map_client_error(err, operation=cmd.operation, table_name=cmd.table_name)
            logger.error(
                "dynamodb %s failed on %s: %s",
                cmd.operation,
                cmd.table_name,
                mapped,
            )
            raise mapped from err

    def get(self, cmd: GetCommand) -> dict[str, Any] | None:
        resp = self._send(cmd)
        item = resp.get("Item")
        if not item:
            return None
        return deserialize_map(item)

    def put(self, cmd: PutCommand) -> dict[str, Any]:
        self._send(cmd)
        return dict(cmd.item)

    def _query_page(self, cmd: QueryCommand) -> tuple[list[dict[str, Any]], dict[str, Any] | None]:
        resp = self._send(cmd)
        items = [deserialize_map(item) for item in resp.get("Items", [])]
        last = resp.get("LastEvaluatedKey")
        return items, deserialize_map(last) if last else None

    def query(self, cmd: QueryCommand) -> Page:
        items, last = self._query_page(cmd)
        next_cursor = encode_cursor(last, index=cmd.index_name, sort=cmd.sort_order) if last else None
        return Page(items=items, next_cursor=next_cursor)

    def query_all(self, cmd: QueryCommand) -> list[dict[str, Any]]:
        out: list[dict[str, Any]] = []
        while True:
            items, last = self._query_page(cmd)
            out.extend(items)
            if last is None:
                return out
            cmd = replace(cmd, exclusive_start_key=MappingProxyType(last))

    def update(self, cmd: UpdateCommand) -> dict[str, Any] | None:
        resp = self._send(cmd)
        attrs = resp.get("Attributes")
        if not attrs:
            return None
        return deserialize_map(attrs)

    def describe_table(self, table_name: str) -> dict[str, Any]:
        try:
            resp = self._client.describe_table(TableName=table_name)
        except ClientError as err:
            mapped = map_client_error(err, operation="describe_table", table_name=table_name)
            logger.error("dynamodb describe_table failed on %s: %s", table_name, mapped)
            raise mapped from err
        return dict(resp.get("Table") or {})
