from __future__ import annotations

from botocore.exceptions import ClientError

from .errors import StorageEngineError


def client_error_code(err: ClientError) -> str:
    return str(err.response.get("Error", {}).get("Code", "")) or "UnknownError"


def map_client_error(
    err: ClientError,
    *,
    operation: str | None = None,
    table_name: str | None = None,
) -> StorageEngineError:
    message = str(err.response.get("Error", {}).get("Message", "")) or str(err)
    return StorageEngineError(
        code=client_error_code(err),
        message=message,
        operation=operation or err.operation_name,
        table_name=table_name,
    )
