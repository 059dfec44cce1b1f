from __future__ import annotations

import json
import re
from importlib.resources import files
from typing import TYPE_CHECKING, Any

from .attributes import ExpressionAttributeMap, alias_path, alias_projection, merge_attribute_maps
from .commands import (
    GetCommand,
    PutCommand,
    QueryCommand,
    UpdateCommand,
    build_get_command,
    build_put_command,
    build_query_command,
    build_update_command,
)
from .conditions import Condition, build_status_condition
from .errors import (
    ComparatorError,
    CursorError,
    DynaexprError,
    EmptyUpdateError,
    ErrorKind,
    FieldIssue,
    StorageEngineError,
    UnsupportedTypeError,
    ValidationError,
    error_response,
    json_response,
)
from .key_condition import Comparator, build_key_condition, resolve_comparator
from .pagination import Cursor, decode_cursor, encode_cursor
from .query import Page, QueryRequest
from .reserved import RESERVED_WORDS, ReservedWordTable, is_reserved
from .typed_value import TypedValue, TypeTag, parse_typed_value
from .update_builder import UpdateBuilder, generate_update, resolve_update
from .validation import resolve_query_request

if TYPE_CHECKING:
    from .config import Settings, configure_logging, load_query_profiles
    from .gateway import StorageGateway
    from .runtime import create_lambda_boto3_config, get_lambda_dynamodb_client, is_lambda_environment


def _read_repo_version() -> str:
    try:
        data = json.loads(files(__package__).joinpath("version.json").read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return "0.0.0"

    version = data.get("version")
    return version if isinstance(version, str) and version else "0.0.0"


def _normalize_repo_version(repo_version: str) -> str:
    match = re.match(r"^(\d+\.\d+\.\d+)-rc\.?([0-9]+)$", repo_version)
    if match:
        return f"{match.group(1)}rc{match.group(2)}"
    return repo_version


__repo_version__ = _read_repo_version()
__version__ = _normalize_repo_version(__repo_version__)


def __getattr__(name: str) -> Any:
    if name == "StorageGateway":
        from .gateway import StorageGateway

        return StorageGateway
    if name in {"Settings", "configure_logging", "load_query_profiles"}:
        from . import config

        return getattr(config, name)
    if name in {"create_lambda_boto3_config", "get_lambda_dynamodb_client", "is_lambda_environment"}:
        from . import runtime

        return getattr(runtime, name)
    raise AttributeError(name)


__all__ = [
    "Comparator",
    "ComparatorError",
    "Condition",
    "Cursor",
    "CursorError",
    "DynaexprError",
    "EmptyUpdateError",
    "ErrorKind",
    "ExpressionAttributeMap",
    "FieldIssue",
    "GetCommand",
    "Page",
    "PutCommand",
    "QueryCommand",
    "QueryRequest",
    "RESERVED_WORDS",
    "ReservedWordTable",
    "Settings",
    "StorageEngineError",
    "StorageGateway",
    "TypeTag",
    "TypedValue",
    "UnsupportedTypeError",
    "UpdateBuilder",
    "UpdateCommand",
    "ValidationError",
    "__repo_version__",
    "__version__",
    "alias_path",
    "alias_projection",
    "build_get_command",
    "build_key_condition",
    "build_put_command",
    "build_query_command",
    "build_status_condition",
    "build_update_command",
    "configure_logging",
    "create_lambda_boto3_config",
    "decode_cursor",
    "encode_cursor",
    "error_response",
    "generate_update",
    "get_lambda_dynamodb_client",
    "is_lambda_environment",
    "is_reserved",
    "json_response",
    "load_query_profiles",
    "merge_attribute_maps",
    "parse_typed_value",
    "resolve_comparator",
    "resolve_query_request",
    "resolve_update",
]
