from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import yaml

from .errors import FieldIssue, ValidationError
from .query import DEFAULT_LIMIT, MAX_LIMIT, RAW_PARAMETERS, QueryRequest
from .validation import normalize_params

_LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = (environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as err:
        raise ValidationError("invalid configuration", [FieldIssue(name, "must be an integer")]) from err
    if value < 1:
        raise ValidationError("invalid configuration", [FieldIssue(name, "must be >= 1")])
    return value


@dataclass(frozen=True)
class Settings:
    region: str | None = None
    table_name: str | None = None
    default_limit: int = DEFAULT_LIMIT
    max_limit: int = MAX_LIMIT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = os.environ) -> Settings:
        log_level = (environ.get("DYNAEXPR_LOG_LEVEL") or "INFO").strip().upper()
        if log_level not in _LOG_LEVELS:
            raise ValidationError(
                "invalid configuration",
                [FieldIssue("DYNAEXPR_LOG_LEVEL", f"must be one of {sorted(_LOG_LEVELS)}")],
            )

        default_limit = _env_int(environ, "DYNAEXPR_DEFAULT_LIMIT", DEFAULT_LIMIT)
        max_limit = _env_int(environ, "DYNAEXPR_MAX_LIMIT", MAX_LIMIT)
        if default_limit > max_limit:
            raise ValidationError(
                "invalid configuration",
                [FieldIssue("DYNAEXPR_DEFAULT_LIMIT", "must not exceed DYNAEXPR_MAX_LIMIT")],
            )

        return cls(
            region=(environ.get("AWS_REGION") or "").strip() or None,
            table_name=(environ.get("DYNAEXPR_TABLE_NAME") or "").strip() or None,
            default_limit=default_limit,
            max_limit=max_limit,
            log_level=log_level,
        )


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Set the level of the package logger; handlers are left to the application."""
    logger = logging.getLogger("dynaexpr")
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger


def load_query_profiles(raw: str) -> dict[str, QueryRequest]:
    """Parse named default queries from a YAML (or JSON) document.

    Profiles may sit under a top-level ``profiles`` key or at the top level,
    and use the same parameter names clients send (``pKey``, ``index``, ...).
    """
    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as err:
        raise ValidationError("invalid query profile YAML/JSON") from err

    if not isinstance(parsed, dict):
        raise ValidationError("query profile document must be a map/object")
    profiles: Any = parsed.get("profiles", parsed)
    if not isinstance(profiles, dict) or not profiles:
        raise ValidationError("query profile document must define at least one profile")

    out: dict[str, QueryRequest] = {}
    for name, body in profiles.items():
        if not isinstance(body, dict):
            raise ValidationError(f"query profile {name}: must be a map")

        unknown = sorted(str(k) for k in body if k not in RAW_PARAMETERS)
        if unknown:
            raise ValidationError(
                f"query profile {name}: unknown parameters",
                [FieldIssue(k, "is not a query parameter") for k in unknown],
            )

        params, issues = normalize_params(body)
        if issues:
            raise ValidationError(f"query profile {name}: invalid parameters", issues)
        out[str(name)] = QueryRequest(**params)
    return out
