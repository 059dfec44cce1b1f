from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Any, cast

import boto3
from botocore.config import Config

logger = logging.getLogger(__name__)

_LAMBDA_MARKERS = ("AWS_LAMBDA_FUNCTION_NAME", "AWS_LAMBDA_RUNTIME_API")

type ClientKey = tuple[str | None, str | None]


def is_lambda_environment(environ: Mapping[str, str] = os.environ) -> bool:
    if any(environ.get(marker) for marker in _LAMBDA_MARKERS):
        return True
    return (environ.get("AWS_EXECUTION_ENV") or "").startswith("AWS_Lambda")


def create_lambda_boto3_config(
    *,
    connect_timeout: float = 1.0,
    read_timeout: float = 3.0,
    max_attempts: int = 3,
    max_pool_connections: int = 10,
) -> Config:
    """Client settings for short-lived Lambda invocations.

    Retries are owned here (adaptive mode); ``StorageGateway`` never retries.
    """
    return Config(
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
        max_pool_connections=max_pool_connections,
        retries={"mode": "adaptive", "max_attempts": max_attempts},
        user_agent_extra="dynaexpr",
    )


_dynamodb_clients: dict[ClientKey, Any] = {}


def get_lambda_dynamodb_client(
    *,
    region: str | None = None,
    endpoint_url: str | None = None,
    config: Config | None = None,
    session: Any | None = None,
) -> Any:
    """Return the process-wide DynamoDB client for ``(region, endpoint_url)``.

    The first call builds it; later calls (warm invocations) reuse it. Inside
    Lambda the tuned ``create_lambda_boto3_config`` applies unless ``config``
    is given.
    """
    key: ClientKey = (region, endpoint_url)
    client = _dynamodb_clients.get(key)
    if client is None:
        if config is None and is_lambda_environment():
            config = create_lambda_boto3_config()
        sess = session or boto3.session.Session(region_name=region)
        client = cast(Any, sess).client("dynamodb", region_name=region, endpoint_url=endpoint_url, config=config)
        logger.debug("created dynamodb client region=%s endpoint=%s", region, endpoint_url)
        _dynamodb_clients[key] = client
    return client


def _reset_lambda_clients_for_tests() -> None:
    _dynamodb_clients.clear()
