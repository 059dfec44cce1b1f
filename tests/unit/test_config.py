from __future__ import annotations

import logging

import pytest

from dynaexpr.config import Settings, configure_logging, load_query_profiles
from dynaexpr.errors import ValidationError
from dynaexpr.query import QueryRequest
from dynaexpr.validation import resolve_query_request


def test_settings_defaults() -> None:
    settings = Settings.from_env({})
    assert settings == Settings(region=None, table_name=None, default_limit=20, max_limit=100, log_level="INFO")


def test_settings_from_env() -> None:
    settings = Settings.from_env(
        {
            "AWS_REGION": "eu-west-1",
            "DYNAEXPR_TABLE_NAME": " orders ",
            "DYNAEXPR_DEFAULT_LIMIT": "50",
            "DYNAEXPR_MAX_LIMIT": "200",
            "DYNAEXPR_LOG_LEVEL": "debug",
        }
    )
    assert settings.region == "eu-west-1"
    assert settings.table_name == "orders"
    assert settings.default_limit == 50
    assert settings.max_limit == 200
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    ("environ", "path"),
    [
        ({"DYNAEXPR_DEFAULT_LIMIT": "many"}, "DYNAEXPR_DEFAULT_LIMIT"),
        ({"DYNAEXPR_MAX_LIMIT": "0"}, "DYNAEXPR_MAX_LIMIT"),
        ({"DYNAEXPR_DEFAULT_LIMIT": "150"}, "DYNAEXPR_DEFAULT_LIMIT"),
        ({"DYNAEXPR_LOG_LEVEL": "LOUD"}, "DYNAEXPR_LOG_LEVEL"),
    ],
)
def test_settings_reject_bad_values(environ: dict[str, str], path: str) -> None:
    with pytest.raises(ValidationError) as excinfo:
        Settings.from_env(environ)
    assert excinfo.value.paths == (path,)


def test_configure_logging_sets_package_level() -> None:
    logger = configure_logging("debug")
    try:
        assert logger is logging.getLogger("dynaexpr")
        assert logger.level == logging.DEBUG
    finally:
        configure_logging(logging.NOTSET)


PROFILES = """
profiles:
  ordersByUser:
    pKeyProp: userId
    pKeyType: s
    pKey: USER#1
    index: byUser
    limit: 25
    sorting: desc
  recent:
    pKeyProp: pk
    pKeyType: N
    pKey: 7
"""


def test_load_query_profiles() -> None:
    profiles = load_query_profiles(PROFILES)
    assert profiles["ordersByUser"] == QueryRequest(
        partition_key="USER#1",
        partition_key_type="S",
        partition_key_prop="userId",
        index_name="byUser",
        limit=25,
        sorting="DESC",
    )
    assert profiles["recent"].partition_key == "7"


def test_profiles_serve_as_resolution_defaults() -> None:
    default = load_query_profiles(PROFILES)["ordersByUser"]
    got = resolve_query_request({"limit": "5"}, default)
    assert got == default.with_updates(limit=5)


def test_profiles_may_sit_at_top_level_and_accept_json() -> None:
    profiles = load_query_profiles('{"one": {"pKey": "a", "pKeyType": "S", "pKeyProp": "pk"}}')
    assert list(profiles) == ["one"]


@pytest.mark.parametrize(
    ("raw", "match"),
    [
        ("profiles: [unclosed", "invalid query profile YAML/JSON"),
        ("- a\n- b\n", "must be a map/object"),
        ("profiles: {}", "at least one profile"),
        ("profiles:\n  one: nope\n", "one: must be a map"),
        ("profiles:\n  one:\n    partitionKey: a\n", "unknown parameters"),
        ("profiles:\n  one:\n    limit: many\n", "invalid parameters"),
    ],
)
def test_load_query_profiles_rejects_bad_documents(raw: str, match: str) -> None:
    with pytest.raises(ValidationError, match=match):
        load_query_profiles(raw)
