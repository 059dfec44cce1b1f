from __future__ import annotations

from typing import Any

from dynaexpr import (
    DynaexprError,
    Settings,
    StorageGateway,
    build_query_command,
    configure_logging,
    error_response,
    json_response,
    get_lambda_dynamodb_client,
    load_query_profiles,
    resolve_query_request,
)
from dynaexpr.validation import query_params_from_event

PROFILES = """
profiles:
  ordersByCustomer:
    pKeyProp: customerId
    pKeyType: S
    pKey: CUSTOMER#anonymous
    index: byCustomer
    limit: 25
    sorting: DESC
"""

_settings = Settings.from_env()
configure_logging(_settings.log_level)
_default = load_query_profiles(PROFILES)["ordersByCustomer"]
_gateway = StorageGateway(get_lambda_dynamodb_client(region=_settings.region))


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    _ = context
    try:
        request = resolve_query_request(
            query_params_from_event(event),
            _default,
            default_limit=_settings.default_limit,
            max_limit=_settings.max_limit,
        )
        cmd = build_query_command(_settings.table_name or "orders", request)
        page = _gateway.query(cmd)
    except DynaexprError as err:
        return error_response(err)

    return json_response(200, {"items": page.items, "lastEvaluatedKey": page.next_cursor})
