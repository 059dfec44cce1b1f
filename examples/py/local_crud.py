from __future__ import annotations

import os
import uuid

from dynaexpr import (
    QueryRequest,
    StorageGateway,
    build_get_command,
    build_put_command,
    build_query_command,
    build_update_command,
    get_lambda_dynamodb_client,
)


def main() -> None:
    client = get_lambda_dynamodb_client(
        region=os.environ.get("AWS_REGION", "us-east-1"),
        endpoint_url=os.environ.get("DYNAMODB_ENDPOINT", "http://localhost:8000"),
    )
    table_name = f"dynaexpr_example_{uuid.uuid4().hex[:12]}"

    client.create_table(
        TableName=table_name,
        KeySchema=[{"AttributeName": "pk", "KeyType": "HASH"}, {"AttributeName": "sk", "KeyType": "RANGE"}],
        AttributeDefinitions=[
            {"AttributeName": "pk", "AttributeType": "S"},
            {"AttributeName": "sk", "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    client.get_waiter("table_exists").wait(TableName=table_name)

    try:
        gw = StorageGateway(client)
        for sk, value in (("001", 1), ("010", 10), ("100", 100)):
            gw.put(build_put_command(table_name, {"pk": "A", "sk": sk, "value": value}))

        gw.update(build_update_command(table_name, {"pk": "A", "sk": "010"}, item={"status": "seen"}))
        print("get:", gw.get(build_get_command(table_name, {"pk": "A", "sk": "010"}, projection="value, status")))

        request = QueryRequest(
            partition_key="A",
            partition_key_type="S",
            partition_key_prop="pk",
            sort_key="0",
            sort_key_type="S",
            sort_key_prop="sk",
            comparator="BEGINS_WITH",
        )
        page = gw.query(build_query_command(table_name, request))
        print("query begins_with('0'):", page.items)
    finally:
        client.delete_table(TableName=table_name)


if __name__ == "__main__":
    main()
