from __future__ import annotations

import pytest
from botocore.exceptions import ClientError

from dynaexpr.mocks import ANY, FakeDynamoDBClient, client_error


def test_fake_client_matches_subsets_in_order() -> None:
    client = FakeDynamoDBClient()
    client.expect("get_item", {"TableName": "t", "Key": ANY}, response={"Item": {"pk": {"S": "a"}}})
    assert client.get_item(TableName="t", Key={"pk": {"S": "a"}}, ConsistentRead=True) == {"Item": {"pk": {"S": "a"}}}
    client.assert_no_pending()
    assert client.requests("get_item") == [{"TableName": "t", "Key": {"pk": {"S": "a"}}, "ConsistentRead": True}]


def test_fake_client_reports_mismatches() -> None:
    client = FakeDynamoDBClient()
    with pytest.raises(AssertionError, match="query called with nothing scripted"):
        client.query(TableName="t")

    client.expect("put_item")
    with pytest.raises(AssertionError, match="get_item called, put_item was scripted"):
        client.get_item(TableName="t")

    client.expect("query", {"Limit": 5})
    with pytest.raises(AssertionError, match=r"query.Limit: expected 5, got 6"):
        client.query(Limit=6)

    client.expect("query", {"Key": {"pk": {"S": "a"}}})
    with pytest.raises(AssertionError, match=r"query.Key.pk.S: expected 'a', got 'b'"):
        client.query(Key={"pk": {"S": "b"}})

    client.expect("query", {"IndexName": ANY})
    with pytest.raises(AssertionError, match="query.IndexName is missing"):
        client.query(TableName="t")

    assert len(client.requests("query")) == 4


def test_fake_client_raises_scripted_errors() -> None:
    client = FakeDynamoDBClient().expect("update_item", error=client_error("ThrottlingException", "slow down"))
    with pytest.raises(ClientError) as excinfo:
        client.update_item(Key={"pk": {"S": "a"}})
    assert excinfo.value.response["Error"] == {"Code": "ThrottlingException", "Message": "slow down"}
    assert client.requests("update_item") == [{"Key": {"pk": {"S": "a"}}}]


def test_pending_expectations_fail() -> None:
    client = FakeDynamoDBClient().expect("describe_table").expect("query")
    with pytest.raises(AssertionError, match="script not exhausted: describe_table, query"):
        client.assert_no_pending()
