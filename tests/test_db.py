import sys
import os
from decimal import Decimal
from unittest.mock import MagicMock, patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'casewire-ai'))

import pytest
from botocore.exceptions import ClientError

import db


def _client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} happened"}}, operation)


def test_conversations_query_follows_pagination():
    table = MagicMock()
    table.query.side_effect = [
        {"Items": [{"conversation_id": "c1"}], "LastEvaluatedKey": {"conversation_id": "c1"}},
        {"Items": [{"conversation_id": "c2"}]},
    ]
    with patch("db.get_table", return_value=table) as get_table:
        items = db.list_conversations_by_owner("op-1")

    get_table.assert_called_once_with(db.CONVERSATIONS_TABLE)
    assert [i["conversation_id"] for i in items] == ["c1", "c2"]
    first, second = table.query.call_args_list
    assert first.kwargs["IndexName"] == db.OWNER_INDEX
    assert "ExclusiveStartKey" not in first.kwargs
    assert second.kwargs["ExclusiveStartKey"] == {"conversation_id": "c1"}
    assert second.kwargs["IndexName"] == db.OWNER_INDEX


def test_conversations_query_error_is_raised():
    table = MagicMock()
    table.query.side_effect = _client_error("ResourceNotFoundException", "Query")
    with patch("db.get_table", return_value=table):
        with pytest.raises(ClientError):
            db.list_conversations_by_owner("op-1")


def test_recent_messages_are_newest_first_and_bounded():
    table = MagicMock()
    table.query.return_value = {"Items": [{"text": "oi"}]}
    with patch("db.get_table", return_value=table):
        assert db.list_recent_messages("conv-1", 200) == [{"text": "oi"}]

    kwargs = table.query.call_args.kwargs
    assert kwargs["ScanIndexForward"] is False
    assert kwargs["Limit"] == 200


def test_get_document_returns_none_when_missing():
    table = MagicMock()
    table.get_item.return_value = {}
    with patch("db.get_table", return_value=table):
        assert db.get_document("doc-1") is None
    table.get_item.assert_called_once_with(Key={"document_id": "doc-1"})


def test_update_document_converts_floats_and_requires_existing_item():
    table = MagicMock()
    with patch("db.get_table", return_value=table):
        db.update_document_extraction(
            "doc-1",
            "texto",
            {"case_value": 1500.5, "lawyers": [{"share": 0.25}]},
            file_url="https://files/doc-1.pdf",
        )

    kwargs = table.update_item.call_args.kwargs
    assert kwargs["Key"] == {"document_id": "doc-1"}
    assert kwargs["ConditionExpression"] == "attribute_exists(document_id)"
    assert "file_url = :file_url" in kwargs["UpdateExpression"]
    values = kwargs["ExpressionAttributeValues"]
    assert values[":json"] == {"case_value": Decimal("1500.5"), "lawyers": [{"share": Decimal("0.25")}]}
    assert isinstance(values[":json"]["case_value"], Decimal)
    assert values[":file_url"] == "https://files/doc-1.pdf"


def test_update_document_without_file_url_leaves_it_alone():
    table = MagicMock()
    with patch("db.get_table", return_value=table):
        db.update_document_extraction("doc-1", "texto", {})
    kwargs = table.update_item.call_args.kwargs
    assert "file_url" not in kwargs["UpdateExpression"]
    assert ":file_url" not in kwargs["ExpressionAttributeValues"]


def test_update_missing_document_is_value_error():
    table = MagicMock()
    table.update_item.side_effect = _client_error("ConditionalCheckFailedException", "UpdateItem")
    with patch("db.get_table", return_value=table):
        with pytest.raises(ValueError, match="doc-1 not found"):
            db.update_document_extraction("doc-1", "texto", {})


def test_update_other_errors_are_raised_unchanged():
    table = MagicMock()
    table.update_item.side_effect = _client_error("ProvisionedThroughputExceededException", "UpdateItem")
    with patch("db.get_table", return_value=table):
        with pytest.raises(ClientError):
            db.update_document_extraction("doc-1", "texto", {})


def test_ai_output_is_insert_only_and_decimal():
    table = MagicMock()
    item = {"output_id": "out-1", "case_id": "case-1", "output_type": "case_summary", "confidence": 7.5}
    with patch("db.get_table", return_value=table) as get_table:
        db.put_ai_output(item)

    get_table.assert_called_once_with(db.AI_OUTPUTS_TABLE)
    kwargs = table.put_item.call_args.kwargs
    assert kwargs["ConditionExpression"] == "attribute_not_exists(output_id)"
    assert kwargs["Item"]["confidence"] == Decimal("7.5")
    assert kwargs["Item"]["output_id"] == "out-1"


def test_ai_output_duplicate_id_is_raised():
    table = MagicMock()
    table.put_item.side_effect = _client_error("ConditionalCheckFailedException", "PutItem")
    with patch("db.get_table", return_value=table):
        with pytest.raises(ClientError):
            db.put_ai_output({"output_id": "out-1"})


def test_to_dynamo_keeps_ints_and_strings():
    assert db._to_dynamo({"n": 3, "s": "x", "f": 0.1, "none": None}) == {
        "n": 3,
        "s": "x",
        "f": Decimal("0.1"),
        "none": None,
    }
