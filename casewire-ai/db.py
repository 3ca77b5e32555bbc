import json
import logging
import os
from datetime import datetime, timezone
from decimal import Decimal

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

AWS_REGION = os.environ.get("AWS_REGION", "us-east-1")
CONVERSATIONS_TABLE = os.environ.get("CONVERSATIONS_TABLE_NAME", "conversations")
MESSAGES_TABLE = os.environ.get("MESSAGES_TABLE_NAME", "messages")
DOCUMENTS_TABLE = os.environ.get("DOCUMENTS_TABLE_NAME", "documents")
AI_OUTPUTS_TABLE = os.environ.get("AI_OUTPUTS_TABLE_NAME", "ai_outputs")

OWNER_INDEX = "owner_id-index"


def get_table(table_name: str, region: str = AWS_REGION):
    dynamodb = boto3.resource("dynamodb", region_name=region)
    return dynamodb.Table(table_name)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _to_dynamo(value):
    """DynamoDB rejects floats; round-trip through JSON to turn them into Decimals."""
    return json.loads(json.dumps(value, default=str), parse_float=Decimal)


def list_conversations_by_owner(owner_id: str) -> list[dict]:
    """All conversations owned by one operator, across every case."""
    table = get_table(CONVERSATIONS_TABLE)
    query = {
        "IndexName": OWNER_INDEX,
        "KeyConditionExpression": Key("owner_id").eq(owner_id),
    }
    try:
        response = table.query(**query)
        items = response.get("Items", [])

        while "LastEvaluatedKey" in response:
            response = table.query(ExclusiveStartKey=response["LastEvaluatedKey"], **query)
            items.extend(response.get("Items", []))

        logger.info("Conversations loaded | owner_id=%s | count=%d", owner_id, len(items))
        return items
    except ClientError as e:
        logger.error(
            "Conversation query failed | owner_id=%s | error=%s",
            owner_id,
            e.response["Error"]["Message"],
        )
        raise


def list_recent_messages(conversation_id: str, limit: int) -> list[dict]:
    """
    Up to `limit` most recent messages of a conversation, newest first.
    Messages are keyed by (conversation_id, created_at).
    """
    table = get_table(MESSAGES_TABLE)
    try:
        response = table.query(
            KeyConditionExpression=Key("conversation_id").eq(conversation_id),
            ScanIndexForward=False,
            Limit=limit,
        )
        return response.get("Items", [])
    except ClientError as e:
        logger.error(
            "Message query failed | conversation_id=%s | error=%s",
            conversation_id,
            e.response["Error"]["Message"],
        )
        raise


def get_document(document_id: str) -> dict | None:
    """
    Fetch a single document record.
    Returns None if not found.
    """
    table = get_table(DOCUMENTS_TABLE)
    try:
        response = table.get_item(Key={"document_id": document_id})
        item = response.get("Item")
        if not item:
            logger.warning("Document not found | document_id=%s", document_id)
        return item
    except ClientError as e:
        logger.error(
            "Document get failed | document_id=%s | error=%s",
            document_id,
            e.response["Error"]["Message"],
        )
        raise


def update_document_extraction(
    document_id: str,
    extracted_text: str,
    extracted_json: dict,
    file_url: str | None = None,
) -> None:
    """Store the text that was analyzed and the structured result on the document."""
    table = get_table(DOCUMENTS_TABLE)
    expression = "SET extracted_text = :text, extracted_json = :json, analyzed_at = :analyzed_at"
    values = {
        ":text": extracted_text,
        ":json": _to_dynamo(extracted_json),
        ":analyzed_at": _now_iso(),
    }
    if file_url:
        expression += ", file_url = :file_url"
        values[":file_url"] = file_url

    try:
        table.update_item(
            Key={"document_id": document_id},
            UpdateExpression=expression,
            ExpressionAttributeValues=values,
            ConditionExpression="attribute_exists(document_id)",
        )
        logger.info("Document updated | document_id=%s", document_id)
    except ClientError as e:
        error_code = e.response["Error"]["Code"]
        if error_code == "ConditionalCheckFailedException":
            logger.error("Document update failed, not found | document_id=%s", document_id)
            raise ValueError(f"Document {document_id} not found in database.")
        logger.error(
            "Document update failed | document_id=%s | error=%s",
            document_id,
            e.response["Error"]["Message"],
        )
        raise


def put_ai_output(item: dict) -> None:
    """
    Insert an AI output record. Outputs are never updated after creation.
    Raises on failure; caller decides how to handle.
    """
    table = get_table(AI_OUTPUTS_TABLE)
    try:
        table.put_item(
            Item=_to_dynamo(item),
            ConditionExpression="attribute_not_exists(output_id)",
        )
        logger.info(
            "AI output saved | output_id=%s | case_id=%s | type=%s",
            item.get("output_id"),
            item.get("case_id"),
            item.get("output_type"),
        )
    except ClientError as e:
        logger.error(
            "AI output write failed | output_id=%s | error=%s",
            item.get("output_id"),
            e.response["Error"]["Message"],
        )
        raise
