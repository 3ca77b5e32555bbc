import base64
import json

ALLOWED_HEADERS = ", ".join([
    "authorization",
    "x-client-info",
    "apikey",
    "content-type",
    "x-supabase-client-platform",
    "x-supabase-client-platform-version",
    "x-supabase-client-runtime",
    "x-supabase-client-runtime-version",
])


def cors_headers() -> dict:
    return {
        "Access-Control-Allow-Origin":  "*",
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
        "Access-Control-Allow-Methods": "POST,OPTIONS",
    }


def json_response(status_code: int, body: dict) -> dict:
    return {
        "statusCode": status_code,
        "headers": {**cors_headers(), "Content-Type": "application/json"},
        "body": json.dumps(body, default=str, ensure_ascii=False, allow_nan=False),
    }


def preflight() -> dict:
    return {"statusCode": 200, "headers": cors_headers(), "body": ""}


def request_method(event: dict) -> str:
    return event.get("requestContext", {}).get("http", {}).get("method", "")


def parse_body(event: dict) -> dict:
    """
    Decode the JSON body of a function URL / HTTP API event.
    Raises json.JSONDecodeError (a ValueError) on malformed or non-object bodies.
    """
    raw_body = event.get("body") or "{}"
    if isinstance(raw_body, dict):
        return raw_body
    if event.get("isBase64Encoded"):
        raw_body = base64.b64decode(raw_body).decode("utf-8")
    body = json.loads(raw_body)
    if not isinstance(body, dict):
        raise json.JSONDecodeError("Request body must be a JSON object", raw_body, 0)
    return body
