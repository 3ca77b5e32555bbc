"""
ai-message Lambda handler.
Drafts client messages for a case: reply suggestions for an ongoing
conversation, first-contact approaches, variations and rewrites.
"""
import logging
from datetime import datetime, timezone

import ai_gateway
import history
import router
from errors import CasewireError
from http_response import json_response, parse_body, preflight, request_method
from prompt import MessageRequest

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def generate(request: MessageRequest, api_key: str, now: datetime | None = None) -> dict:
    """Run one message action end to end and return the response payload."""
    now = now or datetime.now(timezone.utc)

    conversation_history = ""
    if router.needs_history(request.action):
        conversation_history = history.get_cross_case_history(request.user_id, request.case_id)

    plan = router.plan_message(request, conversation_history, now)
    content = ai_gateway.complete(
        plan.system_prompt,
        plan.user_prompt,
        api_key=api_key,
        temperature=plan.temperature,
    )
    result = plan.parse(content)
    logger.info(
        "Message action complete | action=%s | case_id=%s | degraded=%s",
        request.action,
        request.case_id,
        result.degraded,
    )
    return result.value


def lambda_handler(event, context):
    if request_method(event) == "OPTIONS":
        return preflight()

    try:
        body = parse_body(event)
    except (ValueError, UnicodeDecodeError) as e:
        logger.error("Invalid JSON body | error=%s", str(e))
        return json_response(400, {"error": "Invalid JSON in request body."})

    try:
        request = MessageRequest.from_body(body)
        logger.info("Message request received | action=%s | case_id=%s", request.action, request.case_id)
        api_key = ai_gateway.get_api_key()
        payload = generate(request, api_key)
    except CasewireError as e:
        # Upstream statuses other than 429/402 are reported as 500 here.
        status = e.status_code if e.status_code in (400, 402, 429) else 500
        logger.error("ai-message error | status=%s | error=%s", e.status_code, e.message)
        return json_response(status, e.to_body())
    except Exception as e:
        logger.exception("ai-message error | error=%s", str(e))
        return json_response(500, {"error": str(e) or "Unknown error"})

    return json_response(200, payload)
