"""
ai-analyze Lambda handler.
Extracts structured case data from a petition and its financing contract,
or summarizes a stored case document and records the result.
"""
import logging
import uuid
from datetime import datetime, timezone

import ai_gateway
import db
import router
from errors import CasewireError
from http_response import json_response, parse_body, preflight, request_method

logger = logging.getLogger()
logger.setLevel(logging.INFO)

CASE_SUMMARY = "case_summary"
VALID_SCAM_RISK = {"low", "medium", "high"}


def _confidence(value) -> int | None:
    try:
        score = int(value)
    except (TypeError, ValueError):
        return None
    return max(0, min(10, score))


def build_ai_output(case_id: str, document_id: str, extracted: dict) -> dict:
    """AI output record for a document summary."""
    scam_risk = str(extracted.get("scam_risk", "")).lower()
    return {
        "output_id": str(uuid.uuid4()),
        "case_id": case_id,
        "document_id": document_id,
        "output_type": CASE_SUMMARY,
        "content": extracted.get("summary", ""),
        "confidence": _confidence(extracted.get("confidence")),
        "scam_risk": scam_risk if scam_risk in VALID_SCAM_RISK else None,
        "rationale": extracted.get("rationale", ""),
        "created_at": datetime.now(timezone.utc).isoformat(),
    }


def save_document_analysis(body: dict, analyzed_text: str, extracted: dict) -> None:
    """
    Write the analysis back to the document and insert a case summary.
    Failures are logged; the extraction is still returned to the caller.
    """
    case_id = body.get("caseId")
    document_id = body["documentId"]
    try:
        db.update_document_extraction(
            document_id=document_id,
            extracted_text=analyzed_text,
            extracted_json=extracted,
            file_url=body.get("fileUrl"),
        )
        db.put_ai_output(build_ai_output(case_id, document_id, extracted))
        logger.info("Document analysis saved | document_id=%s | case_id=%s", document_id, case_id)
    except Exception as e:
        logger.error("Document analysis save failed | document_id=%s | error=%s", document_id, str(e))


def _stored_text(body: dict) -> str | None:
    """Text already extracted for the document, used when the request carries none."""
    if not router.is_document_request(body):
        return None
    extracted_text = body.get("extractedText")
    if isinstance(extracted_text, str) and extracted_text.strip():
        return None
    document = db.get_document(body["documentId"])
    return (document or {}).get("extracted_text")


def analyze(body: dict, api_key: str) -> dict:
    plan = router.plan_analysis(body, _stored_text(body))
    logger.info(
        "Sending text to AI | variant=%s | prompt_length=%d",
        plan.action,
        len(plan.user_prompt),
    )
    content = ai_gateway.complete(
        plan.system_prompt,
        plan.user_prompt,
        api_key=api_key,
        temperature=plan.temperature,
    )
    result = plan.parse(content)
    logger.info(
        "Analysis complete | variant=%s | response_length=%d | degraded=%s",
        plan.action,
        len(content),
        result.degraded,
    )

    if plan.source_text is not None:
        save_document_analysis(body, plan.source_text, result.value)
    return result.value


def lambda_handler(event, context):
    if request_method(event) == "OPTIONS":
        return preflight()

    try:
        body = parse_body(event)
    except (ValueError, UnicodeDecodeError) as e:
        logger.error("Invalid JSON body | error=%s", str(e))
        return json_response(400, {"error": "Invalid JSON in request body."})

    logger.info("Analysis request received | document_id=%s", body.get("documentId"))

    try:
        api_key = ai_gateway.get_api_key()
        extracted = analyze(body, api_key)
    except CasewireError as e:
        logger.error("ai-analyze error | status=%s | error=%s", e.status_code, e.message)
        return json_response(e.status_code, e.to_body())
    except Exception as e:
        logger.exception("ai-analyze error | error=%s", str(e))
        return json_response(500, {"error": str(e) or "Unknown error"})

    return json_response(200, {"success": True, "extracted": extracted})
