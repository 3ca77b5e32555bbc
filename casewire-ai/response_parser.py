"""
Tolerant decoding of model replies.

The model is asked for JSON but often wraps it in markdown fences or adds
prose around it. Every parser here returns a ParseResult of the expected
shape; a reply that cannot be decoded yields a degraded fallback built
from the raw text instead of an exception.
"""
import json
import logging
import math
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
OBJECT_RE = re.compile(r"\{[\s\S]*\}")

SHORT_PREVIEW_CHARS = 100
FALLBACK_STATE = "undetermined"
FALLBACK_CONFIDENCE = 5
FALLBACK_SCAM_RISK = "medium"

REPLY_KEYS = {"state", "short", "standard"}


@dataclass(frozen=True)
class ParseResult:
    value: dict
    degraded: bool = False

    @classmethod
    def ok(cls, value: dict) -> "ParseResult":
        return cls(value=value, degraded=False)

    @classmethod
    def fallback(cls, value: dict) -> "ParseResult":
        return cls(value=value, degraded=True)


def _strip_fences(text: str) -> str:
    """Return the body of the first markdown code fence, or the text itself."""
    match = FENCE_RE.search(text)
    if match:
        return match.group(1)
    return text


def _reject_constant(name: str):
    raise ValueError(f"Non-finite number {name} in model JSON")


def _finite_float(text: str) -> float:
    value = float(text)
    if math.isinf(value):
        raise ValueError(f"Non-finite number {text} in model JSON")
    return value


def extract_json(text: str) -> dict:
    """
    Find and decode the outermost {...} span in a model reply.
    Raises ValueError when there is no object or it does not decode.
    """
    candidate = _strip_fences(text or "")
    match = OBJECT_RE.search(candidate)
    if not match:
        raise ValueError("No JSON object found in model output")
    try:
        result = json.loads(match.group(0), parse_constant=_reject_constant, parse_float=_finite_float)
    except (json.JSONDecodeError, RecursionError) as e:
        raise ValueError(f"Model returned invalid JSON: {e}") from e
    if not isinstance(result, dict):
        raise ValueError("Model JSON is not an object")
    return result


def _validate_reply(result: dict) -> None:
    if not REPLY_KEYS & result.keys():
        raise ValueError(f"Reply suggestion has none of {sorted(REPLY_KEYS)}")


def _validate_messages(result: dict) -> None:
    if not isinstance(result.get("messages"), list):
        raise ValueError("'messages' must be a list")


def _parse(text: str, validate, fallback, shape: str) -> ParseResult:
    try:
        result = extract_json(text)
        if validate:
            validate(result)
    except ValueError as e:
        logger.warning("Degraded parse | shape=%s | reason=%s", shape, str(e))
        logger.debug("Unparsed model output: %s", (text or "")[:500])
        return ParseResult.fallback(fallback(text or ""))
    return ParseResult.ok(result)


def reply_fallback(text: str) -> dict:
    return {
        "state": FALLBACK_STATE,
        "short": text[:SHORT_PREVIEW_CHARS],
        "standard": text,
    }


def messages_fallback(text: str) -> dict:
    return {
        "messages": [
            {
                "message": text,
                "short_variant": text[:SHORT_PREVIEW_CHARS],
                "confidence": FALLBACK_CONFIDENCE,
                "scam_risk": FALLBACK_SCAM_RISK,
                "scam_reasons": [],
            }
        ]
    }


def extraction_fallback(text: str) -> dict:
    return {"summary": text, "client_name": "", "defendant": ""}


def parse_reply_suggestion(text: str) -> ParseResult:
    """Decode a suggest_reply answer: {"state", "short", "standard"}."""
    return _parse(text, _validate_reply, reply_fallback, "reply_suggestion")


def parse_message_list(text: str) -> ParseResult:
    """Decode a generated message list: {"messages": [...]}."""
    return _parse(text, _validate_messages, messages_fallback, "message_list")


def parse_extraction(text: str) -> ParseResult:
    """Decode a structured document extraction."""
    return _parse(text, None, extraction_fallback, "extraction")
