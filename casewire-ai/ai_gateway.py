import logging
import os

import anthropic

from errors import ConfigurationError, GatewayError, InsufficientCredits, RateLimitExceeded

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"
DEFAULT_MAX_TOKENS = 2000


def get_api_key() -> str:
    """Read the gateway credential at request time; missing key is a configuration error."""
    api_key = os.environ.get("ANTHROPIC_API_KEY", "").strip()
    if not api_key:
        raise ConfigurationError("ANTHROPIC_API_KEY is not configured")
    return api_key


def _client(api_key: str) -> anthropic.Anthropic:
    base_url = os.environ.get("AI_GATEWAY_BASE_URL") or None
    # A single attempt per request; the operator retries from the UI.
    return anthropic.Anthropic(api_key=api_key, base_url=base_url, max_retries=0)


def _error_body(error: anthropic.APIStatusError) -> str:
    if error.response is not None:
        return error.response.text
    return str(error)


def complete(
    system_prompt: str,
    user_prompt: str,
    api_key: str,
    temperature: float | None = None,
    max_tokens: int = DEFAULT_MAX_TOKENS,
) -> str:
    """
    Send one system + user exchange to the model and return the raw text.
    Raises RateLimitExceeded (429), InsufficientCredits (402) or GatewayError.
    """
    model = os.environ.get("ANTHROPIC_MODEL", DEFAULT_MODEL)
    request = {
        "model": model,
        "max_tokens": max_tokens,
        "system": system_prompt,
        "messages": [
            {"role": "user", "content": user_prompt}
        ],
    }
    if temperature is not None:
        request["temperature"] = temperature

    try:
        response = _client(api_key).messages.create(**request)
    except anthropic.APIStatusError as e:
        body = _error_body(e)
        logger.error("AI gateway error | status=%s | body=%s", e.status_code, body)
        if e.status_code == 429:
            raise RateLimitExceeded(details=body) from e
        if e.status_code == 402:
            raise InsufficientCredits(details=body) from e
        raise GatewayError(
            f"AI gateway error: {e.status_code}",
            status_code=e.status_code,
            details=body,
        ) from e
    except anthropic.APIConnectionError as e:
        logger.error("AI gateway unreachable | error=%s", str(e))
        raise GatewayError("AI gateway unreachable", status_code=502, details=str(e)) from e

    text = "".join(
        block.text for block in response.content if getattr(block, "type", None) == "text"
    )
    logger.debug("Raw model response: %s", text)
    logger.info("Model call complete | model=%s | length=%d", model, len(text))
    return text
