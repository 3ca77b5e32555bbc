"""
Maps an inbound action to the prompt pair, parser and sampling settings
used for one model call. Holds no state between invocations.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

import prompt
import response_parser
from errors import NothingToAnalyze
from response_parser import ParseResult
from time_policy import get_time_policy

SUGGEST_REPLY = "suggest_reply"
VARIATIONS = "variations_v1"
VARIATIONS_COUNT = 3

EXTRACTION_TEMPERATURE = 0.1


@dataclass(frozen=True)
class ActionPlan:
    action: str
    system_prompt: str
    user_prompt: str
    parse: Callable[[str], ParseResult]
    temperature: float | None = None
    source_text: str | None = None


def needs_history(action: str) -> bool:
    return action == SUGGEST_REPLY


def message_count(action: str) -> int:
    return VARIATIONS_COUNT if action == VARIATIONS else 1


def plan_message(request: prompt.MessageRequest, history: str, now: datetime) -> ActionPlan:
    policy = get_time_policy(request.distribution_date, request.case_value, now)

    if request.action == SUGGEST_REPLY:
        system, user = prompt.build_suggest_reply(request, policy.instructions, history)
        return ActionPlan(request.action, system, user, response_parser.parse_reply_suggestion)

    system, user = prompt.build_generate(request, policy.instructions, message_count(request.action))
    return ActionPlan(request.action, system, user, response_parser.parse_message_list)


def _has_text(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def is_document_request(body: dict) -> bool:
    return bool(body.get("documentId"))


def plan_analysis(body: dict, stored_text: str | None = None) -> ActionPlan:
    """
    Choose the analysis variant for a request body.

    Petition/contract bodies need at least one non-empty text; document
    bodies need `extractedText` or text already stored on the document.
    Raises NothingToAnalyze before any network call otherwise.
    """
    if is_document_request(body):
        text = body.get("extractedText") if _has_text(body.get("extractedText")) else stored_text
        if not _has_text(text):
            raise NothingToAnalyze()
        system, user = prompt.build_document_analysis(text)
        return ActionPlan(
            "analyze_document",
            system,
            user,
            response_parser.parse_extraction,
            EXTRACTION_TEMPERATURE,
            source_text=text,
        )

    petition = body.get("petitionText")
    contract = body.get("contractText")
    if not _has_text(petition) and not _has_text(contract):
        raise NothingToAnalyze()

    system, user = prompt.build_petition_analysis(
        petition if _has_text(petition) else None,
        contract if _has_text(contract) else None,
        contract_type=body.get("contractType"),
        phone_provided=body.get("phoneProvided"),
    )
    return ActionPlan("analyze_petition", system, user, response_parser.parse_extraction, EXTRACTION_TEMPERATURE)
