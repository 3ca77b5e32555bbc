"""
Cross-case conversation history for one operator.

The transcripts of the operator's conversations on *other* cases are fed
to the reply prompt as a style exemplar. Retrieval is best-effort: any
failure degrades to an empty history.
"""
import logging

import db
from prompt import SENDER_LABELS

logger = logging.getLogger(__name__)

HISTORY_MESSAGE_LIMIT = 200
CONVERSATION_SEPARATOR = "\n---\n"


def _render_conversation(messages: list[dict]) -> str:
    lines = []
    for m in messages:
        sender = str(m.get("sender", ""))
        lines.append(f"{SENDER_LABELS.get(sender, sender)}: {m.get('text', '')}")
    return "\n".join(lines)


def load_other_case_messages(owner_id: str, case_id: str | None, limit: int = HISTORY_MESSAGE_LIMIT) -> list[dict]:
    """
    The `limit` most recent messages across the operator's conversations on
    cases other than `case_id`, in ascending creation order.
    """
    conversations = db.list_conversations_by_owner(owner_id)
    other = [c for c in conversations if c.get("case_id") != case_id]
    if not other:
        return []

    messages = []
    for conversation in other:
        messages.extend(db.list_recent_messages(conversation["conversation_id"], limit))

    messages.sort(key=lambda m: str(m.get("created_at", "")), reverse=True)
    recent = messages[:limit]
    recent.reverse()
    return recent


def format_history(messages: list[dict]) -> str:
    """Group ascending messages by conversation and join the transcripts."""
    grouped: dict[str, list[dict]] = {}
    for m in messages:
        grouped.setdefault(m.get("conversation_id"), []).append(m)
    return CONVERSATION_SEPARATOR.join(_render_conversation(msgs) for msgs in grouped.values())


def get_cross_case_history(owner_id: str | None, case_id: str | None) -> str:
    """Transcript of the operator's other-case conversations, or "" on absence or failure."""
    if not owner_id:
        return ""
    try:
        messages = load_other_case_messages(owner_id, case_id)
    except Exception as e:
        logger.warning("History retrieval failed, continuing without it | owner_id=%s | error=%s", owner_id, str(e))
        return ""

    history = format_history(messages)
    logger.info(
        "History loaded | owner_id=%s | messages=%d | length=%d",
        owner_id,
        len(messages),
        len(history),
    )
    return history
