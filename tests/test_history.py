import sys
import os
from unittest.mock import patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'casewire-ai'))

from botocore.exceptions import ClientError

import history

CONVERSATIONS = [
    {"conversation_id": "conv-current", "case_id": "case-1", "owner_id": "op-1"},
    {"conversation_id": "conv-a", "case_id": "case-2", "owner_id": "op-1"},
    {"conversation_id": "conv-b", "case_id": "case-3", "owner_id": "op-1"},
]

# Newest first, as the messages table query returns them.
MESSAGES = {
    "conv-current": [
        {"conversation_id": "conv-current", "created_at": "2026-10-01T10:00:00Z", "sender": "client", "text": "caso atual"},
    ],
    "conv-a": [
        {"conversation_id": "conv-a", "created_at": "2026-09-01T10:05:00Z", "sender": "client", "text": "Quem é você?"},
        {"conversation_id": "conv-a", "created_at": "2026-09-01T10:00:00Z", "sender": "operator", "text": "Olá, Maria!"},
    ],
    "conv-b": [
        {"conversation_id": "conv-b", "created_at": "2026-09-10T09:01:00Z", "sender": "operator", "text": "Tudo certo."},
        {"conversation_id": "conv-b", "created_at": "2026-09-10T09:00:00Z", "sender": "client", "text": "Recebi, obrigado."},
    ],
}


def _recent(conversation_id, limit):
    return MESSAGES[conversation_id][:limit]


def test_history_excludes_current_case_and_orders_ascending():
    with patch("history.db.list_conversations_by_owner", return_value=CONVERSATIONS), \
         patch("history.db.list_recent_messages", side_effect=_recent) as recent:
        result = history.get_cross_case_history("op-1", "case-1")

    queried = [call.args[0] for call in recent.call_args_list]
    assert "conv-current" not in queried
    assert "caso atual" not in result
    assert result == (
        "Operador: Olá, Maria!\nCliente: Quem é você?"
        "\n---\n"
        "Cliente: Recebi, obrigado.\nOperador: Tudo certo."
    )


def test_history_is_bounded_to_most_recent_messages():
    with patch("history.db.list_conversations_by_owner", return_value=CONVERSATIONS), \
         patch("history.db.list_recent_messages", side_effect=_recent):
        messages = history.load_other_case_messages("op-1", "case-1", limit=2)

    assert [m["text"] for m in messages] == ["Recebi, obrigado.", "Tudo certo."]


def test_default_bound_is_two_hundred():
    assert history.HISTORY_MESSAGE_LIMIT == 200


def test_no_other_cases_yields_empty_history():
    with patch("history.db.list_conversations_by_owner", return_value=CONVERSATIONS[:1]), \
         patch("history.db.list_recent_messages") as recent:
        assert history.get_cross_case_history("op-1", "case-1") == ""
    recent.assert_not_called()


def test_missing_owner_skips_lookup():
    with patch("history.db.list_conversations_by_owner") as conversations:
        assert history.get_cross_case_history(None, "case-1") == ""
    conversations.assert_not_called()


def test_retrieval_failure_degrades_to_empty():
    error = ClientError({"Error": {"Code": "ResourceNotFoundException", "Message": "no table"}}, "Query")
    with patch("history.db.list_conversations_by_owner", side_effect=error):
        assert history.get_cross_case_history("op-1", "case-1") == ""
