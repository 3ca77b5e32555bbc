import sys
import os
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'casewire-ai'))

import anthropic
import httpx
import pytest

import ai_gateway
from errors import ConfigurationError, GatewayError, InsufficientCredits, RateLimitExceeded

URL = "https://api.anthropic.com/v1/messages"


def _status_error(status: int, text: str) -> anthropic.APIStatusError:
    request = httpx.Request("POST", URL)
    response = httpx.Response(status, text=text, request=request)
    return anthropic.APIStatusError(f"status {status}", response=response, body=None)


def _client_returning(content):
    client = MagicMock()
    client.messages.create.return_value = SimpleNamespace(content=content)
    return client


def test_complete_returns_text_and_sends_prompt_pair():
    client = _client_returning([SimpleNamespace(type="text", text='{"ok": true}')])
    with patch("ai_gateway._client", return_value=client):
        text = ai_gateway.complete("system", "user", api_key="k", temperature=0.1)

    assert text == '{"ok": true}'
    kwargs = client.messages.create.call_args.kwargs
    assert kwargs["system"] == "system"
    assert kwargs["messages"] == [{"role": "user", "content": "user"}]
    assert kwargs["temperature"] == 0.1
    assert kwargs["model"] == os.environ.get("ANTHROPIC_MODEL", ai_gateway.DEFAULT_MODEL)


def test_complete_omits_temperature_when_unset():
    client = _client_returning([])
    with patch("ai_gateway._client", return_value=client):
        assert ai_gateway.complete("s", "u", api_key="k") == ""
    assert "temperature" not in client.messages.create.call_args.kwargs


@pytest.mark.parametrize("status, error_type", [(429, RateLimitExceeded), (402, InsufficientCredits)])
def test_quota_errors_keep_their_status(status, error_type):
    client = MagicMock()
    client.messages.create.side_effect = _status_error(status, "upstream says no")
    with patch("ai_gateway._client", return_value=client):
        with pytest.raises(error_type) as excinfo:
            ai_gateway.complete("s", "u", api_key="k")
    assert excinfo.value.status_code == status
    assert excinfo.value.details == "upstream says no"
    assert client.messages.create.call_count == 1


def test_other_status_is_gateway_error_with_body():
    client = MagicMock()
    client.messages.create.side_effect = _status_error(503, "overloaded")
    with patch("ai_gateway._client", return_value=client):
        with pytest.raises(GatewayError) as excinfo:
            ai_gateway.complete("s", "u", api_key="k")
    assert excinfo.value.status_code == 503
    assert excinfo.value.to_body() == {"error": "AI gateway error: 503", "details": "overloaded"}


def test_connection_error_is_gateway_error():
    client = MagicMock()
    client.messages.create.side_effect = anthropic.APIConnectionError(request=httpx.Request("POST", URL))
    with patch("ai_gateway._client", return_value=client):
        with pytest.raises(GatewayError) as excinfo:
            ai_gateway.complete("s", "u", api_key="k")
    assert excinfo.value.status_code == 502


def test_missing_api_key_is_configuration_error(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    with pytest.raises(ConfigurationError) as excinfo:
        ai_gateway.get_api_key()
    assert "ANTHROPIC_API_KEY" in excinfo.value.message
    assert excinfo.value.status_code == 500


def test_client_never_retries():
    client = ai_gateway._client("test-key")
    assert client.max_retries == 0
