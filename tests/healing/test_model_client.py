"""Tests for model client implementations.

Tests cover:
- DisabledModelClient (always unavailable)
- LocalModelClient (Ollama) with mocked HTTP responses
- RemoteModelClient (Google, OpenAI, Anthropic) with mocked API responses
- Timeout, transport and response-shape errors
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest

# Add src to path for direct import
src_path = Path(__file__).parent.parent.parent / "src"
sys.path.insert(0, str(src_path))

from locator_healer.healing.model_client import (
    DisabledModelClient,
    LocalModelClient,
    ModelClient,
    RemoteModelClient,
)
from locator_healer.healing_exceptions import ModelUnavailable

CLIENT_PATH = "locator_healer.healing.model_client.httpx.Client"


# ============================================================================
# Test Fixtures
# ============================================================================


@pytest.fixture
def mock_httpx_client():
    """Create a mock httpx client with context manager support."""
    mock_client = MagicMock()
    mock_context = MagicMock()
    mock_context.__enter__ = MagicMock(return_value=mock_client)
    mock_context.__exit__ = MagicMock(return_value=None)
    return mock_context, mock_client


def _json_response(data) -> MagicMock:
    response = MagicMock()
    response.json.return_value = data
    response.raise_for_status.return_value = None
    return response


# ============================================================================
# DisabledModelClient Tests
# ============================================================================


class TestDisabledModelClient:
    """Tests for DisabledModelClient."""

    def test_always_unavailable(self):
        """Disabled client declines every request."""
        with pytest.raises(ModelUnavailable):
            DisabledModelClient().generate("any-model", "prompt", 1000)

    def test_is_always_available(self):
        """Disabled client is always available."""
        assert DisabledModelClient().is_available is True

    def test_is_model_client(self):
        """Disabled client implements the interface."""
        assert isinstance(DisabledModelClient(), ModelClient)


# ============================================================================
# LocalModelClient Tests
# ============================================================================


class TestLocalModelClient:
    """Tests for the Ollama client."""

    def test_generate(self, mock_httpx_client):
        """Prompt and model are posted; the response text is returned."""
        mock_context, mock_client = mock_httpx_client
        mock_client.post.return_value = _json_response({"response": '{"a": 1}'})

        with patch(CLIENT_PATH, return_value=mock_context) as client_cls:
            text = LocalModelClient("http://ollama:11434/").generate("llama3.1", "find it", 2500)

        assert text == '{"a": 1}'
        client_cls.assert_called_once_with(timeout=2.5)
        url = mock_client.post.call_args.args[0]
        payload = mock_client.post.call_args.kwargs["json"]
        assert url == "http://ollama:11434/api/generate"
        assert payload == {"model": "llama3.1", "prompt": "find it", "stream": False}

    def test_missing_response_key(self, mock_httpx_client):
        """A body without 'response' yields empty text."""
        mock_context, mock_client = mock_httpx_client
        mock_client.post.return_value = _json_response({})

        with patch(CLIENT_PATH, return_value=mock_context):
            assert LocalModelClient().generate("llama3.1", "p", 1000) == ""

    def test_is_available(self, mock_httpx_client):
        """Availability pings /api/tags."""
        mock_context, mock_client = mock_httpx_client
        mock_client.get.return_value = MagicMock(status_code=200)

        with patch(CLIENT_PATH, return_value=mock_context):
            assert LocalModelClient().is_available is True

    def test_not_available_when_unreachable(self, mock_httpx_client):
        """Connection errors mean unavailable."""
        mock_context, mock_client = mock_httpx_client
        mock_client.get.side_effect = httpx.ConnectError("refused")

        with patch(CLIENT_PATH, return_value=mock_context):
            assert LocalModelClient().is_available is False


# ============================================================================
# RemoteModelClient Tests
# ============================================================================


class TestRemoteModelClient:
    """Tests for the cloud API client."""

    def test_unknown_provider(self):
        """Unknown providers are rejected."""
        with pytest.raises(ValueError):
            RemoteModelClient(provider="acme", api_key="k")

    def test_google(self, mock_httpx_client):
        """Gemini generateContent is called and parts are joined."""
        mock_context, mock_client = mock_httpx_client
        mock_client.post.return_value = _json_response(
            {"candidates": [{"content": {"parts": [{"text": "```json\n"}, {"text": "{}```"}]}}]}
        )

        with patch(CLIENT_PATH, return_value=mock_context):
            text = RemoteModelClient("google", "g-key").generate("gemini-2.5-flash", "p", 15000)

        assert text == "```json\n{}```"
        url = mock_client.post.call_args.args[0]
        assert url == (
            "https://generativelanguage.googleapis.com/v1beta/models/"
            "gemini-2.5-flash:generateContent"
        )
        assert mock_client.post.call_args.kwargs["headers"]["x-goog-api-key"] == "g-key"

    def test_openai(self, mock_httpx_client):
        """Chat completions content is returned."""
        mock_context, mock_client = mock_httpx_client
        mock_client.post.return_value = _json_response(
            {"choices": [{"message": {"content": "answer"}}]}
        )

        with patch(CLIENT_PATH, return_value=mock_context):
            text = RemoteModelClient("openai", "sk-test").generate("gpt-4o-mini", "p", 1000)

        assert text == "answer"
        assert mock_client.post.call_args.args[0] == "https://api.openai.com/v1/chat/completions"
        assert mock_client.post.call_args.kwargs["json"]["model"] == "gpt-4o-mini"

    def test_anthropic(self, mock_httpx_client):
        """Text blocks of a messages response are joined."""
        mock_context, mock_client = mock_httpx_client
        mock_client.post.return_value = _json_response(
            {"content": [{"type": "text", "text": "ans"}, {"type": "text", "text": "wer"}]}
        )

        with patch(CLIENT_PATH, return_value=mock_context):
            text = RemoteModelClient("anthropic", "sk-ant").generate("claude", "p", 1000)

        assert text == "answer"
        assert mock_client.post.call_args.kwargs["headers"]["x-api-key"] == "sk-ant"

    def test_base_url_override(self, mock_httpx_client):
        """A custom base URL is used."""
        mock_context, mock_client = mock_httpx_client
        mock_client.post.return_value = _json_response(
            {"choices": [{"message": {"content": "x"}}]}
        )

        with patch(CLIENT_PATH, return_value=mock_context):
            RemoteModelClient("openai", "k", base_url="http://proxy/v1/").generate("m", "p", 1000)

        assert mock_client.post.call_args.args[0] == "http://proxy/v1/chat/completions"

    def test_unexpected_shape(self, mock_httpx_client):
        """Bodies without the expected fields are ModelUnavailable."""
        mock_context, mock_client = mock_httpx_client
        mock_client.post.return_value = _json_response({"candidates": []})

        with patch(CLIENT_PATH, return_value=mock_context):
            with pytest.raises(ModelUnavailable):
                RemoteModelClient("google", "k").generate("gemini", "p", 1000)

    def test_is_available_requires_key(self):
        """Availability only checks that a key is configured."""
        assert RemoteModelClient("google", "k").is_available is True
        assert RemoteModelClient("google", "").is_available is False


# ============================================================================
# Error Mapping
# ============================================================================


class TestErrorMapping:
    """Transport problems surface as ModelUnavailable."""

    def test_timeout(self, mock_httpx_client):
        """Timeouts are ModelUnavailable with the cause chained."""
        mock_context, mock_client = mock_httpx_client
        mock_client.post.side_effect = httpx.ReadTimeout("timed out")

        with patch(CLIENT_PATH, return_value=mock_context):
            with pytest.raises(ModelUnavailable) as exc_info:
                RemoteModelClient("google", "k").generate("gemini", "p", 500)

        assert isinstance(exc_info.value.__cause__, httpx.TimeoutException)
        assert exc_info.value.context["timeout_ms"] == 500

    def test_http_status_error(self, mock_httpx_client):
        """Error status codes are ModelUnavailable."""
        mock_context, mock_client = mock_httpx_client
        response = MagicMock()
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "500 Internal Server Error", request=MagicMock(), response=MagicMock()
        )
        mock_client.post.return_value = response

        with patch(CLIENT_PATH, return_value=mock_context):
            with pytest.raises(ModelUnavailable):
                LocalModelClient().generate("llama3.1", "p", 1000)

    def test_connection_error(self, mock_httpx_client):
        """Connection failures are ModelUnavailable."""
        mock_context, mock_client = mock_httpx_client
        mock_client.post.side_effect = httpx.ConnectError("refused")

        with patch(CLIENT_PATH, return_value=mock_context):
            with pytest.raises(ModelUnavailable):
                RemoteModelClient("openai", "k").generate("m", "p", 1000)

    def test_non_json_body(self, mock_httpx_client):
        """Bodies that are not JSON are ModelUnavailable."""
        mock_context, mock_client = mock_httpx_client
        response = MagicMock()
        response.json.side_effect = ValueError("Expecting value")
        mock_client.post.return_value = response

        with patch(CLIENT_PATH, return_value=mock_context):
            with pytest.raises(ModelUnavailable):
                RemoteModelClient("anthropic", "k").generate("m", "p", 1000)
