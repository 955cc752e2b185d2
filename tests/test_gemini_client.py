"""Tests for the Gemini backend (mocked API calls)."""

import json
from unittest.mock import MagicMock, patch

import pytest
from google.api_core import exceptions as google_exceptions

from errors import ExternalServiceError, QuotaExceededError
from gemini_client import GeminiClient, GeminiScanner, _parse_json


def fake_model(text=None, error=None):
    model = MagicMock()
    if error is not None:
        model.generate_content.side_effect = error
    else:
        model.generate_content.return_value = MagicMock(text=text)
    return model


class TestParseJson:
    def test_plain_json(self):
        assert _parse_json('{"items": []}') == {"items": []}

    def test_markdown_fences(self):
        text = '```json\n{"total": 12.5}\n```'
        assert _parse_json(text) == {"total": 12.5}

    def test_empty(self):
        with pytest.raises(ExternalServiceError):
            _parse_json("")

    def test_invalid(self):
        with pytest.raises(ExternalServiceError, match="invalid JSON"):
            _parse_json("Sure! Here is your receipt")


class TestGeminiClient:
    def test_missing_key(self):
        with pytest.raises(ExternalServiceError, match="Missing API key") as info:
            GeminiClient(api_key="").interpret_command([], "Ann had soup")
        assert info.value.status == 500

    def test_interpret_command(self):
        body = {"items": [{"id": "1", "assignedTo": ["Ann"]}], "people_found": ["Ann"],
                "response_message": "Soup for Ann"}
        model = fake_model(json.dumps(body))
        with patch("gemini_client.genai") as genai:
            genai.GenerativeModel.return_value = model
            result = GeminiClient(api_key="test-key").interpret_command(
                [{"id": "1", "name": "Soup", "price": 5.0, "current_assignments": []}],
                'Ann had the "soup"',
            )

        assert result == body
        genai.configure.assert_called_once_with(api_key="test-key")
        prompt = model.generate_content.call_args[0][0][0]
        assert "Ann had the 'soup'" in prompt
        assert '"Soup"' in prompt

    def test_analyze_receipt_sends_image_bytes(self):
        model = fake_model('{"items": [], "total": 0}')
        with patch("gemini_client.genai") as genai:
            genai.GenerativeModel.return_value = model
            result = GeminiScanner(GeminiClient(api_key="k")).scan(
                "data:image/png;base64,aGVsbG8=", "image/png"
            )

        assert result == {"items": [], "total": 0}
        image_part = model.generate_content.call_args[0][0][0]
        assert image_part == {"mime_type": "image/png", "data": b"hello"}

    def test_bad_image_payload(self):
        with pytest.raises(ExternalServiceError) as info:
            GeminiClient(api_key="k").analyze_receipt("***not base64***")
        assert info.value.status == 400

    def test_resource_exhausted_is_quota(self):
        model = fake_model(error=google_exceptions.ResourceExhausted("slow down"))
        with patch("gemini_client.genai") as genai:
            genai.GenerativeModel.return_value = model
            with pytest.raises(QuotaExceededError):
                GeminiClient(api_key="k").interpret_command([], "x")

    def test_quota_text_is_quota(self):
        model = fake_model(error=google_exceptions.GoogleAPIError("Quota exceeded for model"))
        with patch("gemini_client.genai") as genai:
            genai.GenerativeModel.return_value = model
            with pytest.raises(QuotaExceededError):
                GeminiClient(api_key="k").interpret_command([], "x")

    def test_other_api_error(self):
        model = fake_model(error=google_exceptions.InternalServerError("oops"))
        with patch("gemini_client.genai") as genai:
            genai.GenerativeModel.return_value = model
            with pytest.raises(ExternalServiceError) as info:
                GeminiClient(api_key="k").interpret_command([], "x")
        assert not isinstance(info.value, QuotaExceededError)

    def test_transport_error_wrapped(self):
        model = fake_model(error=ConnectionError("connection reset"))
        with patch("gemini_client.genai") as genai:
            genai.GenerativeModel.return_value = model
            with pytest.raises(ExternalServiceError, match="connection reset") as info:
                GeminiClient(api_key="k").interpret_command([], "x")
        assert info.value.status == 502
