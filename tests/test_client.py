"""Tests for the async Gemini client.

WHY: Every transform failure mode (no key, transport error, API error,
blocked or empty output) must surface as the right TransformError
subclass so callers can leave the reader's text untouched.

HOW: httpx.MockTransport stands in for the network. Each test builds a
GeminiClient with a handler that inspects the request and returns a
canned response. Coroutines run via asyncio.run().

RULES:
- No real network access
- The API key comes from the constructor or a monkeypatched environment
"""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from speedy_reader.api.client import (
    GeminiClient,
    TransformError,
    TransformFailed,
    TransformUnavailable,
)
from speedy_reader.api.models import GenerateContentResponse, TransformMode
from speedy_reader.api.prompts import practice_prompt, transform_prompt


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _ok_body(text):
    return {
        "candidates": [{
            "content": {"role": "model", "parts": [{"text": text}]},
            "finishReason": "STOP",
        }],
    }


def _client(handler, **kwargs) -> GeminiClient:
    kwargs.setdefault("api_key", "test-key")
    return GeminiClient(transport=httpx.MockTransport(handler), **kwargs)


def _run(client: GeminiClient, call):
    async def _go():
        async with client as c:
            return await call(c)
    return asyncio.run(_go())


# ---------------------------------------------------------------------------
# TestConfiguration
# ---------------------------------------------------------------------------


class TestConfiguration:
    def test_missing_key_is_unavailable(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("API_KEY", raising=False)
        with pytest.raises(TransformUnavailable):
            GeminiClient()

    def test_fallback_key_name(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("API_KEY", "fallback-key")
        seen = {}

        def handler(request):
            seen["key"] = request.headers.get("x-goog-api-key")
            return httpx.Response(200, json=_ok_body("ok"))

        client = GeminiClient(transport=httpx.MockTransport(handler))
        _run(client, lambda c: c.generate_content("hi"))
        assert seen["key"] == "fallback-key"

    def test_unavailable_is_a_transform_error(self):
        assert issubclass(TransformUnavailable, TransformError)
        assert issubclass(TransformFailed, TransformError)

    def test_requires_context_manager(self):
        client = _client(lambda request: httpx.Response(200, json=_ok_body("x")))
        with pytest.raises(RuntimeError, match="async context manager"):
            asyncio.run(client.generate_content("hi"))


# ---------------------------------------------------------------------------
# TestGenerateContent
# ---------------------------------------------------------------------------


class TestGenerateContent:
    def test_request_shape(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["method"] = request.method
            seen["key"] = request.headers.get("x-goog-api-key")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_ok_body("  hello  "))

        client = _client(handler, base_url="https://example.test/v1beta", model="test-model")
        result = _run(client, lambda c: c.generate_content("prompt text"))

        assert result == "hello"
        assert seen["method"] == "POST"
        assert seen["url"] == "https://example.test/v1beta/models/test-model:generateContent"
        assert seen["key"] == "test-key"
        assert seen["body"] == {
            "contents": [{"role": "user", "parts": [{"text": "prompt text"}]}],
        }

    def test_multiple_parts_are_joined(self):
        body = {"candidates": [{"content": {"parts": [{"text": "one "}, {"text": "two"}]}}]}
        client = _client(lambda request: httpx.Response(200, json=body))
        assert _run(client, lambda c: c.generate_content("p")) == "one two"

    def test_status_callback(self):
        messages = []
        client = _client(lambda request: httpx.Response(200, json=_ok_body("abc")))
        _run(client, lambda c: c.generate_content("p", on_status=messages.append))
        assert len(messages) == 2
        assert messages[-1] == "Received 3 characters."

    def test_api_error_is_failed(self):
        def handler(request):
            return httpx.Response(403, json={"error": {"code": 403, "message": "API key not valid"}})

        client = _client(handler)
        with pytest.raises(TransformFailed) as excinfo:
            _run(client, lambda c: c.generate_content("p"))
        assert excinfo.value.status_code == 403
        assert "API key not valid" in str(excinfo.value)

    def test_non_json_error_body(self):
        client = _client(lambda request: httpx.Response(500, text="upstream exploded"))
        with pytest.raises(TransformFailed, match="upstream exploded"):
            _run(client, lambda c: c.generate_content("p"))

    def test_transport_error_is_failed(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(handler)
        with pytest.raises(TransformFailed) as excinfo:
            _run(client, lambda c: c.generate_content("p"))
        assert excinfo.value.status_code is None

    def test_malformed_json_is_failed(self):
        client = _client(lambda request: httpx.Response(200, text="not json"))
        with pytest.raises(TransformFailed, match="Malformed"):
            _run(client, lambda c: c.generate_content("p"))

    def test_empty_output_is_failed(self):
        client = _client(lambda request: httpx.Response(200, json=_ok_body("   ")))
        with pytest.raises(TransformFailed, match="no text"):
            _run(client, lambda c: c.generate_content("p"))

    def test_blocked_prompt_is_failed(self):
        body = {"promptFeedback": {"blockReason": "SAFETY"}}
        client = _client(lambda request: httpx.Response(200, json=body))
        with pytest.raises(TransformFailed, match="SAFETY"):
            _run(client, lambda c: c.generate_content("p"))


# ---------------------------------------------------------------------------
# TestTransforms
# ---------------------------------------------------------------------------


class TestTransforms:
    def _capture(self):
        seen = {}

        def handler(request):
            seen["prompt"] = json.loads(request.content)["contents"][0]["parts"][0]["text"]
            return httpx.Response(200, json=_ok_body("result"))

        return seen, handler

    def test_summarize_prompt(self):
        seen, handler = self._capture()
        result = _run(_client(handler), lambda c: c.summarize("Long text."))
        assert result == "result"
        assert seen["prompt"] == transform_prompt("Long text.", TransformMode.SUMMARIZE)
        assert "speed reading" in seen["prompt"]

    def test_optimize_prompt(self):
        seen, handler = self._capture()
        _run(_client(handler), lambda c: c.optimize("It costs $50."))
        assert "NO INFORMATION LOSS" in seen["prompt"]
        assert seen["prompt"].endswith("It costs $50.")

    def test_language_appended(self):
        seen, handler = self._capture()
        _run(_client(handler), lambda c: c.transform("Olá", TransformMode.OPTIMIZE, language="Portuguese"))
        assert seen["prompt"].endswith("Respond in this language: Portuguese")

    def test_generate_prompt(self):
        seen, handler = self._capture()
        _run(_client(handler), lambda c: c.generate("Tides"))
        assert seen["prompt"] == practice_prompt("Tides")
        assert '"Tides"' in seen["prompt"]

    def test_blank_text_rejected_before_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=_ok_body("x"))

        with pytest.raises(ValueError):
            _run(_client(handler), lambda c: c.transform("   ", TransformMode.SUMMARIZE))
        assert calls == []


# ---------------------------------------------------------------------------
# TestModels
# ---------------------------------------------------------------------------


class TestModels:
    def test_first_candidate_wins(self):
        parsed = GenerateContentResponse.from_dict({
            "candidates": [
                {"content": {"parts": [{"text": "first"}]}},
                {"content": {"parts": [{"text": "second"}]}},
            ],
        })
        assert parsed.text == "first"

    def test_no_candidates(self):
        parsed = GenerateContentResponse.from_dict({})
        assert parsed.text == ""
        assert parsed.block_reason is None

    def test_finish_reason(self):
        parsed = GenerateContentResponse.from_dict(_ok_body("x"))
        assert parsed.candidates[0].finish_reason == "STOP"
