"""Async HTTP client for the Gemini text-generation API.

WHY: The reader can summarize, RSVP-optimize, or generate practice text
through an external generative model. To the engine that model is a black
box: "given text and an intent, return new text or fail". This module is
that black box, so callers (session, CLI, GUI, HTTP API) never see HTTP.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. GeminiClient is an
async context manager — enter it to get an authenticated client, exit to
close the connection pool. Every operation builds a prompt and goes
through one generate_content() call against
POST /models/{model}:generateContent.

RULES:
- Always use the async context manager (async with GeminiClient() as client:)
- A missing API key raises TransformUnavailable at construction time
- Network errors, non-2xx responses, and empty output raise TransformFailed
- Nothing here ever touches the reader's text; callers decide what to apply
- Status callback (on_status) is optional; when provided, called with status strings
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Optional

import httpx

from speedy_reader.api.models import GenerateContentResponse, TransformMode
from speedy_reader.api.prompts import practice_prompt, transform_prompt
from speedy_reader.config import (
    DEFAULT_PRACTICE_TOPIC,
    GEMINI_BASE_URL,
    GEMINI_MODEL,
    load_api_key,
)

_REQUEST_TIMEOUT_S = 120.0
_CONNECT_TIMEOUT_S = 15.0


class TransformError(Exception):
    """Base class for every text-transform collaborator failure.

    WHY: Callers only need one except clause to leave the text untouched
    and surface a retryable error.
    """


class TransformUnavailable(TransformError):
    """Raised when the collaborator is not configured (e.g. no API key).

    RULES:
    - Raised before any network call is made
    """


class TransformFailed(TransformError):
    """Raised when a transform call was attempted and did not produce text.

    WHY: Distinguishes "the call broke" (network error, API error, empty
    or blocked output) from "the call could not be made".

    RULES:
    - status_code is the HTTP status when the API answered, else None
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class GeminiClient:
    """Async client for the Gemini generateContent endpoint.

    WHY: Provides a clean, typed interface for the three transforms the
    reader offers: summarize, optimize for RSVP, and practice text.

    HOW: Wraps httpx.AsyncClient with the x-goog-api-key header. Use as
    an async context manager to ensure the HTTP connection pool is closed.

    RULES:
    - Use as: async with GeminiClient() as client: ...
    - api_key defaults to load_api_key() from .env
    - base_url and model default to GEMINI_BASE_URL / GEMINI_MODEL
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if api_key is None:
            try:
                api_key = load_api_key()
            except ValueError as exc:
                raise TransformUnavailable(str(exc)) from exc
        self._api_key = api_key
        self._base_url = (base_url or GEMINI_BASE_URL).rstrip("/")
        self._model = model or GEMINI_MODEL
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> GeminiClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"x-goog-api-key": self._api_key},
            timeout=httpx.Timeout(_REQUEST_TIMEOUT_S, connect=_CONNECT_TIMEOUT_S),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "GeminiClient must be used as an async context manager: "
                "async with GeminiClient() as client: ..."
            )
        return self._client

    # ------------------------------------------------------------------
    # Raw generation
    # ------------------------------------------------------------------

    async def generate_content(
        self,
        prompt: str,
        on_status: Callable[[str], None] | None = None,
    ) -> str:
        """Send one prompt and return the generated text.

        RULES:
        - httpx transport errors become TransformFailed (no status code)
        - Non-200 responses become TransformFailed with the API message
        - Blocked prompts and blank output become TransformFailed

        Args:
            prompt: The full prompt text.
            on_status: Optional callback for status updates.

        Returns:
            The generated text, stripped of surrounding whitespace.
        """
        client = self._ensure_client()
        if on_status:
            on_status("Contacting {}...".format(self._model))

        body = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        try:
            resp = await client.post(
                "/models/{}:generateContent".format(self._model),
                json=body,
            )
        except httpx.HTTPError as exc:
            raise TransformFailed("Gemini request failed: {}".format(exc)) from exc

        if resp.status_code != 200:
            raise TransformFailed(_error_message(resp), status_code=resp.status_code)

        try:
            parsed = GenerateContentResponse.from_dict(resp.json())
        except (ValueError, AttributeError, TypeError) as exc:
            raise TransformFailed(
                "Malformed Gemini response: {}".format(exc),
                status_code=resp.status_code,
            ) from exc

        text = parsed.text.strip()
        if not text:
            reason = parsed.block_reason or "empty response"
            raise TransformFailed("Gemini returned no text ({})".format(reason))

        if on_status:
            on_status("Received {} characters.".format(len(text)))
        return text

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------

    async def transform(
        self,
        text: str,
        mode: TransformMode,
        language: Optional[str] = None,
        on_status: Callable[[str], None] | None = None,
    ) -> str:
        """Rewrite text according to mode; the input itself is never modified.

        Raises:
            ValueError: If text is empty or whitespace-only.
            TransformFailed: If the call does not produce text.
        """
        if not text.strip():
            raise ValueError("Cannot transform empty text")
        return await self.generate_content(
            transform_prompt(text, mode, language), on_status=on_status
        )

    async def summarize(self, text: str, language: Optional[str] = None) -> str:
        return await self.transform(text, TransformMode.SUMMARIZE, language)

    async def optimize(self, text: str, language: Optional[str] = None) -> str:
        return await self.transform(text, TransformMode.OPTIMIZE, language)

    async def generate(
        self,
        topic: str = DEFAULT_PRACTICE_TOPIC,
        language: Optional[str] = None,
        on_status: Callable[[str], None] | None = None,
    ) -> str:
        """Generate a ~300-word practice article about topic."""
        return await self.generate_content(
            practice_prompt(topic, language), on_status=on_status
        )


def _error_message(resp: httpx.Response) -> str:
    """Extract the API's error message, falling back to the raw body."""
    try:
        error = resp.json().get("error") or {}
        message = error.get("message")
    except (ValueError, AttributeError):
        message = None
    return "Gemini API error {}: {}".format(resp.status_code, message or resp.text)
