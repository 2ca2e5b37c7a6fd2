"""Text-transform collaborator package — async HTTP interface to Gemini.

WHY: Summaries, RSVP optimization, and practice texts come from an
external generative model. This package hides that service behind one
async client class and two error types.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. Prompt templates live
in prompts.py, response parsing in models.py.

RULES:
- All HTTP calls go through GeminiClient (no direct httpx usage elsewhere)
- Authentication is via API key from config
- Failures are TransformUnavailable or TransformFailed, nothing else
"""

from speedy_reader.api.client import (
    GeminiClient,
    TransformError,
    TransformFailed,
    TransformUnavailable,
)
from speedy_reader.api.models import TransformMode

__all__ = [
    "GeminiClient",
    "TransformError",
    "TransformFailed",
    "TransformMode",
    "TransformUnavailable",
]
