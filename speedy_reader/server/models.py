"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation.

HOW: Each endpoint has its own request and response model. All models
include Field descriptions for rich OpenAPI docs.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- wpm below the reader's floor is accepted and clamped, not rejected
- TransformMode is imported from api.models (single source of truth)
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from speedy_reader.api.models import TransformMode
from speedy_reader.config import DEFAULT_PRACTICE_TOPIC, DEFAULT_WPM


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class TimelineRequest(BaseModel):
    """Text to schedule and the base rate to schedule it at."""

    text: str = Field(description="Source text; split on whitespace into display tokens.")
    wpm: float = Field(
        default=DEFAULT_WPM,
        gt=0,
        description="Base words per minute. Values below 50 are clamped to 50.",
    )

    model_config = {"json_schema_extra": {
        "examples": [{"text": "The cat sat. It ran 5 km!", "wpm": 300}]
    }}


class TransformRequest(BaseModel):
    """Text to rewrite and how to rewrite it."""

    text: str = Field(min_length=1, description="Text to transform (must not be blank).")
    mode: TransformMode = Field(description="'summarize' or 'optimize'.")
    language: Optional[str] = Field(
        default=None,
        description="Optional output language, passed through to the model.",
    )


class GenerateRequest(BaseModel):
    """Topic for a generated practice article."""

    topic: str = Field(
        default=DEFAULT_PRACTICE_TOPIC,
        min_length=1,
        description="Article topic.",
    )
    language: Optional[str] = Field(default=None, description="Optional output language.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class TimedTokenModel(BaseModel):
    """One token on the presentation timeline."""

    index: int = Field(description="0-based position in the token sequence.")
    text: str = Field(description="Token surface form, punctuation attached.")
    left: str = Field(description="Characters before the pivot.")
    pivot: str = Field(description="The single fixation character.")
    right: str = Field(description="Characters after the pivot.")
    start_ms: float = Field(description="Offset from the start of the text, in ms.")
    duration_ms: float = Field(description="Display time for this token, in ms.")


class TimelineResponse(BaseModel):
    """The full presentation schedule for a text."""

    wpm: float = Field(description="Effective base rate after clamping.")
    total_ms: float = Field(description="Sum of all token durations, in ms.")
    estimated_seconds: int = Field(description="Advisory reading-time estimate.")
    time_remaining: str = Field(description="Human-readable estimate, e.g. '2 min 5 sec'.")
    tokens: List[TimedTokenModel] = Field(description="Tokens in reading order.")


class TextResponse(BaseModel):
    """Replacement text produced by the collaborator."""

    text: str = Field(description="The generated or transformed text.")
    word_count: int = Field(description="Number of display tokens in text.")


class FormatInfo(BaseModel):
    """Description of an available timeline export format."""

    key: str = Field(description="Format identifier used in API requests.")
    name: str = Field(description="Human-readable format name.")
    suffix: str = Field(description="File suffix produced (e.g. '-rsvp.json').")


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
