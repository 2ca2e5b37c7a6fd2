"""FastAPI application exposing the RSVP engine and the transform collaborator.

WHY: Web and mobile front ends want the engine's exact schedule (token
durations and pivot splits) without reimplementing it, and a single
place to call the text-transform collaborator without shipping an API
key to the browser.

HOW: A single stateless FastAPI app. /timeline runs the tokenizer,
pivot resolver, and duration model; /timeline/{format_key} returns an
exporter's file; /transform and /generate forward to GeminiClient.

RULES:
- Error responses use a consistent ErrorResponse schema
- TransformUnavailable → 503, TransformFailed → 502
- The server holds no reading state between requests
- Python 3.9+ compatible (no match/case, no PEP 604 unions at runtime)
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response

from speedy_reader import __version__
from speedy_reader.api.client import GeminiClient, TransformFailed, TransformUnavailable
from speedy_reader.core.ir import Timeline
from speedy_reader.core.scheduler import clamp_wpm
from speedy_reader.core.timing import build_timeline, format_time_remaining
from speedy_reader.core.tokenizer import tokenize, word_count
from speedy_reader.formatters import FORMATTERS
from speedy_reader.server.models import (
    ErrorResponse,
    FormatInfo,
    GenerateRequest,
    HealthResponse,
    TextResponse,
    TimedTokenModel,
    TimelineRequest,
    TimelineResponse,
    TransformRequest,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="SpeedyReader API",
    description=(
        "RSVP timeline computation (per-token durations and optimal "
        "recognition points) and AI text transforms for speed reading."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

_TRANSFORM_ERRORS = {
    503: {"model": ErrorResponse, "description": "Text generator not configured"},
    502: {"model": ErrorResponse, "description": "Text generator call failed"},
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _timeline_for(request: TimelineRequest) -> Timeline:
    return build_timeline(tokenize(request.text), clamp_wpm(request.wpm))


def _transform_http_error(exc: Exception) -> HTTPException:
    """Map a collaborator failure onto an HTTP error."""
    if isinstance(exc, TransformUnavailable):
        return HTTPException(status_code=503, detail=str(exc))
    logger.warning("Transform failed: %s", exc)
    return HTTPException(status_code=502, detail=str(exc))


# ---------------------------------------------------------------------------
# Endpoints: Timeline
# ---------------------------------------------------------------------------


@app.post(
    "/timeline",
    response_model=TimelineResponse,
    tags=["timeline"],
    summary="Compute the RSVP schedule for a text",
    description=(
        "Tokenizes the text on whitespace and returns, for every token, its "
        "pivot split and display duration at the requested base rate."
    ),
)
async def create_timeline(request: TimelineRequest) -> TimelineResponse:
    timeline = _timeline_for(request)
    return TimelineResponse(
        wpm=timeline.wpm,
        total_ms=timeline.total_ms,
        estimated_seconds=timeline.estimated_seconds,
        time_remaining=format_time_remaining(timeline.estimated_seconds),
        tokens=[TimedTokenModel(**t.to_dict()) for t in timeline.tokens],
    )


@app.post(
    "/timeline/{format_key}",
    tags=["timeline"],
    summary="Export the RSVP schedule as a file",
    responses={404: {"model": ErrorResponse, "description": "Unknown format"}},
)
async def export_timeline(format_key: str, request: TimelineRequest) -> Response:
    if format_key not in FORMATTERS:
        available = ", ".join(sorted(FORMATTERS.keys()))
        raise HTTPException(
            status_code=404,
            detail="Unknown format '{}'. Available: {}".format(format_key, available),
        )
    output = FORMATTERS[format_key]().format(_timeline_for(request))[0]
    filename = "timeline{}".format(output.suffix)
    return Response(
        content=output.content,
        media_type=output.media_type,
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(filename)},
    )


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["timeline"],
    summary="List available timeline export formats",
)
async def list_formats() -> List[FormatInfo]:
    result = []
    for key, formatter_cls in sorted(FORMATTERS.items()):
        formatter = formatter_cls()
        result.append(FormatInfo(key=key, name=formatter.name, suffix=formatter.suffix))
    return result


# ---------------------------------------------------------------------------
# Endpoints: Transforms
# ---------------------------------------------------------------------------


@app.post(
    "/transform",
    response_model=TextResponse,
    tags=["transforms"],
    summary="Summarize or RSVP-optimize a text",
    responses={400: {"model": ErrorResponse, "description": "Blank text"}, **_TRANSFORM_ERRORS},
)
async def transform_text(request: TransformRequest) -> TextResponse:
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="Text must not be blank.")
    try:
        async with GeminiClient() as client:
            text = await client.transform(request.text, request.mode, language=request.language)
    except (TransformUnavailable, TransformFailed) as exc:
        raise _transform_http_error(exc) from exc
    return TextResponse(text=text, word_count=word_count(text))


@app.post(
    "/generate",
    response_model=TextResponse,
    tags=["transforms"],
    summary="Generate a practice article",
    responses=_TRANSFORM_ERRORS,
)
async def generate_text(request: GenerateRequest) -> TextResponse:
    try:
        async with GeminiClient() as client:
            text = await client.generate(request.topic, language=request.language)
    except (TransformUnavailable, TransformFailed) as exc:
        raise _transform_http_error(exc) from exc
    return TextResponse(text=text, word_count=word_count(text))


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api():
    """Entry point for the speedy-reader-api console script."""
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
