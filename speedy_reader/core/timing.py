"""Per-token display duration model and reading-time estimates.

WHY: A flat words-per-minute pace starves long words, numbers, and
sentence endings of processing time. Readers lose the thread at exactly
those tokens: long words take longer to recognise, digits interrupt the
phonological loop, and clause and sentence ends need "wrap-up" time to
integrate meaning.

HOW: Start from the nominal per-word time (60000 / wpm) and multiply in
three independent adjustments — length, numeric content, and terminal
punctuation — in that fixed order.

RULES:
- Length: > 6 chars adds 10% per extra char, capped at +100%;
  < 3 chars is 10% faster; 3–6 chars unchanged
- Any decimal digit: x1.3
- Last char . ! ? (or an embedded newline): x2.2; else , ; : -: x1.5;
  else " ): x1.2 — first match wins
- Result is always > 0; no upper clamp beyond the length cap
- The time-remaining estimate is advisory only (nominal rate x 1.2)
"""

from __future__ import annotations

import math
import re
from typing import List, Sequence

from speedy_reader.core.ir import Timeline, TimedToken
from speedy_reader.core.pivot import resolve_pivot

MS_PER_MINUTE = 60000.0

_LONG_WORD_THRESHOLD = 6
_LONG_WORD_STEP = 0.1
_LONG_WORD_MAX_PENALTY = 1.0
_SHORT_WORD_THRESHOLD = 3
_SHORT_WORD_FACTOR = 0.9

_DIGIT_RE = re.compile(r"[0-9]")
_NUMERIC_FACTOR = 1.3

_SENTENCE_END_CHARS = frozenset(".!?")
_SENTENCE_END_FACTOR = 2.2
_CLAUSE_END_CHARS = frozenset(",;:-")
_CLAUSE_END_FACTOR = 1.5
_QUOTE_END_CHARS = frozenset('")')
_QUOTE_END_FACTOR = 1.2

# Real per-token durations average above the nominal rate.
_REMAINING_CORRECTION = 1.2


def base_duration(wpm: float) -> float:
    """Milliseconds per word at the nominal rate."""
    return MS_PER_MINUTE / wpm


def length_factor(token: str) -> float:
    length = len(token)
    if length > _LONG_WORD_THRESHOLD:
        penalty = min((length - _LONG_WORD_THRESHOLD) * _LONG_WORD_STEP, _LONG_WORD_MAX_PENALTY)
        return 1.0 + penalty
    if length < _SHORT_WORD_THRESHOLD:
        return _SHORT_WORD_FACTOR
    return 1.0


def numeric_factor(token: str) -> float:
    if _DIGIT_RE.search(token):
        return _NUMERIC_FACTOR
    return 1.0


def punctuation_factor(token: str) -> float:
    """Pause multiplier for the token's terminal punctuation."""
    last_char = token[-1:]
    if last_char in _SENTENCE_END_CHARS or "\n" in token:
        return _SENTENCE_END_FACTOR
    if last_char in _CLAUSE_END_CHARS:
        return _CLAUSE_END_FACTOR
    if last_char in _QUOTE_END_CHARS:
        return _QUOTE_END_FACTOR
    return 1.0


def compute_duration(token: str, wpm: float) -> float:
    """How long a token stays on screen, in milliseconds.

    Args:
        token: The display token, punctuation attached.
        wpm: Base words-per-minute rate (> 0).

    Returns:
        Display time in milliseconds. An empty token gets the base time.
    """
    duration = base_duration(wpm)
    if not token:
        return duration

    duration *= length_factor(token)
    duration *= numeric_factor(token)
    duration *= punctuation_factor(token)
    return duration


def estimate_seconds_remaining(remaining_tokens: int, wpm: float) -> int:
    """Advisory whole-second estimate of the time left to read."""
    if remaining_tokens <= 0:
        return 0
    return math.ceil(remaining_tokens / (wpm / 60.0) * _REMAINING_CORRECTION)


def format_time_remaining(seconds: int) -> str:
    """Render a remaining-time estimate as "42 sec" or "3 min 5 sec"."""
    if seconds < 60:
        return "{} sec".format(seconds)
    return "{} min {} sec".format(seconds // 60, seconds % 60)


def build_timeline(tokens: Sequence[str], wpm: float) -> Timeline:
    """Precompute the full presentation schedule for a token sequence.

    WHY: Exporters and the HTTP API need the whole schedule up front,
    not the live, one-timer-at-a-time view the scheduler provides.

    HOW: Walks the tokens, pricing each with compute_duration and
    accumulating start offsets. Pivot splits come from resolve_pivot.
    """
    timed: List[TimedToken] = []
    cursor_ms = 0.0
    for index, token in enumerate(tokens):
        duration_ms = compute_duration(token, wpm)
        split = resolve_pivot(token)
        timed.append(TimedToken(
            index=index,
            text=token,
            left=split.left,
            pivot=split.pivot,
            right=split.right,
            start_ms=cursor_ms,
            duration_ms=duration_ms,
        ))
        cursor_ms += duration_ms

    return Timeline(
        tokens=timed,
        wpm=wpm,
        total_ms=cursor_ms,
        estimated_seconds=estimate_seconds_remaining(len(timed), wpm),
    )
