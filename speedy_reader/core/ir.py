"""Intermediate representation of a precomputed RSVP timeline.

WHY: Live playback only ever needs the current token, but exporters
(JSON, SRT) and the HTTP API need the whole schedule at once. The IR
gives them a single, well-typed form to consume, decoupling the duration
model from every output format.

HOW: Two dataclasses:
  TimedToken — one display token with its pivot split and schedule slot
  Timeline   — the ordered tokens plus the rate they were priced at

RULES:
- All times are float milliseconds from the start of the text
- start_ms of token i+1 == start_ms + duration_ms of token i
- left + pivot + right == text for every token
- estimated_seconds is the advisory estimate, not total_ms / 1000
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class TimedToken:
    """A display token placed on the presentation timeline."""

    index: int
    text: str
    left: str
    pivot: str
    right: str
    start_ms: float
    duration_ms: float

    @property
    def end_ms(self) -> float:
        return self.start_ms + self.duration_ms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "text": self.text,
            "left": self.left,
            "pivot": self.pivot,
            "right": self.right,
            "start_ms": round(self.start_ms, 3),
            "duration_ms": round(self.duration_ms, 3),
        }


@dataclass
class Timeline:
    """The complete presentation schedule for one text at one rate.

    RULES:
    - tokens: ordered as in the source text
    - wpm: base rate the durations were computed with
    - total_ms: sum of all token durations
    - estimated_seconds: advisory time-to-read shown to the user
    """

    tokens: List[TimedToken] = field(default_factory=list)
    wpm: float = 0.0
    total_ms: float = 0.0
    estimated_seconds: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wpm": self.wpm,
            "total_ms": round(self.total_ms, 3),
            "estimated_seconds": self.estimated_seconds,
            "tokens": [t.to_dict() for t in self.tokens],
        }
