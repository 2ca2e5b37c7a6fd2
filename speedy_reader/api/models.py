"""Gemini API response dataclasses and the transform mode enum.

WHY: The generateContent endpoint returns nested JSON (candidates →
content → parts → text). Typed dataclasses make the one path we read
explicit and keep the parsing in one place.

HOW: Each dataclass maps to a Gemini JSON object. Factory methods
(from_dict) handle parsing from raw API responses and tolerate absent
optional fields.

RULES:
- Only the first candidate is used as the transform result
- Text from all parts of a candidate is concatenated in order
- A response with no candidates (e.g. a blocked prompt) has text == ""
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional


class TransformMode(str, enum.Enum):
    """How the collaborator should rewrite the reader's text."""

    SUMMARIZE = "summarize"
    OPTIMIZE = "optimize"


@dataclass
class Candidate:
    """One generated candidate from a generateContent response."""

    text: str
    finish_reason: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> Candidate:
        parts = (data.get("content") or {}).get("parts") or []
        return cls(
            text="".join(part.get("text", "") for part in parts),
            finish_reason=data.get("finishReason"),
        )


@dataclass
class GenerateContentResponse:
    """Parsed body of POST /models/{model}:generateContent.

    RULES:
    - candidates may be empty when the prompt was blocked
    - block_reason carries promptFeedback.blockReason when present
    """

    candidates: List[Candidate] = field(default_factory=list)
    block_reason: Optional[str] = None

    @property
    def text(self) -> str:
        if not self.candidates:
            return ""
        return self.candidates[0].text

    @classmethod
    def from_dict(cls, data: dict) -> GenerateContentResponse:
        feedback = data.get("promptFeedback") or {}
        return cls(
            candidates=[Candidate.from_dict(c) for c in data.get("candidates") or []],
            block_reason=feedback.get("blockReason"),
        )
