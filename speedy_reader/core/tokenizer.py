"""Whitespace tokenizer for RSVP display units.

WHY: A display unit must keep its attached punctuation — "sat." and
"km!" carry the sentence wrap-up pause that the duration model keys on.
Splitting on words or punctuation classes would throw that away.

HOW: Split on runs of any whitespace (space, tab, newline alike) and drop
empty pieces left by leading, trailing, or repeated separators.

RULES:
- Surface form is preserved (no casing or punctuation stripping)
- Token order matches source order
- Empty or whitespace-only input yields an empty list
"""

from __future__ import annotations

import re
from typing import List

_WHITESPACE_RE = re.compile(r"\s+")


def tokenize(text: str) -> List[str]:
    """Split text into an ordered list of non-empty display tokens."""
    return [piece for piece in _WHITESPACE_RE.split(text) if piece]


def word_count(text: str) -> int:
    """Number of display tokens in text (shown next to the input box)."""
    return len(tokenize(text))
