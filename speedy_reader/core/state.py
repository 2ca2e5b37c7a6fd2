"""Playback state and derived phase for the RSVP scheduler.

WHY: The scheduler, the GUI, the CLI player, and the tests all need to
agree on what "where are we and are we moving" means. Keeping the raw
state in one dataclass and deriving the phase from it avoids a second
source of truth.

HOW: PlaybackState holds the five mutable fields. PlaybackPhase is
computed from them, never stored. PlaybackSnapshot is the frozen view
handed to observers after each transition.

RULES:
- 0 <= position <= len(tokens)
- position == len(tokens) on a non-empty text is FINISHED and never playing
- An empty text is IDLE, not FINISHED
- wpm >= MIN_WPM; MIN_FONT_SIZE <= font_size <= MAX_FONT_SIZE
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List

from speedy_reader.config import DEFAULT_FONT_SIZE, DEFAULT_WPM
from speedy_reader.core.pivot import PivotSplit


class PlaybackPhase(str, enum.Enum):
    """Derived playback phase.

    Inherits from str so values serialize cleanly to JSON.
    """

    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


@dataclass
class PlaybackState:
    """Mutable playback state, owned exclusively by a PlaybackScheduler."""

    tokens: List[str] = field(default_factory=list)
    position: int = 0
    is_playing: bool = False
    wpm: float = DEFAULT_WPM
    font_size: float = DEFAULT_FONT_SIZE

    @property
    def is_finished(self) -> bool:
        return bool(self.tokens) and self.position >= len(self.tokens)

    @property
    def phase(self) -> PlaybackPhase:
        if self.is_playing:
            return PlaybackPhase.PLAYING
        if self.is_finished:
            return PlaybackPhase.FINISHED
        if self.position == 0:
            return PlaybackPhase.IDLE
        return PlaybackPhase.PAUSED

    @property
    def current_token(self) -> str:
        if 0 <= self.position < len(self.tokens):
            return self.tokens[self.position]
        return ""


@dataclass(frozen=True)
class PlaybackSnapshot:
    """Immutable view of the scheduler after a transition.

    Carries everything a renderer needs for one frame, including the
    pivot split of the current token.
    """

    position: int
    total: int
    is_playing: bool
    phase: PlaybackPhase
    wpm: float
    font_size: float
    token: str
    split: PivotSplit
    progress: float
    seconds_remaining: int
