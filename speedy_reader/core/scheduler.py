"""Timer-driven RSVP playback scheduler.

WHY: Playback is a small state machine (idle, playing, paused, finished)
driven by one delayed action at a time: show a token, wait its computed
duration, advance. Two armed timers would double-advance the position,
so every transition that moves the reader must cancel before it re-arms.

HOW: The scheduler owns a PlaybackState and a single pending timer
handle. The timer itself comes from an injected ``call_later`` function
so the same scheduler runs on an asyncio loop (CLI), on Tk's ``after``
(GUI), or on a manual clock (tests). Each armed timer carries an arm
generation; a callback whose generation is stale is ignored, which
covers backends that cannot revoke a callback already queued.

RULES:
- At most one pending advance exists at any moment
- pause/reset/seek/load cancel the pending advance before anything else
- play() is a no-op on a finished or empty text, or when already playing
- seek() keeps is_playing unless it lands on the end (finished)
- set_rate() never reschedules the wait already in flight
- Transitions hold self._lock; observers are notified after release
- Resuming after pause re-shows the current token for its full duration
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Any, Callable, Optional, Sequence

from speedy_reader.config import (
    DEFAULT_FONT_SIZE,
    DEFAULT_WPM,
    MAX_FONT_SIZE,
    MIN_FONT_SIZE,
    MIN_WPM,
)
from speedy_reader.core.pivot import PivotSplit, resolve_pivot
from speedy_reader.core.state import PlaybackPhase, PlaybackSnapshot, PlaybackState
from speedy_reader.core.timing import (
    compute_duration,
    estimate_seconds_remaining,
    format_time_remaining,
)
from speedy_reader.core.tokenizer import tokenize

logger = logging.getLogger(__name__)

# call_later(delay_seconds, callback) -> handle with a .cancel() method.
# asyncio.AbstractEventLoop.call_later satisfies this directly.
CallLater = Callable[[float, Callable[[], None]], Any]


def clamp_wpm(wpm: float) -> float:
    """Apply the rate floor; there is no ceiling."""
    return max(MIN_WPM, wpm)


def clamp_font_size(size: float) -> float:
    return max(MIN_FONT_SIZE, min(MAX_FONT_SIZE, size))


class PlaybackScheduler:
    """Owns one PlaybackState and its single pending advance timer.

    Use as::

        loop = asyncio.get_running_loop()
        scheduler = PlaybackScheduler(loop.call_later, on_change=render)
        scheduler.load("The cat sat.")
        scheduler.play()
    """

    def __init__(
        self,
        call_later: CallLater,
        text: str = "",
        wpm: float = DEFAULT_WPM,
        font_size: float = DEFAULT_FONT_SIZE,
        on_change: Optional[Callable[[PlaybackSnapshot], None]] = None,
    ) -> None:
        self._call_later = call_later
        self._state = PlaybackState(
            tokens=tokenize(text),
            wpm=clamp_wpm(wpm),
            font_size=clamp_font_size(font_size),
        )
        self._on_change = on_change
        self._pending: Any = None
        self._arm_generation = 0
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def tokens(self) -> Sequence[str]:
        return tuple(self._state.tokens)

    @property
    def position(self) -> int:
        return self._state.position

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def wpm(self) -> float:
        return self._state.wpm

    @property
    def font_size(self) -> float:
        return self._state.font_size

    @property
    def phase(self) -> PlaybackPhase:
        return self._state.phase

    @property
    def current_token(self) -> str:
        return self._state.current_token

    @property
    def has_pending_advance(self) -> bool:
        return self._pending is not None

    def current_split(self) -> PivotSplit:
        """Pivot split of the token on screen, recomputed on each call."""
        return resolve_pivot(self._state.current_token)

    @property
    def progress(self) -> float:
        """Percentage of the text already passed, 0–100."""
        total = len(self._state.tokens)
        if total == 0:
            return 0.0
        return self._state.position / total * 100.0

    @property
    def seconds_remaining(self) -> int:
        remaining = len(self._state.tokens) - self._state.position
        return estimate_seconds_remaining(remaining, self._state.wpm)

    @property
    def time_remaining_text(self) -> str:
        return format_time_remaining(self.seconds_remaining)

    def snapshot(self) -> PlaybackSnapshot:
        with self._lock:
            return self._snapshot_locked()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def load(self, text: str) -> None:
        """Replace the source text; always lands in IDLE at position 0."""
        with self._lock:
            self._cancel_pending()
            self._state.tokens = tokenize(text)
            self._state.position = 0
            self._state.is_playing = False
            snapshot = self._snapshot_locked()
        logger.debug("Loaded %d tokens", snapshot.total)
        self._emit(snapshot)

    def play(self) -> None:
        with self._lock:
            snapshot = self._play_locked()
        self._emit(snapshot)

    def pause(self) -> None:
        with self._lock:
            snapshot = self._pause_locked()
        self._emit(snapshot)

    def toggle(self) -> None:
        """Single play/pause control."""
        with self._lock:
            if self._state.is_playing:
                snapshot = self._pause_locked()
            else:
                snapshot = self._play_locked()
        self._emit(snapshot)

    def reset(self) -> None:
        with self._lock:
            self._cancel_pending()
            self._state.position = 0
            self._state.is_playing = False
            snapshot = self._snapshot_locked()
        self._emit(snapshot)

    def seek(self, fraction: float) -> None:
        """Jump to floor(fraction * len(tokens)), clamped into range."""
        with self._lock:
            state = self._state
            total = len(state.tokens)
            position = math.floor(fraction * total) if math.isfinite(fraction) else 0
            state.position = max(0, min(total, position))

            if state.is_playing:
                if state.position >= total:
                    self._cancel_pending()
                    state.is_playing = False
                else:
                    self._arm()
            snapshot = self._snapshot_locked()
        self._emit(snapshot)

    def set_rate(self, wpm: float) -> None:
        """Change the base rate for every scheduling decision from now on."""
        with self._lock:
            self._state.wpm = clamp_wpm(wpm)
            snapshot = self._snapshot_locked()
        self._emit(snapshot)

    def change_rate(self, delta: float) -> None:
        self.set_rate(self._state.wpm + delta)

    def set_font_size(self, delta: float) -> None:
        """Additive font size change, clamped to the display bounds."""
        with self._lock:
            self._state.font_size = clamp_font_size(self._state.font_size + delta)
            snapshot = self._snapshot_locked()
        self._emit(snapshot)

    # ------------------------------------------------------------------
    # Timer plumbing
    # ------------------------------------------------------------------

    def _play_locked(self) -> Optional[PlaybackSnapshot]:
        """Start playing; None when there is nothing to change."""
        state = self._state
        if state.is_playing or state.position >= len(state.tokens):
            return None
        state.is_playing = True
        self._arm()
        return self._snapshot_locked()

    def _pause_locked(self) -> Optional[PlaybackSnapshot]:
        if not self._state.is_playing:
            return None
        self._cancel_pending()
        self._state.is_playing = False
        return self._snapshot_locked()

    def _arm(self) -> None:
        """Cancel any pending advance and arm one for the current token."""
        self._cancel_pending()
        self._arm_generation += 1
        generation = self._arm_generation
        delay_ms = compute_duration(self._state.current_token, self._state.wpm)
        self._pending = self._call_later(
            delay_ms / 1000.0,
            lambda: self._advance(generation),
        )

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self._arm_generation += 1

    def _advance(self, generation: int) -> None:
        with self._lock:
            if generation != self._arm_generation or not self._state.is_playing:
                logger.debug("Ignoring stale advance (generation %d)", generation)
                return
            self._pending = None
            state = self._state
            if state.position + 1 < len(state.tokens):
                state.position += 1
                self._arm()
            else:
                state.position = len(state.tokens)
                state.is_playing = False
            snapshot = self._snapshot_locked()
        self._emit(snapshot)

    def _snapshot_locked(self) -> PlaybackSnapshot:
        state = self._state
        return PlaybackSnapshot(
            position=state.position,
            total=len(state.tokens),
            is_playing=state.is_playing,
            phase=state.phase,
            wpm=state.wpm,
            font_size=state.font_size,
            token=state.current_token,
            split=resolve_pivot(state.current_token),
            progress=self.progress,
            seconds_remaining=self.seconds_remaining,
        )

    def _emit(self, snapshot: Optional[PlaybackSnapshot]) -> None:
        if snapshot is not None and self._on_change is not None:
            self._on_change(snapshot)
