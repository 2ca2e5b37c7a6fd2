"""Shared test fixtures for the speedy_reader test suite.

WHY: Scheduler, session, CLI, and formatter tests all need the same
sample text and a deterministic timer backend. Real wall-clock timers
would make playback tests slow and flaky.

HOW: ManualClock implements the scheduler's call_later contract on a
virtual clock. Tests advance it explicitly and every callback that falls
due fires in time order.

RULES:
- SAMPLE_TEXT is the worked duration example: 7 tokens
- ManualClock never fires a cancelled callback
- ManualClock.pending counts live (uncancelled, unfired) callbacks
"""

from __future__ import annotations

import itertools
from typing import Callable, List, Optional

import pytest

SAMPLE_TEXT = "The cat sat. It ran 5 km!"
SAMPLE_TOKENS = ["The", "cat", "sat.", "It", "ran", "5", "km!"]

TEN_WORDS = "one two three four five six seven eight nine ten"


class _ManualHandle:
    def __init__(self, due: float, seq: int, callback: Callable[[], None]) -> None:
        self.due = due
        self.seq = seq
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualClock:
    """A virtual clock with an asyncio-style call_later."""

    def __init__(self) -> None:
        self.now = 0.0
        self._handles: List[_ManualHandle] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle(self.now + delay, next(self._seq), callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for h in self._handles if not h.cancelled and not h.fired)

    def next_delay(self) -> Optional[float]:
        """Seconds until the next live callback, or None."""
        live = [h for h in self._handles if not h.cancelled and not h.fired]
        if not live:
            return None
        return min(h.due for h in live) - self.now

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due callbacks in order."""
        target = self.now + seconds
        while True:
            due = [
                h for h in self._handles
                if not h.cancelled and not h.fired and h.due <= target + 1e-9
            ]
            if not due:
                break
            handle = min(due, key=lambda h: (h.due, h.seq))
            self.now = max(self.now, handle.due)
            handle.fired = True
            handle.callback()
        self.now = target

    def step(self) -> bool:
        """Fire exactly the next live callback; False if there is none."""
        delay = self.next_delay()
        if delay is None:
            return False
        self.advance(delay)
        return True

    def run_until_idle(self, limit: int = 10000) -> int:
        fired = 0
        while fired < limit and self.step():
            fired += 1
        return fired


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def sample_text():
    return SAMPLE_TEXT


@pytest.fixture
def ten_words():
    return TEN_WORDS
