"""Reader session: the current text, its scheduler, and the transform guard.

WHY: Text can be replaced from two directions — the user typing or
loading new text, and an asynchronous transform (summarize, optimize,
practice text) finishing later. Only the most recent intent may win, and
a failed transform must leave the text exactly as it was.

HOW: The session keeps a text version counter. A transform takes a
ticket (the version at the time it started) and its result is applied
only if no replacement happened meanwhile. A "generating" flag rejects
overlapping transforms. Surfaces that run the network call on another
thread (the GUI) use begin/complete/fail around fetch_*; single-threaded
surfaces just await transform() / generate().

RULES:
- set_text() always reloads the scheduler: position 0, not playing
- While a transform is outstanding, another begin() returns None
- A failed transform sets last_error and re-raises; the text is untouched
- A result or failure whose ticket is older than the current text is
  discarded: transform() returns False and last_error stays unset
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from speedy_reader.api.client import GeminiClient, TransformError
from speedy_reader.api.models import TransformMode
from speedy_reader.config import DEFAULT_PRACTICE_TOPIC
from speedy_reader.core.scheduler import PlaybackScheduler
from speedy_reader.core.tokenizer import word_count

logger = logging.getLogger(__name__)

FAILURE_MESSAGES = {
    TransformMode.SUMMARIZE: "Failed to summarize. Check API key.",
    TransformMode.OPTIMIZE: "Failed to optimize. Check API key.",
}
GENERATE_FAILURE_MESSAGE = "Failed to generate text. Check API key."


@dataclass(frozen=True)
class TransformTicket:
    """Proof that a transform was started against a given text version."""

    version: int
    failure_message: str


class ReaderSession:
    """Couples the reader's text with its PlaybackScheduler."""

    def __init__(
        self,
        scheduler: PlaybackScheduler,
        text: str = "",
        client_factory: Callable[[], GeminiClient] = GeminiClient,
        language: Optional[str] = None,
    ) -> None:
        self.scheduler = scheduler
        self.language = language
        self.last_error: Optional[str] = None
        self._client_factory = client_factory
        self._text = ""
        self._text_version = 0
        self._generating = False
        self._lock = threading.Lock()
        self.set_text(text)

    @property
    def text(self) -> str:
        return self._text

    @property
    def word_count(self) -> int:
        return word_count(self._text)

    @property
    def has_text(self) -> bool:
        return bool(self._text.strip())

    @property
    def is_generating(self) -> bool:
        return self._generating

    def set_text(self, text: str) -> None:
        """Replace the text; supersedes any transform still in flight."""
        with self._lock:
            self._text = text
            self._text_version += 1
        self.scheduler.load(text)

    def start_reading(self) -> bool:
        """Enter the reader from the top of the current text.

        Returns False (and leaves the scheduler alone) when there is
        nothing to read.
        """
        if not self.has_text:
            return False
        self.scheduler.load(self._text)
        return True

    # ------------------------------------------------------------------
    # Ticketed protocol (for callers that fetch on another thread)
    # ------------------------------------------------------------------

    def begin(self, failure_message: str) -> Optional[TransformTicket]:
        with self._lock:
            if self._generating:
                logger.info("Transform already in progress; request ignored")
                return None
            self._generating = True
            self.last_error = None
            return TransformTicket(self._text_version, failure_message)

    def complete(self, ticket: TransformTicket, result: str) -> bool:
        """Apply a transform result if its ticket is still current."""
        with self._lock:
            self._generating = False
            if ticket.version != self._text_version:
                logger.info("Discarding superseded transform result")
                return False
        self.set_text(result)
        return True

    def fail(self, ticket: TransformTicket, exc: BaseException) -> bool:
        """Record a failed transform.

        Returns False when the ticket was superseded; that failure is
        logged but never reported to the user.
        """
        with self._lock:
            self._generating = False
            current = ticket.version == self._text_version
            if current:
                self.last_error = ticket.failure_message
        if not current:
            logger.info("Discarding superseded transform failure: %s", exc)
            return False
        logger.warning("Transform failed: %s", exc)
        return True

    async def fetch_transform(self, mode: TransformMode, text: str) -> str:
        """Call the collaborator; never touches session state."""
        async with self._client_factory() as client:
            return await client.transform(text, mode, language=self.language)

    async def fetch_generated(self, topic: str = DEFAULT_PRACTICE_TOPIC) -> str:
        async with self._client_factory() as client:
            return await client.generate(topic, language=self.language)

    # ------------------------------------------------------------------
    # Single-threaded convenience
    # ------------------------------------------------------------------

    async def transform(self, mode: TransformMode) -> bool:
        """Summarize or optimize the current text in place.

        Returns:
            True if the text was replaced, False if the request was a
            no-op (blank text, busy, or superseded, whether the late
            outcome was a result or a failure).

        Raises:
            TransformError: TransformUnavailable or TransformFailed; the
                text is left unchanged and last_error is set.
        """
        mode = TransformMode(mode)
        if not self.has_text:
            return False
        ticket = self.begin(FAILURE_MESSAGES[mode])
        if ticket is None:
            return False
        try:
            result = await self.fetch_transform(mode, self._text)
        except TransformError as exc:
            if self.fail(ticket, exc):
                raise
            return False
        except BaseException:
            with self._lock:
                self._generating = False
            raise
        return self.complete(ticket, result)

    async def generate(self, topic: str = DEFAULT_PRACTICE_TOPIC) -> bool:
        """Replace the text with a freshly generated practice article."""
        ticket = self.begin(GENERATE_FAILURE_MESSAGE)
        if ticket is None:
            return False
        try:
            result = await self.fetch_generated(topic)
        except TransformError as exc:
            if self.fail(ticket, exc):
                raise
            return False
        except BaseException:
            with self._lock:
                self._generating = False
            raise
        return self.complete(ticket, result)
