"""SRT exporter: the RSVP schedule as a one-word-per-cue subtitle track.

WHY: Dropping an SRT onto a video editor or media player is the cheapest
way to get an RSVP presentation without a dedicated player. Each cue
shows exactly one token for exactly its computed duration.

HOW: One cue per TimedToken, numbered from 1, timed from start_ms to
end_ms. Cue text is the token as-is; any embedded newline is kept, so
a paragraph-break token still reads as one cue.

RULES:
- Output suffix: "-rsvp.srt"
- Media type: "application/x-subrip"
- Timestamps are HH:MM:SS,mmm, truncated to whole milliseconds
- An empty timeline produces an empty string
"""

from __future__ import annotations

from typing import List

from speedy_reader.core.ir import Timeline
from speedy_reader.formatters.base import BaseFormatter, FormatterOutput


def ms_to_srt_time(ms: float) -> str:
    """Convert milliseconds to SRT timestamp format: HH:MM:SS,mmm"""
    total_ms = int(ms)
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return "{:02d}:{:02d}:{:02d},{:03d}".format(hours, minutes, secs, millis)


class SRTTimelineFormatter(BaseFormatter):
    """Formatter that produces a single SRT track, one cue per token."""

    suffix = "-rsvp.srt"

    @property
    def name(self) -> str:
        return "RSVP Subtitle Track"

    def format(self, timeline: Timeline) -> List[FormatterOutput]:
        blocks: List[str] = []
        for seq, token in enumerate(timeline.tokens, start=1):
            blocks.append("{}\n{} --> {}\n{}\n".format(
                seq,
                ms_to_srt_time(token.start_ms),
                ms_to_srt_time(token.end_ms),
                token.text,
            ))

        return [FormatterOutput(
            suffix=self.suffix,
            content="\n".join(blocks),
            media_type="application/x-subrip",
        )]
