"""SpeedyReader — RSVP speed reading engine with optimal recognition points.

WHY: Reading one word at a time at a fixed fixation point removes saccades,
but only works when each word stays on screen long enough for its length,
content and position in the sentence. This package turns plain text into
such a paced, single-focus-point presentation.

HOW: Three layers — the core engine (tokenize, pivot, duration, playback
scheduler), an optional text-transform collaborator (Gemini API client),
and thin surfaces (CLI, Tkinter reader, HTTP API, timeline exporters).

RULES:
- The core engine performs no I/O of its own
- Every surface drives the same PlaybackScheduler
- Transform failures never touch the text being read
"""

__version__ = "0.1.0"
