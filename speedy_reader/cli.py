"""Command-line interface for SpeedyReader.

WHY: Users want to speed-read a file or a pipe straight from the
terminal, optionally running it through a summarize/optimize transform
first, or export the computed RSVP schedule for another player.

HOW: Uses argparse for the input path (or stdin), rate, transform flags,
and export options. Runs everything on one asyncio loop via
asyncio.run(): the collaborator calls are awaited, and playback drives
the PlaybackScheduler with loop.call_later as its timer. Each token is
rendered on a single terminal line with its pivot character pinned to a
fixed column. Status messages go to stderr; the reading line goes to
stdout.

RULES:
- Positional argument: input text file path, "-" or omitted for stdin
- --generate TOPIC replaces the input with a practice article
- --summarize / --optimize run after --generate, in that order
- A failed transform is reported and reading continues on the old text
- --export writes timeline files instead of playing
- Ctrl-C stops playback and exits with status 130
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from speedy_reader.api.client import TransformError
from speedy_reader.api.models import TransformMode
from speedy_reader.config import DEFAULT_PRACTICE_TOPIC, DEFAULT_WPM
from speedy_reader.core.scheduler import PlaybackScheduler
from speedy_reader.core.session import ReaderSession
from speedy_reader.core.state import PlaybackPhase, PlaybackSnapshot
from speedy_reader.core.timing import build_timeline, format_time_remaining
from speedy_reader.formatters import FORMATTERS
from speedy_reader.formatters.base import FormatterOutput

_PIVOT_COLUMN = 20
_ANSI_PIVOT = "\033[1;31m"
_ANSI_RESET = "\033[0m"
_ANSI_CLEAR_LINE = "\r\033[K"


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


class TerminalRenderer:
    """Draws one snapshot per line rewrite, pivot pinned to a column.

    RULES:
    - Left text is right-aligned so the pivot always lands on pivot_column
    - ANSI colour only when the stream is a TTY
    - Left text longer than the column is shown in full (no truncation)
    """

    def __init__(self, stream: TextIO, pivot_column: int = _PIVOT_COLUMN) -> None:
        self._stream = stream
        self._pivot_column = pivot_column
        self._color = stream.isatty()

    def format_line(self, snapshot: PlaybackSnapshot) -> str:
        split = snapshot.split
        pad = " " * max(0, self._pivot_column - len(split.left))
        pivot = split.pivot
        if self._color and pivot:
            pivot = "{}{}{}".format(_ANSI_PIVOT, pivot, _ANSI_RESET)
        # Newlines inside a token would break the single-line display.
        right = split.right.replace("\n", " ")
        left = split.left.replace("\n", " ")
        counter = "{}/{}".format(min(snapshot.position + 1, snapshot.total), snapshot.total)
        return "{}{}{}{}    [{}  {:.0f} wpm  {} remaining]".format(
            pad, left, pivot, right,
            counter, snapshot.wpm,
            format_time_remaining(snapshot.seconds_remaining),
        )

    def render(self, snapshot: PlaybackSnapshot) -> None:
        if self._color:
            self._stream.write(_ANSI_CLEAR_LINE + self.format_line(snapshot))
        else:
            self._stream.write(self.format_line(snapshot) + "\n")
        self._stream.flush()

    def finish(self) -> None:
        if self._color:
            self._stream.write("\n")
            self._stream.flush()


def _read_input(path: Optional[str]) -> str:
    """Read the source text from a file, or stdin for None / "-"."""
    if path is None or path == "-":
        if sys.stdin.isatty():
            return ""
        return sys.stdin.read()
    input_path = Path(path)
    if not input_path.is_file():
        print("Error: File not found: {}".format(input_path), file=sys.stderr)
        sys.exit(1)
    return input_path.read_text(encoding="utf-8")


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Resolve the output file path, adding numeric suffix on conflict.

    RULES:
    - First attempt: {stem}{suffix} (e.g. chapter1-rsvp.json)
    - Conflict: counter inserted before the extension (chapter1-rsvp-2.json)
    - Counter starts at 2 and increments
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx > 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(output: FormatterOutput, stem: str, output_dir: Path) -> Path:
    path = _resolve_output_path(stem, output.suffix, output_dir)
    if isinstance(output.content, bytes):
        path.write_bytes(output.content)
    else:
        path.write_text(output.content, encoding="utf-8")
    return path


def _parse_formats(raw: str) -> List[str]:
    format_keys = [f.strip() for f in raw.split(",") if f.strip()]
    for key in format_keys:
        if key not in FORMATTERS:
            available = ", ".join(sorted(FORMATTERS.keys()))
            print(
                "Error: Unknown format '{}'. Available formats: {}".format(key, available),
                file=sys.stderr,
            )
            sys.exit(1)
    return format_keys


async def _apply_transforms(session: ReaderSession, args: argparse.Namespace) -> None:
    """Run the requested collaborator calls; failures keep the old text."""
    steps = []
    if args.generate is not None:
        steps.append(("Generating practice text...", lambda: session.generate(args.generate)))
    if args.summarize:
        steps.append(("Summarizing...", lambda: session.transform(TransformMode.SUMMARIZE)))
    if args.optimize:
        steps.append(("Optimizing for RSVP...", lambda: session.transform(TransformMode.OPTIMIZE)))

    for message, step in steps:
        _status(message)
        try:
            applied = await step()
        except TransformError as e:
            _status("Error: {} ({})".format(session.last_error, e))
            _status("  Continuing with the current text.")
            continue
        if applied:
            _status("  Done ({} words).".format(session.word_count))
        else:
            _status("  Skipped (no text to transform).")


async def _run(args: argparse.Namespace) -> None:
    """Async core of the CLI: transform, then export or play."""
    text = _read_input(args.input_file)

    loop = asyncio.get_running_loop()
    finished = asyncio.Event()
    renderer = TerminalRenderer(sys.stdout)
    playing = False

    def on_change(snapshot: PlaybackSnapshot) -> None:
        if not playing:
            return
        renderer.render(snapshot)
        if snapshot.phase == PlaybackPhase.FINISHED:
            finished.set()

    scheduler = PlaybackScheduler(loop.call_later, wpm=args.wpm, on_change=on_change)
    session = ReaderSession(scheduler, text, language=args.language)

    await _apply_transforms(session, args)

    if not session.start_reading():
        print("Error: No text to read. Pass a file, pipe text on stdin, "
              "or use --generate.", file=sys.stderr)
        sys.exit(1)

    if args.print_text:
        print(session.text)
        return

    if args.export:
        format_keys = _parse_formats(args.export)
        output_dir = Path(args.output_dir).resolve() if args.output_dir else Path.cwd()
        if not output_dir.is_dir():
            print("Error: Output directory does not exist: {}".format(output_dir), file=sys.stderr)
            sys.exit(1)
        stem = Path(args.input_file).stem if args.input_file not in (None, "-") else "stdin"
        timeline = build_timeline(scheduler.tokens, scheduler.wpm)
        _status("Timeline: {} tokens, {:.1f}s at {:.0f} wpm".format(
            len(timeline.tokens), timeline.total_ms / 1000.0, timeline.wpm,
        ))
        for key in format_keys:
            formatter = FORMATTERS[key]()
            for output in formatter.format(timeline):
                saved = _save_output(output, stem, output_dir)
                _status("  Saved: {}".format(saved.name))
        return

    _status("Reading {} words at {:.0f} wpm (~{}). Ctrl-C to stop.".format(
        len(scheduler.tokens), scheduler.wpm, scheduler.time_remaining_text,
    ))
    playing = True
    if args.start:
        scheduler.seek(args.start)
    scheduler.play()
    if not scheduler.is_playing:
        _status("Nothing left to read from that position.")
        return
    try:
        await finished.wait()
    finally:
        scheduler.pause()
        renderer.finish()


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable — tests can inspect the parser without running playback.
    """
    parser = argparse.ArgumentParser(
        prog="speedy_reader",
        description="Speed-read text with RSVP and optimal recognition points.",
    )

    parser.add_argument(
        "input_file",
        nargs="?",
        default=None,
        help="Path to a UTF-8 text file. Omit or use '-' to read stdin.",
    )

    parser.add_argument(
        "--wpm",
        type=float,
        default=DEFAULT_WPM,
        help="Base words per minute (default: %(default)s, minimum 50).",
    )

    parser.add_argument(
        "--start",
        type=float,
        default=0.0,
        help="Start at this fraction of the text, 0.0–1.0 (default: %(default)s).",
    )

    parser.add_argument(
        "--summarize",
        action="store_true",
        help="Summarize the text with Gemini before reading.",
    )

    parser.add_argument(
        "--optimize",
        action="store_true",
        help="Rewrite numbers, symbols, and abbreviations as words before reading.",
    )

    parser.add_argument(
        "--generate",
        nargs="?",
        const=DEFAULT_PRACTICE_TOPIC,
        default=None,
        metavar="TOPIC",
        help="Generate a practice article (default topic: %(const)s).",
    )

    parser.add_argument(
        "--language",
        default=None,
        help="Language passed through to the text generator.",
    )

    parser.add_argument(
        "--print-text",
        action="store_true",
        help="Print the (transformed) text to stdout instead of reading it.",
    )

    parser.add_argument(
        "--export",
        default=None,
        metavar="FORMATS",
        help="Comma-separated timeline formats to write instead of playing. "
             "Available: {}.".format(", ".join(sorted(FORMATTERS.keys()))),
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for exported files (default: current directory).",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        asyncio.run(_run(args))
    except KeyboardInterrupt:
        _status("\nStopped.")
        sys.exit(130)


if __name__ == "__main__":
    main()
