"""Tkinter desktop reader for SpeedyReader.

WHY: Most people who want to speed-read a pasted article will not use a
terminal. The GUI gives them the full reader: paste or generate text,
optionally summarize or optimize it, then read it one word at a time
with the pivot letter held in place.

HOW: A single ReaderApp class builds the tkinter UI in two logical
states: INPUT (text box + transform buttons) and READING (word display +
playback controls). The PlaybackScheduler runs on Tk's own after()
timer, so every advance happens on the main thread. Transform calls are
async and run in a background thread via asyncio.run(); their results
flow back to the UI through a thread-safe queue polled by .after().

RULES:
- Python 3.9.6 compatible — no slots=True, no match/case, no X | Y unions
- All async API work runs in a background thread (never on the main thread)
- Result queue is the ONLY communication channel between threads
- tkinter widgets and the scheduler are ONLY touched from the main thread
- The text box is read-only while a transform is running
- A failed transform leaves the text as it was and shows the error inline
"""

from __future__ import annotations

import asyncio
import queue
import threading
import tkinter as tk
import tkinter.font as tkfont
from tkinter import messagebox, ttk
from typing import Callable, Optional

from speedy_reader.api.models import TransformMode
from speedy_reader.config import (
    DEFAULT_PRACTICE_TOPIC,
    FONT_SIZE_STEP,
    WPM_SLIDER_MAX,
    WPM_SLIDER_MIN,
    WPM_STEP,
    load_api_key,
)
from speedy_reader.core.scheduler import PlaybackScheduler
from speedy_reader.core.session import (
    FAILURE_MESSAGES,
    GENERATE_FAILURE_MESSAGE,
    ReaderSession,
    TransformTicket,
)
from speedy_reader.core.state import PlaybackPhase, PlaybackSnapshot
from speedy_reader.core.tokenizer import word_count

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WINDOW_TITLE = "SpeedyReader"
_WINDOW_MIN_WIDTH = 760
_WINDOW_MIN_HEIGHT = 560
_PAD = 8

# One font-size unit renders at this many points.
_POINTS_PER_UNIT = 12
_WORD_FONT_FAMILY = "Courier"
_WORD_COLOR = "#94a3b8"
_PIVOT_COLOR = "#ef4444"
_DISPLAY_BG = "#0f172a"
_DISPLAY_HEIGHT = 260

# Result message types
_DONE_MSG = "done"
_ERROR_MSG = "error"


class AfterTimer:
    """Adapts Tk's after()/after_cancel() to the scheduler's call_later.

    The handle returned from call_later has a cancel() method, matching
    asyncio.TimerHandle.
    """

    class _Handle:
        def __init__(self, widget: tk.Misc, after_id: str) -> None:
            self._widget = widget
            self._after_id = after_id

        def cancel(self) -> None:
            self._widget.after_cancel(self._after_id)

    def __init__(self, widget: tk.Misc) -> None:
        self._widget = widget

    def __call__(self, delay: float, callback: Callable[[], None]) -> "AfterTimer._Handle":
        delay_ms = max(1, int(round(delay * 1000)))
        return AfterTimer._Handle(self._widget, self._widget.after(delay_ms, callback))


class ReaderApp:
    """Main tkinter application for SpeedyReader.

    WHY: Provides the paste-and-read workflow without a command line.

    HOW: Builds both views up front and swaps them with pack/pack_forget.
    The scheduler's on_change callback redraws the reading view.

    RULES:
    - All tkinter widget access happens on the main thread only
    - Background thread communicates via self._result_queue
    - .after() polls the queue every 100ms while a transform runs
    """

    def __init__(self, root: tk.Tk) -> None:
        self._root = root
        self._root.title(_WINDOW_TITLE)
        self._root.minsize(_WINDOW_MIN_WIDTH, _WINDOW_MIN_HEIGHT)

        # Thread communication
        self._result_queue: queue.Queue = queue.Queue()
        self._worker_thread: Optional[threading.Thread] = None

        self._scheduler = PlaybackScheduler(AfterTimer(root), on_change=self._on_playback_change)
        self._syncing_slider = False

        # Build UI before the session: loading its text notifies on_change,
        # which reads the reader widgets.
        self._build_ui()
        self._session = ReaderSession(self._scheduler)
        self._show_input()

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        """Build both views; only one is packed at a time."""
        self._input_frame = ttk.Frame(self._root, padding=_PAD)
        self._reader_frame = ttk.Frame(self._root, padding=_PAD)
        self._build_input_view(self._input_frame)
        self._build_reader_view(self._reader_frame)

    def _build_input_view(self, main: ttk.Frame) -> None:
        # --- Text ---
        text_frame = ttk.LabelFrame(main, text="Text to read", padding=_PAD)
        text_frame.pack(fill=tk.BOTH, expand=True, pady=(0, _PAD))

        self._text_box = tk.Text(
            text_frame,
            height=16,
            wrap=tk.WORD,
            font=("TkDefaultFont", 12),
            undo=True,
        )
        scrollbar = ttk.Scrollbar(text_frame, orient=tk.VERTICAL, command=self._text_box.yview)
        self._text_box.configure(yscrollcommand=scrollbar.set)
        scrollbar.pack(side=tk.RIGHT, fill=tk.Y)
        self._text_box.pack(fill=tk.BOTH, expand=True)
        self._text_box.bind("<KeyRelease>", lambda _e: self._update_word_count())

        info_row = ttk.Frame(main)
        info_row.pack(fill=tk.X, pady=(0, _PAD))
        self._word_count_label = ttk.Label(info_row, text="0 words", foreground="gray")
        self._word_count_label.pack(side=tk.LEFT)
        self._error_label = ttk.Label(info_row, text="", foreground="red")
        self._error_label.pack(side=tk.LEFT, padx=(_PAD * 2, 0))

        # --- AI tools ---
        tools_frame = ttk.LabelFrame(main, text="AI Tools", padding=_PAD)
        tools_frame.pack(fill=tk.X, pady=(0, _PAD))

        self._summarize_btn = ttk.Button(
            tools_frame,
            text="Summarize",
            command=lambda: self._start_transform(TransformMode.SUMMARIZE),
        )
        self._summarize_btn.pack(side=tk.LEFT)
        self._optimize_btn = ttk.Button(
            tools_frame,
            text="Optimize Flow",
            command=lambda: self._start_transform(TransformMode.OPTIMIZE),
        )
        self._optimize_btn.pack(side=tk.LEFT, padx=(_PAD, 0))

        ttk.Label(tools_frame, text="Practice topic:").pack(side=tk.LEFT, padx=(_PAD * 2, 4))
        self._topic_var = tk.StringVar(value=DEFAULT_PRACTICE_TOPIC)
        ttk.Entry(tools_frame, textvariable=self._topic_var, width=28).pack(side=tk.LEFT)
        self._practice_btn = ttk.Button(
            tools_frame, text="Practice Text", command=self._start_generate
        )
        self._practice_btn.pack(side=tk.LEFT, padx=(4, 0))

        # --- Action buttons ---
        btn_frame = ttk.Frame(main)
        btn_frame.pack(fill=tk.X)

        self._clear_btn = ttk.Button(btn_frame, text="Clear", command=self._clear_text)
        self._clear_btn.pack(side=tk.LEFT)

        self._start_btn = ttk.Button(
            btn_frame, text="Start Reading", command=self._start_reading
        )
        self._start_btn.pack(side=tk.RIGHT)

    def _build_reader_view(self, main: ttk.Frame) -> None:
        # --- Header ---
        header = ttk.Frame(main)
        header.pack(fill=tk.X, pady=(0, _PAD))
        ttk.Button(header, text="< Edit Text", command=self._back_to_input).pack(side=tk.LEFT)
        self._counter_label = ttk.Label(header, text="", foreground="gray")
        self._counter_label.pack(side=tk.RIGHT)

        # --- Word display ---
        self._canvas = tk.Canvas(
            main,
            height=_DISPLAY_HEIGHT,
            background=_DISPLAY_BG,
            highlightthickness=0,
        )
        self._canvas.pack(fill=tk.BOTH, expand=True, pady=(0, _PAD))
        self._canvas.bind("<Configure>", lambda _e: self._render(self._scheduler.snapshot()))
        self._word_font = tkfont.Font(family=_WORD_FONT_FAMILY, size=_POINTS_PER_UNIT * 4)
        self._pivot_font = tkfont.Font(
            family=_WORD_FONT_FAMILY, size=_POINTS_PER_UNIT * 4, weight="bold"
        )

        # --- Progress (click to seek) ---
        self._progress = ttk.Progressbar(main, orient=tk.HORIZONTAL, maximum=100.0)
        self._progress.pack(fill=tk.X, pady=(0, _PAD))
        self._progress.bind("<Button-1>", self._on_progress_click)

        # --- Controls ---
        controls = ttk.Frame(main)
        controls.pack(fill=tk.X)

        ttk.Button(controls, text="Reset", command=self._scheduler.reset).pack(side=tk.LEFT)
        self._play_btn = ttk.Button(controls, text="Play", width=8, command=self._scheduler.toggle)
        self._play_btn.pack(side=tk.LEFT, padx=(_PAD, 0))

        rate_frame = ttk.Frame(controls)
        rate_frame.pack(side=tk.LEFT, padx=(_PAD * 3, 0))
        ttk.Label(rate_frame, text="WPM").pack(side=tk.LEFT)
        ttk.Button(
            rate_frame, text="-", width=2,
            command=lambda: self._scheduler.change_rate(-WPM_STEP),
        ).pack(side=tk.LEFT, padx=(4, 0))
        self._wpm_label = ttk.Label(rate_frame, text="", width=6, anchor=tk.CENTER)
        self._wpm_label.pack(side=tk.LEFT)
        ttk.Button(
            rate_frame, text="+", width=2,
            command=lambda: self._scheduler.change_rate(WPM_STEP),
        ).pack(side=tk.LEFT)
        self._wpm_var = tk.DoubleVar(value=self._scheduler.wpm)
        ttk.Scale(
            rate_frame,
            from_=WPM_SLIDER_MIN,
            to=WPM_SLIDER_MAX,
            orient=tk.HORIZONTAL,
            length=180,
            variable=self._wpm_var,
            command=self._on_slider,
        ).pack(side=tk.LEFT, padx=(_PAD, 0))

        font_frame = ttk.Frame(controls)
        font_frame.pack(side=tk.RIGHT)
        ttk.Button(
            font_frame, text="A-", width=3,
            command=lambda: self._scheduler.set_font_size(-FONT_SIZE_STEP),
        ).pack(side=tk.LEFT)
        ttk.Button(
            font_frame, text="A+", width=3,
            command=lambda: self._scheduler.set_font_size(FONT_SIZE_STEP),
        ).pack(side=tk.LEFT, padx=(4, 0))

        self._remaining_label = ttk.Label(main, text="", foreground="gray")
        self._remaining_label.pack(pady=(_PAD, 0))

    # ------------------------------------------------------------------
    # View switching
    # ------------------------------------------------------------------

    def _show_input(self) -> None:
        self._scheduler.pause()
        self._reader_frame.pack_forget()
        self._input_frame.pack(fill=tk.BOTH, expand=True)
        self._update_word_count()
        self._update_tool_buttons()

    def _show_reader(self) -> None:
        self._input_frame.pack_forget()
        self._reader_frame.pack(fill=tk.BOTH, expand=True)
        self._render(self._scheduler.snapshot())

    def _start_reading(self) -> None:
        self._sync_from_editor()
        if self._session.start_reading():
            self._show_reader()

    def _back_to_input(self) -> None:
        self._show_input()

    # ------------------------------------------------------------------
    # Text box
    # ------------------------------------------------------------------

    def _editor_text(self) -> str:
        return self._text_box.get("1.0", "end-1c")

    def _set_editor_text(self, text: str) -> None:
        state = str(self._text_box.cget("state"))
        self._text_box.configure(state=tk.NORMAL)
        self._text_box.delete("1.0", tk.END)
        self._text_box.insert("1.0", text)
        self._text_box.configure(state=state)
        self._update_word_count()

    def _sync_from_editor(self) -> None:
        """Push edits into the session; a changed text reloads the reader."""
        text = self._editor_text()
        if text != self._session.text:
            self._session.set_text(text)

    def _clear_text(self) -> None:
        self._set_editor_text("")
        self._sync_from_editor()
        self._error_label.configure(text="")

    def _update_word_count(self) -> None:
        count = word_count(self._editor_text())
        self._word_count_label.configure(
            text="{} word{}".format(count, "" if count == 1 else "s")
        )
        self._update_tool_buttons()

    def _update_tool_buttons(self) -> None:
        busy = self._session.is_generating
        has_text = bool(self._editor_text().strip())
        text_state = tk.DISABLED if busy or not has_text else tk.NORMAL
        self._summarize_btn.configure(state=text_state)
        self._optimize_btn.configure(state=text_state)
        self._start_btn.configure(state=text_state)
        self._practice_btn.configure(state=tk.DISABLED if busy else tk.NORMAL)
        self._clear_btn.configure(state=tk.DISABLED if busy else tk.NORMAL)

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------

    def _ensure_api_key(self) -> bool:
        try:
            load_api_key()
        except ValueError as e:
            messagebox.showerror("API Key Missing", str(e))
            return False
        return True

    def _start_transform(self, mode: TransformMode) -> None:
        self._sync_from_editor()
        if not self._session.has_text or not self._ensure_api_key():
            return
        ticket = self._session.begin(FAILURE_MESSAGES[mode])
        if ticket is None:
            return
        text = self._session.text
        self._run_in_background(ticket, lambda: self._session.fetch_transform(mode, text))

    def _start_generate(self) -> None:
        if not self._ensure_api_key():
            return
        ticket = self._session.begin(GENERATE_FAILURE_MESSAGE)
        if ticket is None:
            return
        topic = self._topic_var.get().strip() or DEFAULT_PRACTICE_TOPIC
        self._run_in_background(ticket, lambda: self._session.fetch_generated(topic))

    def _run_in_background(self, ticket: TransformTicket, make_coro: Callable) -> None:
        self._set_busy_state()
        self._worker_thread = threading.Thread(
            target=self._run_transform_thread,
            args=(ticket, make_coro),
            daemon=True,
        )
        self._worker_thread.start()
        self._poll_results()

    def _run_transform_thread(self, ticket: TransformTicket, make_coro: Callable) -> None:
        """Run one collaborator call in a background thread.

        RULES:
        - NEVER touch tkinter widgets or the session state from this thread
        - Exactly one message is posted per call
        """
        try:
            result = asyncio.run(make_coro())
        except Exception as e:
            self._result_queue.put((_ERROR_MSG, (ticket, e)))
        else:
            self._result_queue.put((_DONE_MSG, (ticket, result)))

    def _poll_results(self) -> None:
        """Poll the result queue and apply the outcome on the main thread."""
        try:
            msg_type, (ticket, payload) = self._result_queue.get_nowait()
        except queue.Empty:
            self._root.after(100, self._poll_results)
            return

        if msg_type == _DONE_MSG:
            if self._session.complete(ticket, payload):
                self._set_editor_text(self._session.text)
        else:
            self._session.fail(ticket, payload)
            if self._session.last_error:
                self._error_label.configure(text=self._session.last_error)
        self._set_idle_state()

    def _set_busy_state(self) -> None:
        self._error_label.configure(text="Working...", foreground="gray")
        self._text_box.configure(state=tk.DISABLED)
        self._update_tool_buttons()

    def _set_idle_state(self) -> None:
        if self._error_label.cget("text") == "Working...":
            self._error_label.configure(text="")
        self._error_label.configure(foreground="red")
        self._text_box.configure(state=tk.NORMAL)
        self._update_tool_buttons()

    # ------------------------------------------------------------------
    # Reading view
    # ------------------------------------------------------------------

    def _on_slider(self, value: str) -> None:
        if self._syncing_slider:
            return
        # Snap to the slider's step.
        snapped = round(float(value) / WPM_STEP) * WPM_STEP
        if snapped != self._scheduler.wpm:
            self._scheduler.set_rate(snapped)

    def _on_progress_click(self, event: tk.Event) -> None:
        width = self._progress.winfo_width()
        if width > 0:
            self._scheduler.seek(event.x / width)

    def _on_playback_change(self, snapshot: PlaybackSnapshot) -> None:
        if self._reader_frame.winfo_ismapped():
            self._render(snapshot)

    def _render(self, snapshot: PlaybackSnapshot) -> None:
        """Redraw the word display and the controls from a snapshot."""
        self._draw_word(snapshot)

        shown = min(snapshot.position + 1, snapshot.total)
        self._counter_label.configure(text="{} / {} words".format(shown, snapshot.total))
        self._progress.configure(value=snapshot.progress)
        if snapshot.phase == PlaybackPhase.PLAYING:
            self._play_btn.configure(text="Pause")
        elif snapshot.phase == PlaybackPhase.FINISHED:
            self._play_btn.configure(text="Done")
        else:
            self._play_btn.configure(text="Play")

        self._wpm_label.configure(text="{:.0f}".format(snapshot.wpm))
        self._syncing_slider = True
        try:
            self._wpm_var.set(snapshot.wpm)
        finally:
            self._syncing_slider = False
        self._remaining_label.configure(
            text="{} remaining".format(self._scheduler.time_remaining_text)
        )

    def _draw_word(self, snapshot: PlaybackSnapshot) -> None:
        """Draw left/pivot/right with the pivot centred on the canvas."""
        canvas = self._canvas
        canvas.delete("all")
        width = canvas.winfo_width()
        height = canvas.winfo_height()
        cx, cy = width / 2.0, height / 2.0

        # Focus guides above and below the pivot column.
        canvas.create_line(cx, 0, cx, 18, fill="#7f1d1d", width=2)
        canvas.create_line(cx, height - 18, cx, height, fill="#7f1d1d", width=2)

        size = int(round(snapshot.font_size * _POINTS_PER_UNIT))
        self._word_font.configure(size=size)
        self._pivot_font.configure(size=size)

        split = snapshot.split
        if not split.pivot:
            return
        half_pivot = self._pivot_font.measure(split.pivot) / 2.0
        canvas.create_text(
            cx - half_pivot, cy, text=split.left, anchor=tk.E,
            font=self._word_font, fill=_WORD_COLOR,
        )
        canvas.create_text(
            cx, cy, text=split.pivot, anchor=tk.CENTER,
            font=self._pivot_font, fill=_PIVOT_COLOR,
        )
        canvas.create_text(
            cx + half_pivot, cy, text=split.right, anchor=tk.W,
            font=self._word_font, fill=_WORD_COLOR,
        )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main() -> None:
    """Launch the Tkinter reader.

    RULES:
    - This function blocks until the window is closed
    - Must be called from the main thread
    """
    root = tk.Tk()
    ReaderApp(root)
    root.mainloop()


if __name__ == "__main__":
    main()
