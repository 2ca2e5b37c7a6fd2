"""Abstract base formatter and output container.

WHY: Every timeline export consumes the same Timeline IR but produces
different file content. This base class enforces a consistent interface
so the CLI and the HTTP API can work with any exporter generically.

HOW: BaseFormatter is an ABC with two requirements — a ``name`` property
and a ``format()`` method. FormatterOutput is a plain dataclass that
bundles a file suffix with its content and MIME type.

RULES:
- Subclasses MUST implement ``name`` (human-readable) and ``format()``
- ``format()`` returns a list so an exporter may emit several files
- ``suffix`` starts with a hyphen, e.g. ``"-rsvp.json"``
- The caller is responsible for prepending the source filename stem
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from speedy_reader.core.ir import Timeline


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the source stem,
                e.g. ``"-rsvp.srt"`` → ``"chapter1-rsvp.srt"``.
        content: The file content as a string or bytes.
        media_type: MIME type for the content, e.g. ``"application/json"``.
    """

    suffix: str
    content: str | bytes
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all timeline exporters.

    To add a new export format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py

    ``suffix`` names the primary output file suffix so listings (the
    /formats endpoint, CLI help) do not need to run the formatter.
    """

    suffix: str = ""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'RSVP Timeline JSON'."""

    @abstractmethod
    def format(self, timeline: Timeline) -> list[FormatterOutput]:
        """Convert the Timeline IR into one or more output files."""
