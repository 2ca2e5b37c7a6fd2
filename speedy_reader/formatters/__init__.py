"""Timeline exporter registry.

WHY: The CLI and the HTTP API need a single lookup to find an exporter
by name. A central dict makes adding a format a one-line change.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["json_timeline"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags and API requests)
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from speedy_reader.formatters.json_timeline import JSONTimelineFormatter
from speedy_reader.formatters.srt_timeline import SRTTimelineFormatter

if TYPE_CHECKING:
    from speedy_reader.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "json_timeline": JSONTimelineFormatter,
    "srt_timeline": SRTTimelineFormatter,
}
