"""RSVP timeline JSON exporter, validated against a bundled JSON schema.

WHY: Other players (a web page, a video renderer, an e-ink device) can
replay the exact schedule the engine computed without reimplementing the
duration and pivot rules. A schema makes that contract explicit.

HOW: Serializes Timeline.to_dict() with a format marker and version,
validates it against rsvp_timeline_schema.json with jsonschema, then
dumps it as indented UTF-8 JSON.

RULES:
- Output suffix: "-rsvp.json"
- Every output is schema-validated before it is returned
- Times are milliseconds, rounded to 3 decimals
- Non-ASCII text is written as-is (ensure_ascii=False)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema

from speedy_reader.core.ir import Timeline
from speedy_reader.formatters.base import BaseFormatter, FormatterOutput

_SCHEMA_PATH = Path(__file__).resolve().parent / "rsvp_timeline_schema.json"

_CACHED_SCHEMA: Optional[dict] = None

FORMAT_NAME = "speedy-reader/rsvp-timeline"
FORMAT_VERSION = 1


def _get_schema() -> dict:
    """Load and cache the timeline JSON schema."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


class JSONTimelineFormatter(BaseFormatter):
    """Exports the full RSVP schedule as one JSON document."""

    suffix = "-rsvp.json"

    @property
    def name(self) -> str:
        return "RSVP Timeline JSON"

    def build(self, timeline: Timeline) -> Dict[str, Any]:
        """Build and validate the JSON document as a dict.

        Raises:
            jsonschema.ValidationError: If the document does not conform
                to the timeline schema.
        """
        document: Dict[str, Any] = {"format": FORMAT_NAME, "version": FORMAT_VERSION}
        document.update(timeline.to_dict())
        jsonschema.validate(instance=document, schema=_get_schema())
        return document

    def format(self, timeline: Timeline) -> List[FormatterOutput]:
        content = json.dumps(self.build(timeline), indent=2, ensure_ascii=False)
        return [FormatterOutput(
            suffix=self.suffix,
            content=content,
            media_type="application/json",
        )]
