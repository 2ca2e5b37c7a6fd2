"""Prompt templates for the text-transform collaborator.

WHY: The quality of a transform is decided almost entirely by its prompt.
Keeping the templates as plain data, away from the HTTP code, lets them
be read and tuned without touching the client.

RULES:
- SUMMARIZE may drop filler; OPTIMIZE must keep every detail
- OPTIMIZE answers in the input's own language
- An explicit language is passed through verbatim, never interpreted
"""

from __future__ import annotations

from typing import Optional

from speedy_reader.api.models import TransformMode

SUMMARIZE_TEMPLATE = """Summarize the following text to be concise and optimized for speed reading. Remove filler words while keeping the core meaning.

Text:
{text}"""

OPTIMIZE_TEMPLATE = """You are an expert Text-to-RSVP (Rapid Serial Visual Presentation) pre-processor.

Your goal is to convert the input text into a format that reduces cognitive load during high-speed serial reading, WITHOUT removing any information.

SCIENTIFIC RULES FOR RSVP OPTIMIZATION:
1. **NO INFORMATION LOSS**: Do not summarize. Do not remove filler words. Keep every single detail and nuance of the original text.
2. **NUMBERS TO TEXT**: The brain processes words faster than digits in RSVP. Convert ALL numbers, dates, and currency to their spoken text equivalent.
   - Example (PT): "25/12/2021" -> "vinte e cinco de dezembro de dois mil e vinte e um"
   - Example (EN): "$50" -> "fifty dollars"
3. **SYMBOLS TO TEXT**: Expand "%", "&", "@", "°" to full words (e.g., "degrees", "percent", "at").
4. **ABBREVIATIONS**: Expand abbreviations that require pause to decode (e.g., "approx." -> "approximately", "etc." -> "et cetera").
5. **LANGUAGE DETECTION**: Output in the EXACT same language as the input.

Input Text:
{text}"""

PRACTICE_TEMPLATE = (
    'Write a 300-word engaging article about "{topic}". '
    "The text should be suitable for practicing speed reading."
)

_TEMPLATES = {
    TransformMode.SUMMARIZE: SUMMARIZE_TEMPLATE,
    TransformMode.OPTIMIZE: OPTIMIZE_TEMPLATE,
}


def _with_language(prompt: str, language: Optional[str]) -> str:
    if not language:
        return prompt
    return "{}\n\nRespond in this language: {}".format(prompt, language)


def transform_prompt(text: str, mode: TransformMode, language: Optional[str] = None) -> str:
    """Build the prompt for a SUMMARIZE or OPTIMIZE transform."""
    template = _TEMPLATES[TransformMode(mode)]
    return _with_language(template.format(text=text), language)


def practice_prompt(topic: str, language: Optional[str] = None) -> str:
    return _with_language(PRACTICE_TEMPLATE.format(topic=topic), language)
