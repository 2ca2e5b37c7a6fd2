"""Configuration constants, reader limits, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Rate limits, font bounds, and API defaults are
plain module-level values, not buried in the scheduler or the GUI.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values. The load_api_key() function provides a clear
error when the key is missing.

RULES:
- MIN_WPM is a floor only; there is no hard ceiling on the rate
- Font size is measured in rem-like units and clamped to [1, 8]
- API key is loaded from .env via python-dotenv, never hardcoded
- All API defaults can be overridden via environment variables
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Reading rate
# ---------------------------------------------------------------------------

MIN_WPM = 50
"""Lowest base rate the scheduler accepts; lower values are clamped up."""

WPM_STEP = 25
WPM_SLIDER_MIN = 100
WPM_SLIDER_MAX = 1200

DEFAULT_WPM = int(os.getenv("SPEEDY_DEFAULT_WPM", "350"))

# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

DEFAULT_FONT_SIZE = 4.0
FONT_SIZE_STEP = 0.5
MIN_FONT_SIZE = 1.0
MAX_FONT_SIZE = 8.0

# ---------------------------------------------------------------------------
# Text-transform collaborator (Gemini)
# ---------------------------------------------------------------------------

GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
)
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-3-flash-preview")

DEFAULT_PRACTICE_TOPIC = "The Future of Human Evolution"


def load_api_key() -> str:
    """Load the Gemini API key from the environment.

    WHY: The key is required for every transform call. Loading it from the
    environment (via .env) keeps it out of source code.

    HOW: Reads GEMINI_API_KEY, falling back to the generic API_KEY name.

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = (os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or "").strip()
    if not key:
        raise ValueError(
            "Gemini API key not configured. "
            "Add GEMINI_API_KEY to the .env file in the app folder."
        )
    return key
