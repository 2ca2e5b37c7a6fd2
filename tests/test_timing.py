"""Tests for the per-token duration model and time estimates.

WHY: The duration model is the heart of the reader's pacing. Each factor
is checked on its own, and then the worked sentence example is checked
token by token.
"""

from __future__ import annotations

import math

import pytest

from speedy_reader.core.timing import (
    base_duration,
    build_timeline,
    compute_duration,
    estimate_seconds_remaining,
    format_time_remaining,
    length_factor,
    numeric_factor,
    punctuation_factor,
)
from speedy_reader.core.tokenizer import tokenize

SAMPLE_TEXT = "The cat sat. It ran 5 km!"


# ---------------------------------------------------------------------------
# Factors
# ---------------------------------------------------------------------------


class TestLengthFactor:
    """Long words slow down, very short words speed up."""

    @pytest.mark.parametrize("token,expected", [
        ("a", 0.9),
        ("to", 0.9),
        ("the", 1.0),
        ("reader", 1.0),     # 6 chars, unchanged
        ("reading", 1.1),    # 7 chars
        ("abcdefghijkl", 1.6),
        ("abcdefghijklmnop", 2.0),  # 16 chars, capped
        ("x" * 40, 2.0),
    ])
    def test_factor(self, token, expected):
        assert length_factor(token) == pytest.approx(expected)


class TestNumericFactor:
    def test_digit_present(self):
        assert numeric_factor("5") == pytest.approx(1.3)
        assert numeric_factor("COVID-19") == pytest.approx(1.3)

    def test_no_digit(self):
        assert numeric_factor("five") == 1.0

    def test_digit_factor_applied_once(self):
        assert numeric_factor("2024") == pytest.approx(1.3)


class TestPunctuationFactor:
    """Terminal punctuation adds a wrap-up pause; first match wins."""

    @pytest.mark.parametrize("token", ["end.", "what?", "wow!"])
    def test_sentence_end(self, token):
        assert punctuation_factor(token) == pytest.approx(2.2)

    @pytest.mark.parametrize("token", ["first,", "list:", "semi;", "dash-"])
    def test_clause_end(self, token):
        assert punctuation_factor(token) == pytest.approx(1.5)

    @pytest.mark.parametrize("token", ['quote"', "(aside)"])
    def test_quote_end(self, token):
        assert punctuation_factor(token) == pytest.approx(1.2)

    def test_embedded_newline_counts_as_sentence_end(self):
        assert punctuation_factor("para\nnext") == pytest.approx(2.2)

    def test_only_last_character_matters(self):
        assert punctuation_factor('end."') == pytest.approx(1.2)
        assert punctuation_factor("e.g") == 1.0

    def test_plain_word(self):
        assert punctuation_factor("word") == 1.0


# ---------------------------------------------------------------------------
# compute_duration
# ---------------------------------------------------------------------------


class TestComputeDuration:
    """compute_duration() multiplies base time by every factor."""

    def test_base_duration(self):
        assert base_duration(300) == pytest.approx(200.0)

    def test_empty_token_gets_base(self):
        assert compute_duration("", 300) == pytest.approx(200.0)

    def test_factors_compose(self):
        # 7 chars (1.1) x digit (1.3) x sentence end (2.2)
        assert compute_duration("abc123.", 300) == pytest.approx(200.0 * 1.1 * 1.3 * 2.2)

    def test_always_positive(self):
        for token in ["", "a", "1", ".", "x" * 100]:
            assert compute_duration(token, 50) > 0

    def test_sample_sentence_at_300_wpm(self):
        durations = [compute_duration(t, 300) for t in tokenize(SAMPLE_TEXT)]
        expected = [
            200.0,               # The
            200.0,               # cat
            440.0,               # sat.   2.2
            180.0,               # It     0.9
            200.0,               # ran
            200.0 * 0.9 * 1.3,   # 5      short + digit = 234
            200.0 * 2.2,         # km!    3 chars -> 1.0, sentence end = 440
        ]
        assert durations == pytest.approx(expected)

    def test_faster_rate_is_shorter(self):
        assert compute_duration("word", 600) < compute_duration("word", 300)


# ---------------------------------------------------------------------------
# Estimates
# ---------------------------------------------------------------------------


class TestTimeRemaining:
    def test_estimate(self):
        # 100 words at 300 wpm = 20s nominal, x1.2 = 24s
        assert estimate_seconds_remaining(100, 300) == 24

    def test_rounds_up(self):
        assert estimate_seconds_remaining(1, 350) == math.ceil(60 / 350 * 1.2)

    def test_nothing_left(self):
        assert estimate_seconds_remaining(0, 300) == 0

    def test_format_seconds(self):
        assert format_time_remaining(42) == "42 sec"

    def test_format_minutes(self):
        assert format_time_remaining(125) == "2 min 5 sec"

    def test_format_boundary(self):
        assert format_time_remaining(59) == "59 sec"
        assert format_time_remaining(60) == "1 min 0 sec"


# ---------------------------------------------------------------------------
# build_timeline
# ---------------------------------------------------------------------------


class TestBuildTimeline:
    """build_timeline() precomputes the whole schedule."""

    def test_starts_are_cumulative(self):
        timeline = build_timeline(tokenize(SAMPLE_TEXT), 300)
        cursor = 0.0
        for token in timeline.tokens:
            assert token.start_ms == pytest.approx(cursor)
            cursor += token.duration_ms
        assert timeline.total_ms == pytest.approx(cursor)

    def test_tokens_carry_pivot_split(self):
        timeline = build_timeline(["reading"], 300)
        token = timeline.tokens[0]
        assert (token.left, token.pivot, token.right) == ("re", "a", "ding")
        assert token.index == 0

    def test_estimate_uses_token_count(self):
        timeline = build_timeline(tokenize(SAMPLE_TEXT), 300)
        assert timeline.estimated_seconds == estimate_seconds_remaining(7, 300)
        assert timeline.wpm == 300

    def test_empty(self):
        timeline = build_timeline([], 300)
        assert timeline.tokens == []
        assert timeline.total_ms == 0.0
        assert timeline.estimated_seconds == 0

    def test_to_dict_rounds_times(self):
        timeline = build_timeline(["5"], 350)
        data = timeline.to_dict()
        assert data["tokens"][0]["duration_ms"] == round(60000 / 350 * 0.9 * 1.3, 3)
