"""Tests for ORP pivot resolution.

HOW: The length table is checked at every boundary, and the split
invariants (reassembly, single pivot character, index range) are
checked for every length from 1 to 50.
"""

from __future__ import annotations

import pytest

from speedy_reader.core.pivot import EMPTY_SPLIT, PivotSplit, pivot_index, resolve_pivot


class TestPivotIndex:
    """pivot_index() follows the length table, then the 35% rule."""

    @pytest.mark.parametrize("length,expected", [
        (1, 0),
        (2, 1), (5, 1),
        (6, 2), (9, 2),
        (10, 3), (13, 3),
        (14, 4),   # floor(13 * 0.35) = 4
        (20, 6),   # floor(19 * 0.35) = 6
        (30, 10),  # floor(29 * 0.35) = 10
    ])
    def test_table_boundaries(self, length, expected):
        assert pivot_index("x" * length) == expected

    def test_empty_token(self):
        assert pivot_index("") == 0

    @pytest.mark.parametrize("length", range(1, 51))
    def test_index_in_range(self, length):
        assert 0 <= pivot_index("a" * length) <= length - 1


class TestResolvePivot:
    """resolve_pivot() cuts a token into left / pivot / right."""

    def test_reading(self):
        assert resolve_pivot("reading") == PivotSplit(left="re", pivot="a", right="ding")

    def test_single_character(self):
        assert resolve_pivot("I") == PivotSplit(left="", pivot="I", right="")

    def test_punctuation_counts_toward_length(self):
        # "sat." has length 4 -> index 1
        assert resolve_pivot("sat.") == PivotSplit(left="s", pivot="a", right="t.")

    def test_long_word(self):
        split = resolve_pivot("internationalization")  # 20 chars -> index 6
        assert split.left == "intern"
        assert split.pivot == "a"
        assert split.right == "tionalization"

    def test_empty_token(self):
        assert resolve_pivot("") == EMPTY_SPLIT
        assert resolve_pivot("").text == ""

    @pytest.mark.parametrize("length", range(1, 51))
    def test_split_reassembles(self, length):
        token = "".join(chr(ord("a") + i % 26) for i in range(length))
        split = resolve_pivot(token)
        assert split.left + split.pivot + split.right == token
        assert split.text == token
        assert len(split.pivot) == 1

    def test_deterministic(self):
        assert resolve_pivot("deterministic") == resolve_pivot("deterministic")
