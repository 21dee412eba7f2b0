"""Tests for switchpanel/ranges.py"""

import pytest

from switchpanel.ranges import (
    format_port_range,
    is_valid_port_ranges,
    max_range_token,
    next_port_range,
    parse_port_ranges,
    section_port_indices,
)


class TestParsePortRanges:
    """Tests for parse_port_ranges()."""

    def test_mixed_ranges_and_singles(self):
        assert parse_port_ranges("1-4,7,9-10") == {1, 2, 3, 4, 7, 9, 10}

    def test_malformed_token_skipped(self):
        assert parse_port_ranges("abc,5") == {5}

    def test_whitespace_ignored(self):
        assert parse_port_ranges(" 1 - 3 ,  8 ") == {1, 2, 3, 8}

    def test_descending_range_skipped(self):
        assert parse_port_ranges("10-5,12") == {12}

    def test_double_dash_skipped(self):
        assert parse_port_ranges("1-2-3,4") == {4}

    def test_empty_tokens(self):
        assert parse_port_ranges(",,3,") == {3}

    @pytest.mark.parametrize("expr", ["", "   ", "x-y"])
    def test_nothing_valid(self, expr):
        assert parse_port_ranges(expr) == set()

    def test_overlapping_ranges_merge(self):
        assert parse_port_ranges("1-4,3-6") == {1, 2, 3, 4, 5, 6}

    def test_zero_kept(self):
        assert parse_port_ranges("0-2") == {0, 1, 2}


class TestSectionPortIndices:
    """Tests for section_port_indices() and is_valid_port_ranges()."""

    def test_zero_dropped_by_default(self):
        assert section_port_indices("0-3") == [1, 2, 3]

    def test_zero_kept_when_allowed(self):
        assert section_port_indices("0-3", allow_port_zero=True) == [0, 1, 2, 3]

    def test_sorted(self):
        assert section_port_indices("9,1-2,5") == [1, 2, 5, 9]

    def test_valid(self):
        assert is_valid_port_ranges("1-24") is True

    def test_only_zero_invalid_without_flag(self):
        assert is_valid_port_ranges("0") is False
        assert is_valid_port_ranges("0", allow_port_zero=True) is True

    def test_garbage_invalid(self):
        assert is_valid_port_ranges("abc") is False


class TestMaxRangeToken:
    """Tests for max_range_token()."""

    def test_simple_range(self):
        assert max_range_token("1-24") == 24

    def test_takes_max_over_all_tokens(self):
        assert max_range_token("25-48, 3") == 48

    def test_descending_token_counts(self):
        # Not a set maximum: the invalid "30-5" still contributes 30.
        assert max_range_token("30-5,10") == 30

    def test_no_numbers(self):
        assert max_range_token("abc") == 0

    def test_leading_digits(self):
        assert max_range_token("12abc") == 12


class TestNextPortRange:
    """Tests for next_port_range()."""

    def test_empty_no_zero(self):
        assert next_port_range([], allow_port_zero=False) == (1, 24)

    def test_empty_with_zero(self):
        assert next_port_range([], allow_port_zero=True) == (0, 23)

    def test_after_section_with_detected_ports(self, make_section):
        sections = [make_section(port_ranges="1-24")]
        assert next_port_range(sections, detected_port_count=48) == (25, 48)

    def test_after_section_without_detected_ports(self, make_section):
        sections = [make_section(port_ranges="1-24")]
        assert next_port_range(sections) == (25, 48)

    def test_detected_not_exceeding_start_ignored(self, make_section):
        sections = [make_section(port_ranges="1-48")]
        assert next_port_range(sections, detected_port_count=48) == (49, 72)

    def test_allow_zero_ignored_once_sections_exist(self, make_section):
        sections = [make_section(port_ranges="0-23")]
        assert next_port_range(sections, allow_port_zero=True) == (24, 47)

    def test_uses_last_section_only(self, make_section):
        sections = [make_section("a", port_ranges="1-48"), make_section("b", port_ranges="49-52")]
        assert next_port_range(sections) == (53, 76)

    def test_last_section_empty_range(self, make_section):
        sections = [make_section(port_ranges="")]
        assert next_port_range(sections) == (1, 24)


class TestFormatPortRange:
    """Tests for format_port_range()."""

    def test_compacts_runs(self):
        assert format_port_range([1, 2, 3, 4, 7, 9, 10]) == "1-4, 7, 9-10"

    def test_unsorted_with_duplicates(self):
        assert format_port_range([5, 3, 4, 4, 1]) == "1, 3-5"

    def test_empty(self):
        assert format_port_range([]) == ""

    def test_parses_back(self):
        assert parse_port_ranges(format_port_range([1, 2, 3, 8, 10, 11])) == {1, 2, 3, 8, 10, 11}
