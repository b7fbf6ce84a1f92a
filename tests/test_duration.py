"""
Tests for src/utils/duration.py

Covers parsing and formatting of ban durations entered on the
dashboard ban form.
"""

import pytest
from src.utils.duration import (
    parse_duration,
    format_duration,
    SECONDS_PER_MONTH,
    SECONDS_PER_YEAR,
)
from src.core.constants import (
    SECONDS_PER_MINUTE,
    SECONDS_PER_HOUR,
    SECONDS_PER_DAY,
    SECONDS_PER_WEEK,
)


# =============================================================================
# parse_duration() Tests
# =============================================================================

class TestParseDuration:
    """Tests for parse_duration function."""

    # -------------------------------------------------------------------------
    # Single units
    # -------------------------------------------------------------------------

    def test_parse_seconds_and_minutes(self):
        assert parse_duration("30s") == 30
        assert parse_duration("1m") == 60
        assert parse_duration("90m") == 5400

    def test_parse_hours_and_days(self):
        assert parse_duration("6h") == 21600
        assert parse_duration("1d") == 86400
        assert parse_duration("30d") == 2592000

    def test_parse_weeks_months_years(self):
        assert parse_duration("2w") == 2 * SECONDS_PER_WEEK
        assert parse_duration("1mo") == SECONDS_PER_MONTH
        assert parse_duration("1y") == SECONDS_PER_YEAR

    # -------------------------------------------------------------------------
    # Bare numbers (days)
    # -------------------------------------------------------------------------

    def test_bare_number_is_days(self):
        assert parse_duration("7") == 7 * SECONDS_PER_DAY
        assert parse_duration("1") == SECONDS_PER_DAY

    def test_integer_is_seconds(self):
        assert parse_duration(3600) == 3600
        assert parse_duration(90.9) == 90

    # -------------------------------------------------------------------------
    # Combined and spelled-out forms
    # -------------------------------------------------------------------------

    def test_parse_combined(self):
        assert parse_duration("1d12h") == 129600
        assert parse_duration("1h30m") == 5400
        assert parse_duration("1w2d") == SECONDS_PER_WEEK + 2 * SECONDS_PER_DAY

    def test_parse_words(self):
        assert parse_duration("3 days") == 3 * SECONDS_PER_DAY
        assert parse_duration("2 hours") == 2 * SECONDS_PER_HOUR
        assert parse_duration("1 month") == SECONDS_PER_MONTH
        assert parse_duration("15 mins") == 15 * SECONDS_PER_MINUTE

    def test_case_insensitive(self):
        assert parse_duration("2H") == 7200
        assert parse_duration("  1D  ") == 86400

    # -------------------------------------------------------------------------
    # Permanent and invalid input
    # -------------------------------------------------------------------------

    @pytest.mark.parametrize("value", ["permanent", "perm", "Forever", "", None])
    def test_permanent_returns_none(self, value):
        assert parse_duration(value) is None

    @pytest.mark.parametrize("value", ["abc", "1x", "h1", "1d garbage", "0", "0h", -5, 0.5, 0.999, True])
    def test_invalid_returns_none(self, value):
        assert parse_duration(value) is None


# =============================================================================
# format_duration() Tests
# =============================================================================

class TestFormatDuration:
    """Tests for format_duration function."""

    def test_permanent(self):
        assert format_duration(None) == "Permanent"

    def test_under_a_minute(self):
        assert format_duration(0) == "< 1m"
        assert format_duration(59) == "< 1m"

    def test_single_unit(self):
        assert format_duration(60) == "1m"
        assert format_duration(7200) == "2h"
        assert format_duration(SECONDS_PER_WEEK) == "1w"

    def test_two_units_max(self):
        assert format_duration(90061) == "1d 1h"
        assert format_duration(129600) == "1d 12h"

    def test_skips_empty_units(self):
        assert format_duration(SECONDS_PER_DAY + 60) == "1d 1m"

    def test_custom_max_units(self):
        assert format_duration(90061, max_units=3) == "1d 1h 1m"
