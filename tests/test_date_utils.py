"""Tests for date parsing and ISO week keys."""

from datetime import date, datetime

import pytest

from transaction_screener.utils.date_utils import (
    expand_two_digit_year,
    iso_week_key,
    is_valid_year,
    parse_date,
    safe_parse_date,
)


class TestParseDate:
    """Tests for parse_date."""

    @pytest.mark.parametrize(
        "raw",
        [
            "2024-01-15",
            "2024/01/15",
            "2024/1/15",
            "15/01/2024",
            "15-01-2024",
            "15.01.2024",
            "15/01/24",
            "15-Jan-24",
            "Jan 15, 2024",
            "15 January 2024",
        ],
    )
    def test_common_formats(self, raw: str) -> None:
        """Test that common statement formats resolve to the same day."""
        assert parse_date(raw) == datetime(2024, 1, 15)

    def test_year_first_with_time(self) -> None:
        """Test that a time component is preserved."""
        assert parse_date("2024-01-15 14:30:00") == datetime(2024, 1, 15, 14, 30, 0)
        assert parse_date("2024-01-15T09:05") == datetime(2024, 1, 15, 9, 5)

    def test_slash_dates_are_day_first(self) -> None:
        """Test that ambiguous slash dates are read day first."""
        assert parse_date("02/03/2024") == datetime(2024, 3, 2)

    def test_day_first_with_time(self) -> None:
        """Test that a trailing time does not switch slash dates to month first."""
        assert parse_date("05/01/2024 14:30") == datetime(2024, 1, 5, 14, 30)
        assert parse_date("15.01.2024 09:05:30") == datetime(2024, 1, 15, 9, 5, 30)

    def test_month_and_year_defaults_to_first_day(self) -> None:
        """Test that a missing day resolves to the 1st, not today's day."""
        assert parse_date("Jan 2024") == datetime(2024, 1, 1)
        assert parse_date("March 2023") == datetime(2023, 3, 1)

    def test_us_format_recovered_when_day_first_impossible(self) -> None:
        """Test that 01/31/2024 falls through to free-form parsing."""
        assert parse_date("01/31/2024") == datetime(2024, 1, 31)

    def test_unix_timestamp_milliseconds(self) -> None:
        """Test 13-digit millisecond timestamps (read as UTC)."""
        assert parse_date("1705320000000") == datetime(2024, 1, 15, 12, 0)

    def test_unix_timestamp_seconds(self) -> None:
        """Test 10-digit second timestamps (read as UTC)."""
        assert parse_date("1705276800") == datetime(2024, 1, 15)

    def test_two_digit_year_expansion(self) -> None:
        """Test the 50-year pivot for two-digit years."""
        assert parse_date("01/01/95") == datetime(1995, 1, 1)
        assert parse_date("01/06/99").year == 1999
        assert parse_date("01/06/30").year == 2030

    def test_surrounding_whitespace(self) -> None:
        """Test that input is trimmed before parsing."""
        assert parse_date("  2024-01-15  ") == datetime(2024, 1, 15)

    @pytest.mark.parametrize("raw", ["1899-01-01", "2101-06-01", "01/01/1899"])
    def test_out_of_range_years_rejected(self, raw: str) -> None:
        """Test that years outside 1990-2100 are rejected."""
        with pytest.raises(ValueError):
            parse_date(raw)

    @pytest.mark.parametrize("raw", ["", "   ", "not a date", "2024-13-45"])
    def test_invalid_raises(self, raw: str) -> None:
        """Test that unparseable input raises ValueError."""
        with pytest.raises(ValueError):
            parse_date(raw)


class TestSafeParseDate:
    """Tests for safe_parse_date."""

    def test_returns_none_on_failure(self) -> None:
        """Test the default fallback."""
        assert safe_parse_date("garbage") is None
        assert safe_parse_date(None) is None
        assert safe_parse_date("") is None

    def test_custom_default(self) -> None:
        """Test a caller-supplied default."""
        fallback = datetime(2000, 1, 1)
        assert safe_parse_date("garbage", default=fallback) == fallback


class TestYearHelpers:
    """Tests for year validation and expansion."""

    def test_is_valid_year_bounds(self) -> None:
        """Test inclusive year bounds."""
        assert is_valid_year(date(1990, 1, 1))
        assert is_valid_year(date(2100, 12, 31))
        assert not is_valid_year(date(1989, 12, 31))
        assert not is_valid_year(date(2101, 1, 1))

    def test_expand_two_digit_year(self) -> None:
        """Test 2-digit and 4-digit year strings."""
        assert expand_two_digit_year("51") == 1951
        assert expand_two_digit_year("50") == 2050
        assert expand_two_digit_year("2024") == 2024


class TestIsoWeekKey:
    """Tests for iso_week_key."""

    def test_regular_week(self) -> None:
        """Test a mid-January date."""
        assert iso_week_key(date(2024, 1, 15)) == "2024-W03"

    def test_monday_starts_week_one(self) -> None:
        """Test that 2024-01-01 (a Monday) is week 1."""
        assert iso_week_key(datetime(2024, 1, 1, 23, 59)) == "2024-W01"

    def test_year_boundary_uses_iso_year(self) -> None:
        """Test that early January can belong to the previous ISO year."""
        assert iso_week_key(date(2021, 1, 1)) == "2020-W53"

    def test_keys_sort_chronologically(self) -> None:
        """Test that zero-padded keys sort as strings."""
        keys = [iso_week_key(date(2024, 3, 4)), iso_week_key(date(2024, 1, 8))]
        assert sorted(keys) == ["2024-W02", "2024-W10"]
