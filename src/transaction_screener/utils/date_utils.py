"""Date parsing utilities for arbitrary statement exports."""

import re
from datetime import date, datetime, timezone

from dateutil import parser as dateutil_parser

# Accepted year range; anything outside is treated as a misparse
MIN_YEAR = 1990
MAX_YEAR = 2100

# Parse attempts run in this order and the first valid result wins:
#
# 1. Unix timestamps: 10 digits are seconds, 11-13 digits are milliseconds.
#    Timestamps are read as UTC and returned as naive datetimes.
# 2. Year-first: 2024-01-15, 2024/1/5, 2024-01-15T10:30:00, 2024-01-15 10:30
# 3. Day-first: 15/01/2024, 15-01-24, 15.01.2024, 05/01/2024 14:30
#    Two-digit years above 50 map to 19xx, the rest to 20xx.
# 4. Anything else goes to dateutil (15-Jan-24, Jan 15 2024, 15 January 2024).
#    Parts the text leaves out come from FREE_FORM_DEFAULT, never from today,
#    so "Jan 2024" is always 2024-01-01.
#
# Numeric D/M/Y dates are day-first whether or not a time follows. US-style
# MM/DD input is only recovered when the day-first reading is impossible and
# dateutil accepts it.
TIMESTAMP_PATTERN = re.compile(r"^\d{10,13}$")
YEAR_FIRST_PATTERN = re.compile(
    r"^(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})"
    r"(?:[T\s]+(\d{1,2}):(\d{2})(?::(\d{2}))?)?"
)
DAY_FIRST_PATTERN = re.compile(
    r"^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2,4})"
    r"(?:[T\s]+(\d{1,2}):(\d{2})(?::(\d{2}))?)?$"
)

FREE_FORM_DEFAULT = datetime(MIN_YEAR, 1, 1)


def is_valid_year(d: date) -> bool:
    """Check that a parsed date falls inside the accepted year range.

    Args:
        d: Date or datetime to check.

    Returns:
        True if MIN_YEAR <= year <= MAX_YEAR.
    """
    return MIN_YEAR <= d.year <= MAX_YEAR


def expand_two_digit_year(year: str) -> int:
    """Expand a 2-digit year: above 50 is 19xx, otherwise 20xx.

    Args:
        year: Year string of 2 to 4 digits.

    Returns:
        Four-digit year.
    """
    if len(year) == 2:
        return 1900 + int(year) if int(year) > 50 else 2000 + int(year)
    return int(year)


def _parse_timestamp(date_str: str) -> datetime | None:
    if not TIMESTAMP_PATTERN.match(date_str):
        return None
    value = int(date_str)
    seconds = value if len(date_str) == 10 else value / 1000
    try:
        parsed = datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return parsed.replace(tzinfo=None)


def _parse_year_first(date_str: str) -> datetime | None:
    match = YEAR_FIRST_PATTERN.match(date_str)
    if not match:
        return None
    year, month, day, hour, minute, second = match.groups()
    try:
        return datetime(
            int(year),
            int(month),
            int(day),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
        )
    except ValueError:
        return None


def _parse_day_first(date_str: str) -> datetime | None:
    match = DAY_FIRST_PATTERN.match(date_str)
    if not match:
        return None
    day, month, year, hour, minute, second = match.groups()
    try:
        return datetime(
            expand_two_digit_year(year),
            int(month),
            int(day),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
        )
    except ValueError:
        return None


def _parse_free_form(date_str: str) -> datetime | None:
    try:
        parsed = dateutil_parser.parse(date_str, default=FREE_FORM_DEFAULT)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


_PARSE_ATTEMPTS = (
    _parse_timestamp,
    _parse_year_first,
    _parse_day_first,
    _parse_free_form,
)


def parse_date(raw_date: str) -> datetime:
    """Parse a raw date string into a naive datetime.

    Handles various formats:
    - Unix timestamps: 1705276800, 1705320000000
    - ISO-like: 2024-01-15, 2024/01/15, 2024-01-15T10:30:00
    - Day-first: 15/01/2024, 15-01-24, 15.01.2024, 15/01/2024 14:30
    - Text: 15-Jan-24, Jan 15, 2024, 15 January 2024

    Args:
        raw_date: The raw date string to parse.

    Returns:
        Parsed datetime (midnight when the input carries no time).

    Raises:
        ValueError: If no attempt yields a date within MIN_YEAR..MAX_YEAR.
    """
    if not raw_date:
        raise ValueError("Empty date string")

    date_str = raw_date.strip()
    if not date_str:
        raise ValueError("Empty date string after stripping whitespace")

    for attempt in _PARSE_ATTEMPTS:
        parsed = attempt(date_str)
        if parsed is not None and is_valid_year(parsed):
            return parsed

    raise ValueError(f"Cannot parse date: '{raw_date}'")


def safe_parse_date(raw_date: str | None, default: datetime | None = None) -> datetime | None:
    """Safely parse a date string, returning default on failure.

    Args:
        raw_date: The raw date string to parse.
        default: Default value if parsing fails.

    Returns:
        Parsed datetime or default.
    """
    if not raw_date:
        return default

    try:
        return parse_date(raw_date)
    except ValueError:
        return default


def iso_week_key(d: date) -> str:
    """Build the ISO week key (YYYY-Www) for a date.

    Weeks start on Monday and week 1 contains the year's first Thursday, so
    the key's year can differ from the calendar year near January 1st.

    Args:
        d: Date or datetime.

    Returns:
        Key such as "2024-W03"; keys sort chronologically as strings.
    """
    iso_year, iso_week, _ = d.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"
