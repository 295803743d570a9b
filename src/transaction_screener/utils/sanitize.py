"""Sanitization utilities for safe output generation."""

import re
from typing import Optional


# Characters that trigger formula execution in spreadsheet applications
# when they appear at the start of a cell value
# Includes | for DDE (Dynamic Data Exchange) attack prevention
_FORMULA_CHARS = ("=", "+", "-", "@", "\t", "\r", "\n", "|")

_WHITESPACE_RUN = re.compile(r"\s+")


def sanitize_for_csv(value: Optional[str]) -> Optional[str]:
    """Sanitize a string value for safe CSV/Excel output.

    Values starting with a formula-triggering character are prefixed with a
    single quote (OWASP CSV injection mitigation).

    Args:
        value: String value to sanitize, or None.

    Returns:
        Sanitized string, or None if input was None.
    """
    if value is None:
        return None

    if not value:
        return value

    if value.startswith(_FORMULA_CHARS):
        return "'" + value

    return value


def clean_string(value: Optional[str]) -> str:
    """Trim a value and collapse internal whitespace runs to one space.

    Args:
        value: Raw cell value, or None.

    Returns:
        Cleaned string ("" for None or blank input).
    """
    if not value:
        return ""
    return _WHITESPACE_RUN.sub(" ", str(value).strip())
