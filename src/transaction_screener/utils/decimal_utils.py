"""Decimal utilities for amount parsing.

All monetary values are kept as Decimal; statistics convert to float only
when they aggregate.
"""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP


# Currency symbols to strip
CURRENCY_SYMBOLS = {"₹", "$", "€", "£", "¥"}

# Leading currency codes: "Rs", "Rs.", "INR", "USD", "EUR", "GBP"
CURRENCY_CODE_PATTERN = re.compile(r"^(RS\.?|INR|USD|EUR|GBP)", re.IGNORECASE)

# Whole value wrapped in parentheses: (1234.56)
PARENS_NEGATIVE_PATTERN = re.compile(r"^\(([\d,.]+)\)$")

# Trailing Dr/Cr indicators, optionally followed by a dot
DR_PATTERN = re.compile(r"DR\.?$", re.IGNORECASE)
CR_PATTERN = re.compile(r"CR\.?$", re.IGNORECASE)

# Leading numeric portion; trailing junk is ignored
NUMBER_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)")

TWO_PLACES = Decimal("0.01")


def parse_amount(raw_amount: str) -> Decimal:
    """Parse a raw amount string into a signed Decimal.

    Handles various formats:
    - Standard: 1234.56, -1234.56
    - With currency: $1,234.56, ₹750, Rs. 500, INR 1,000
    - Indian grouping: 1,23,456.78
    - Parentheses for negative: (1234.56)
    - Dr/Cr suffix: 750 Dr (always negative), 750 Cr (always positive)

    Commas are always thousands separators.

    Args:
        raw_amount: The raw amount string to parse.

    Returns:
        Signed amount as Decimal (not rounded).

    Raises:
        ValueError: If the amount cannot be parsed or has too many digits
            to round to cents.
    """
    if not raw_amount:
        raise ValueError("Empty amount string")

    amount_str = raw_amount.strip()

    for symbol in CURRENCY_SYMBOLS:
        amount_str = amount_str.replace(symbol, "")
    amount_str = re.sub(r"\s", "", amount_str)

    # A sign may precede the currency code ("-INR500")
    sign = ""
    if amount_str[:1] in ("-", "+"):
        sign, amount_str = amount_str[0], amount_str[1:]
    amount_str = sign + CURRENCY_CODE_PATTERN.sub("", amount_str)

    is_parens_negative = False
    parens_match = PARENS_NEGATIVE_PATTERN.match(amount_str)
    if parens_match:
        amount_str = parens_match.group(1)
        is_parens_negative = True

    amount_str = amount_str.replace(",", "")

    force_negative = False
    force_positive = False
    if DR_PATTERN.search(amount_str):
        force_negative = True
        amount_str = DR_PATTERN.sub("", amount_str)
    elif CR_PATTERN.search(amount_str):
        force_positive = True
        amount_str = CR_PATTERN.sub("", amount_str)

    number_match = NUMBER_PATTERN.match(amount_str)
    if not number_match:
        raise ValueError(f"Cannot parse amount '{raw_amount}'")

    try:
        amount = Decimal(number_match.group(0))
        # Values too long to quantize to cents cannot be rounded later
        amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"Cannot parse amount '{raw_amount}': too many digits") from e

    if is_parens_negative:
        amount = -abs(amount)
    if force_negative:
        amount = -abs(amount)
    elif force_positive:
        amount = abs(amount)

    return amount


def safe_parse_amount(raw_amount: str | None, default: Decimal = Decimal("0")) -> Decimal:
    """Safely parse an amount string, returning default on failure.

    Args:
        raw_amount: The raw amount string to parse.
        default: Default value if parsing fails.

    Returns:
        Parsed Decimal or default.
    """
    if not raw_amount:
        return default

    try:
        return parse_amount(raw_amount)
    except ValueError:
        return default


def round_amount(amount: Decimal) -> Decimal:
    """Round an amount half-up to 2 decimal places.

    Args:
        amount: Amount to round.

    Returns:
        Quantized Decimal.
    """
    rounded = amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    if rounded == 0:
        return Decimal("0.00")  # Normalize -0.00
    return rounded


def format_amount(amount: Decimal, decimal_places: int = 2) -> str:
    """Format a Decimal amount for display or export.

    Args:
        amount: The amount to format.
        decimal_places: Number of decimal places (default 2).

    Returns:
        Formatted string like "-1234.56".
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "1"
    return str(amount.quantize(Decimal(quantize_str), rounding=ROUND_HALF_UP))
