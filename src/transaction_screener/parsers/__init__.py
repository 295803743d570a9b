"""File readers that supply headers and raw rows."""

from transaction_screener.parsers.csv_reader import ParseError, read_csv

__all__ = [
    "ParseError",
    "read_csv",
]
