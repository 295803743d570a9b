"""Row normalizer for converting raw rows to canonical transactions."""

from decimal import Decimal
from typing import Optional

from transaction_screener.models.mapping import ColumnMapping
from transaction_screener.models.report import NormalizationStats
from transaction_screener.models.transaction import (
    DEFAULT_CATEGORY,
    CanonicalTransaction,
    RawRow,
    TransactionType,
)
from transaction_screener.utils.date_utils import safe_parse_date
from transaction_screener.utils.decimal_utils import round_amount, safe_parse_amount
from transaction_screener.utils.logging_config import get_logger
from transaction_screener.utils.sanitize import clean_string

logger = get_logger(__name__)

SKIP_INVALID_DATE = "invalid_date"
SKIP_ZERO_AMOUNT = "zero_amount"


def get_field(row: RawRow, column: Optional[str]) -> str:
    """Safely extract a trimmed cell value.

    Args:
        row: Raw row.
        column: Original header from the mapping, or None if unmapped.

    Returns:
        Cell value, "" when the column is unmapped, absent or None.
    """
    if not column:
        return ""
    value = row.get(column)
    if value is None:
        return ""
    return str(value).strip()


class RowNormalizer:
    """Normalizes raw rows into CanonicalTransaction records.

    The normalizer:
    - Parses dates through the ordered format attempts in date_utils
    - Resolves amount sign and type from debit/credit or amount columns
    - Drops rows with no valid date or a zero amount
    - Keeps the full raw row as metadata
    """

    def __init__(self, mapping: ColumnMapping, has_debit_credit: bool):
        """Initialize normalizer with a detected column mapping.

        Args:
            mapping: Column mapping from the column mapper.
            has_debit_credit: Whether separate debit/credit columns exist.
        """
        self.mapping = mapping
        self.has_debit_credit = has_debit_credit
        self.stats = NormalizationStats()

    def normalize(self, rows: list[RawRow]) -> list[CanonicalTransaction]:
        """Normalize a batch of raw rows.

        Malformed rows are skipped; counts accumulate in self.stats.

        Args:
            rows: Raw rows from the decoder.

        Returns:
            Normalized transactions in input order.
        """
        transactions: list[CanonicalTransaction] = []

        for row_num, row in enumerate(rows, start=1):
            self.stats.rows_parsed += 1
            txn = self._normalize_row(row, row_num)
            if txn is not None:
                transactions.append(txn)
                self.stats.rows_retained += 1

        logger.info(
            f"Normalized {self.stats.rows_retained}/{self.stats.rows_parsed} rows"
            + (f" (skipped: {self.stats.skip_reasons})" if self.stats.skipped_rows else "")
        )
        return transactions

    def _normalize_row(self, row: RawRow, row_num: int) -> Optional[CanonicalTransaction]:
        """Normalize a single row.

        Args:
            row: Raw row.
            row_num: 1-based position, for diagnostics.

        Returns:
            CanonicalTransaction, or None if the row is unusable.
        """
        raw_date = get_field(row, self.mapping.date)
        parsed_date = safe_parse_date(raw_date)
        if parsed_date is None:
            logger.debug(f"Skipping row {row_num}: unparseable date {raw_date!r}")
            self.stats.record_skip(SKIP_INVALID_DATE)
            return None

        amount, transaction_type = self.resolve_amount(row)
        amount = round_amount(amount)
        if amount == 0:
            logger.debug(f"Skipping row {row_num}: zero or missing amount")
            self.stats.record_skip(SKIP_ZERO_AMOUNT)
            return None

        return CanonicalTransaction(
            date=parsed_date,
            amount=amount,
            transaction_type=transaction_type,
            category=clean_string(get_field(row, self.mapping.category)) or DEFAULT_CATEGORY,
            description=clean_string(get_field(row, self.mapping.description)),
            metadata=dict(row),
        )

    def resolve_amount(self, row: RawRow) -> tuple[Decimal, TransactionType]:
        """Determine signed amount and type for a row.

        With debit/credit columns a positive debit wins, then a positive
        credit, then the amount column if one is mapped. Otherwise the
        amount column's sign decides.

        Args:
            row: Raw row.

        Returns:
            Tuple of (signed amount, transaction type). Amount is 0 when
            nothing usable was found.
        """
        if self.has_debit_credit:
            debit = safe_parse_amount(get_field(row, self.mapping.debit))
            credit = safe_parse_amount(get_field(row, self.mapping.credit))

            if debit > 0:
                return -abs(debit), TransactionType.DEBIT
            if credit > 0:
                return abs(credit), TransactionType.CREDIT
            if self.mapping.amount is None:
                return Decimal("0"), TransactionType.UNKNOWN

        amount = safe_parse_amount(get_field(row, self.mapping.amount))
        return amount, TransactionType.DEBIT if amount < 0 else TransactionType.CREDIT


def normalize_rows(
    rows: list[RawRow],
    mapping: ColumnMapping,
    has_debit_credit: bool,
) -> list[CanonicalTransaction]:
    """Convenience function to normalize rows.

    Args:
        rows: Raw rows.
        mapping: Column mapping.
        has_debit_credit: Whether separate debit/credit columns exist.

    Returns:
        List of normalized transactions.
    """
    return RowNormalizer(mapping, has_debit_credit).normalize(rows)
