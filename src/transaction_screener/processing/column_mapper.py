"""Keyword-based column detection for arbitrary transaction exports.

Headers are never hardcoded per bank. Each semantic field carries an ordered
keyword list and every header is scored against it:

- exact match:                    1000 - keyword index
- starts with "keyword_" / "keyword ": 500 - keyword index
- contains keyword (4+ chars only): 200 - keyword index

Fields are assigned greedily in FIELD_PATTERNS order; once a header is taken
it is unavailable to later fields.
"""

from transaction_screener.models.mapping import (
    ColumnDetection,
    ColumnDetectionFailure,
    ColumnMapping,
)
from transaction_screener.utils.logging_config import get_logger

logger = get_logger(__name__)

EXACT_MATCH_SCORE = 1000
PREFIX_MATCH_SCORE = 500
SUBSTRING_MATCH_SCORE = 200

# Keywords shorter than this ("dr", "cr", "id", "to") only match exactly or as a prefix
MIN_SUBSTRING_KEYWORD_LENGTH = 4

# Keyword patterns per field; earlier keywords are higher priority.
# Dict order is the assignment order and decides contested headers.
FIELD_PATTERNS: dict[str, list[str]] = {
    "date": [
        "date", "transaction_date", "txn_date", "trans_date", "trans date",
        "transaction date", "value_date", "value date", "posting_date",
        "posting date", "timestamp", "time", "datetime", "created_at",
        "created at", "txn date",
    ],
    "amount": [
        "amount", "transaction_amount", "transaction amount", "txn_amount",
        "txn amount", "value", "total", "sum", "price", "amt",
    ],
    "debit": [
        "debit", "debit_amount", "debit amount", "withdrawal",
        "withdrawal_amount", "withdrawal amt", "dr", "money_out", "money out",
        "spent", "expense",
    ],
    "credit": [
        "credit", "credit_amount", "credit amount", "deposit",
        "deposit_amount", "deposit amt", "cr", "money_in", "money in",
        "received", "income",
    ],
    "description": [
        "description", "narration", "remarks", "details",
        "transaction_details", "transaction details", "particulars", "note",
        "notes", "memo", "payee", "merchant", "merchant_name",
        "merchant name", "beneficiary", "receiver", "sender", "upi_id",
        "upi id", "to", "from",
    ],
    "category": [
        "category", "merchant_category", "merchant category", "type",
        "transaction_type", "transaction type", "txn_type", "txn type",
        "payment_type", "payment type", "mode", "channel", "label", "tag",
    ],
    "transaction_id": [
        "transaction_id", "transaction id", "txn_id", "txn id", "reference",
        "reference_id", "reference id", "ref_no", "ref no",
        "reference_number", "reference number", "utr", "rrn", "order_id",
        "order id", "id",
    ],
}

# At least one of these must be mapped
AMOUNT_FIELDS = ("amount", "debit", "credit")


def keyword_score(header: str, keyword: str, keyword_index: int) -> int:
    """Score one normalized header against one keyword.

    Args:
        header: Lower-cased, trimmed header.
        keyword: Keyword from a field's pattern list.
        keyword_index: Position of the keyword in that list.

    Returns:
        Match score, 0 for no match.
    """
    if header == keyword:
        return EXACT_MATCH_SCORE - keyword_index
    if header.startswith(keyword + "_") or header.startswith(keyword + " "):
        return PREFIX_MATCH_SCORE - keyword_index
    if len(keyword) >= MIN_SUBSTRING_KEYWORD_LENGTH and keyword in header:
        return SUBSTRING_MATCH_SCORE - keyword_index
    return 0


class ColumnMapper:
    """Maps arbitrary header strings to semantic transaction fields."""

    def __init__(self, field_patterns: dict[str, list[str]] | None = None):
        """Initialize the mapper.

        Args:
            field_patterns: Keyword lists per field; defaults to FIELD_PATTERNS.
        """
        self.field_patterns = field_patterns if field_patterns is not None else FIELD_PATTERNS

    def detect(self, headers: list[str]) -> ColumnDetection | ColumnDetectionFailure:
        """Detect and map headers to semantic fields.

        Args:
            headers: Raw header names as they appear in the source.

        Returns:
            ColumnDetection on success, ColumnDetectionFailure when the date
            column or every amount-like column is missing.
        """
        normalized = [str(h).lower().strip() for h in headers]

        mapping = ColumnMapping()
        used: set[int] = set()

        for field_name, keywords in self.field_patterns.items():
            index = self._find_best_match(normalized, keywords, used)
            if index is not None:
                setattr(mapping, field_name, headers[index])
                used.add(index)

        missing: list[str] = []
        if mapping.date is None:
            missing.append("date")
        if all(getattr(mapping, f) is None for f in AMOUNT_FIELDS):
            missing.append("amount (or debit/credit)")

        if missing:
            logger.warning(
                f"Required columns not found: {', '.join(missing)} "
                f"(headers: {list(headers)})"
            )
            return ColumnDetectionFailure(missing=missing, detected_headers=list(headers))

        unmapped = [h for i, h in enumerate(headers) if i not in used]
        has_debit_credit = mapping.has_debit_credit

        logger.info(f"Column mapping: {mapping.to_dict()}")
        logger.info(f"Unmapped headers: {unmapped}")
        logger.info(f"Debit/credit mode: {has_debit_credit}")

        return ColumnDetection(
            mapping=mapping,
            has_debit_credit=has_debit_credit,
            unmapped=unmapped,
        )

    def _find_best_match(
        self,
        headers: list[str],
        keywords: list[str],
        used: set[int],
    ) -> int | None:
        """Find the best unused header for one field's keywords.

        Args:
            headers: Normalized header names.
            keywords: Keywords for the field, highest priority first.
            used: Indices of headers already assigned.

        Returns:
            Index of the best header, or None if nothing scores above 0.
        """
        best_index: int | None = None
        best_score = 0

        for i, header in enumerate(headers):
            if i in used:
                continue
            for k, keyword in enumerate(keywords):
                score = keyword_score(header, keyword, k)
                # Strict comparison: the first header wins ties
                if score > best_score:
                    best_score = score
                    best_index = i

        return best_index


def detect_columns(headers: list[str]) -> ColumnDetection | ColumnDetectionFailure:
    """Convenience function to detect columns with the default keywords.

    Args:
        headers: Raw header names.

    Returns:
        ColumnDetection or ColumnDetectionFailure.
    """
    return ColumnMapper().detect(headers)
