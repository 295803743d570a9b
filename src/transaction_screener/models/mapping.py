"""Column detection models."""

from dataclasses import dataclass, field, fields
from typing import Literal

# Semantic field name -> wire name used in reports
WIRE_NAMES = {
    "date": "date",
    "amount": "amount",
    "debit": "debit",
    "credit": "credit",
    "description": "description",
    "category": "category",
    "transaction_id": "transactionId",
}

DEFAULT_SUGGESTION = (
    "Ensure your CSV contains columns for: date and amount (or debit/credit). "
    "Column names are matched using keyword detection."
)


@dataclass
class ColumnMapping:
    """Semantic field -> original header it was matched to.

    Each header is used for at most one field.
    """

    date: str | None = None
    amount: str | None = None
    debit: str | None = None
    credit: str | None = None
    description: str | None = None
    category: str | None = None
    transaction_id: str | None = None

    @property
    def has_debit_credit(self) -> bool:
        """True when either a debit or a credit column was found."""
        return self.debit is not None or self.credit is not None

    def mapped_headers(self) -> list[str]:
        """Return the headers that were assigned to a field."""
        return [h for h in (getattr(self, f.name) for f in fields(self)) if h is not None]

    def to_dict(self) -> dict[str, str]:
        """Render mapped fields using wire names (transactionId)."""
        return {
            WIRE_NAMES[f.name]: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass
class ColumnDetection:
    """Successful column detection.

    Attributes:
        mapping: Field to header assignment.
        has_debit_credit: Whether separate debit/credit columns exist.
        unmapped: Headers not assigned to any field (kept only in metadata).
    """

    mapping: ColumnMapping
    has_debit_credit: bool
    unmapped: list[str] = field(default_factory=list)
    success: Literal[True] = True


@dataclass
class ColumnDetectionFailure:
    """Required columns could not be located.

    Returned rather than raised so callers can render field-level guidance.
    """

    missing: list[str]
    detected_headers: list[str]
    suggestion: str = DEFAULT_SUGGESTION
    error: str = "Required columns not found"
    success: Literal[False] = False

    def to_dict(self) -> dict[str, object]:
        """Render in the external error shape."""
        return {
            "success": self.success,
            "error": self.error,
            "missing": list(self.missing),
            "detectedHeaders": list(self.detected_headers),
            "suggestion": self.suggestion,
        }
