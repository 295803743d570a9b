"""Transaction data models for screened records."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from transaction_screener.utils.decimal_utils import format_amount

if TYPE_CHECKING:
    from transaction_screener.models.risk import RiskResult

# One source record: original header -> cell value
RawRow = dict[str, str]

DEFAULT_CATEGORY = "Uncategorized"


class TransactionType(Enum):
    """Direction of a transaction."""

    DEBIT = "debit"  # Money out (negative)
    CREDIT = "credit"  # Money in (positive)
    UNKNOWN = "unknown"


class RiskLevel(Enum):
    """Discrete risk classification derived from the anomaly score."""

    NORMAL = "Normal"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass
class CanonicalTransaction:
    """Source-independent representation of one financial event.

    Attributes:
        date: Transaction timestamp (naive; midnight when the source had no time).
        amount: Signed amount rounded to 2 places (negative=debit, positive=credit).
        transaction_type: Debit, credit, or unknown.
        category: Source category, "Uncategorized" when absent.
        description: Trimmed, whitespace-collapsed description.
        metadata: Copy of the original raw row for traceability.
        anomaly_score: Sum of triggered risk signal points.
        risk_level: Classification of anomaly_score.
    """

    date: datetime
    amount: Decimal
    transaction_type: TransactionType = TransactionType.UNKNOWN
    category: str = DEFAULT_CATEGORY
    description: str = ""
    metadata: RawRow = field(default_factory=dict)
    anomaly_score: int = 0
    risk_level: RiskLevel = RiskLevel.NORMAL

    @property
    def absolute_amount(self) -> Decimal:
        """Unsigned amount used by batch statistics and scoring."""
        return abs(self.amount)

    def apply_risk(self, result: "RiskResult") -> None:
        """Record a scoring result on this transaction.

        Only the score and level are stored; the factors stay on the result.

        Args:
            result: Result from the risk scorer.
        """
        self.anomaly_score = result.anomaly_score
        self.risk_level = result.risk_level

    def to_dict(self, risk_factors: list[str] | None = None) -> dict[str, object]:
        """Render in the external wire shape.

        Args:
            risk_factors: Factors to include, if the caller has them.

        Returns:
            JSON-ready dictionary.
        """
        data: dict[str, object] = {
            "date": self.date.isoformat(),
            "amount": format_amount(self.amount),
            "type": self.transaction_type.value,
            "category": self.category,
            "description": self.description,
            "metadata": dict(self.metadata),
            "anomalyScore": self.anomaly_score,
            "riskLevel": self.risk_level.value,
        }
        if risk_factors is not None:
            data["riskFactors"] = list(risk_factors)
        return data

    def __repr__(self) -> str:
        return (
            f"CanonicalTransaction(date={self.date:%Y-%m-%d %H:%M}, "
            f"amount={self.amount}, "
            f"category={self.category!r}, "
            f"risk={self.risk_level.value}:{self.anomaly_score})"
        )
