"""Batch statistics and risk scoring result models."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from transaction_screener.models.transaction import RiskLevel


class RiskSignal(Enum):
    """Independent scoring signals, in evaluation order."""

    EXTREME_DEVIATION = "extreme_amount_deviation"
    HIGH_DEVIATION = "high_amount_deviation"
    HIGH_VALUE = "high_value"
    UNUSUAL_HOUR = "unusual_hour"
    CATEGORY_SPIKE = "category_spike"
    FREQUENCY_SPIKE = "weekly_frequency_spike"


@dataclass(frozen=True)
class TriggeredSignal:
    """One signal that fired, with its points and explanation."""

    signal: RiskSignal
    points: int
    factor: str


@dataclass(frozen=True)
class BatchStatistics:
    """Descriptive statistics for one upload batch.

    Computed once before scoring and shared read-only by every scoring call.

    Attributes:
        mean: Mean of absolute amounts.
        std_dev: Population standard deviation of absolute amounts.
        peak_hours: Hours of day (0-23) considered normal activity.
        category_totals: Category -> summed absolute amount.
        category_avg_spending: Category -> batch-wide average category total
            (the same value for every category).
        weekly_avg: Mean transaction count per observed ISO week.
        current_week_count: Transaction count of the latest ISO week.
    """

    mean: float
    std_dev: float
    peak_hours: frozenset[int] = frozenset(range(24))
    category_totals: Mapping[str, float] = field(default_factory=dict)
    category_avg_spending: Mapping[str, float] = field(default_factory=dict)
    weekly_avg: float = 0.0
    current_week_count: int = 0

    def __post_init__(self) -> None:
        # Freeze mappings so concurrent scorers cannot mutate shared state
        object.__setattr__(self, "peak_hours", frozenset(self.peak_hours))
        object.__setattr__(
            self, "category_totals", MappingProxyType(dict(self.category_totals))
        )
        object.__setattr__(
            self, "category_avg_spending", MappingProxyType(dict(self.category_avg_spending))
        )

    def to_dict(self) -> dict[str, object]:
        """Render for logging and JSON output."""
        return {
            "mean": self.mean,
            "stdDev": self.std_dev,
            "peakHours": sorted(self.peak_hours),
            "categoryTotals": dict(self.category_totals),
            "categoryAvgSpending": dict(self.category_avg_spending),
            "weeklyAvg": self.weekly_avg,
            "currentWeekCount": self.current_week_count,
        }


@dataclass(frozen=True)
class RiskResult:
    """Outcome of scoring one transaction.

    The score is always the sum of the triggered signals' points.
    """

    risk_level: RiskLevel
    signals: tuple[TriggeredSignal, ...] = ()

    @property
    def anomaly_score(self) -> int:
        """Sum of points of every triggered signal."""
        return sum(s.points for s in self.signals)

    @property
    def risk_factors(self) -> list[str]:
        """Human-readable explanations in evaluation order."""
        return [s.factor for s in self.signals]
