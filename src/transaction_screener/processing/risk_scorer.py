"""Risk scoring and classification.

Each signal adds points independently so every score can be explained by
its factors:

    Signal                      Points
    Amount Z-score > 2            +25
    Amount Z-score > 3            +40  (replaces 25)
    High value (> 2x mean)        +30
    Unusual hour                  +15
    Category spike (> 40%)        +20
    Frequency spike (> 30%)       +20

Classification: 0-29 Normal, 30-59 Medium, 60+ High.
"""

from transaction_screener.config import ScoringConfig
from transaction_screener.models.risk import (
    BatchStatistics,
    RiskResult,
    RiskSignal,
    TriggeredSignal,
)
from transaction_screener.models.transaction import (
    DEFAULT_CATEGORY,
    CanonicalTransaction,
    RiskLevel,
)


def classify_risk(score: int, scoring: ScoringConfig | None = None) -> RiskLevel:
    """Classify a numeric score into a risk level.

    Args:
        score: Total risk points.
        scoring: Thresholds; defaults to ScoringConfig().

    Returns:
        RiskLevel for the score.
    """
    scoring = scoring or ScoringConfig()
    if score >= scoring.risk_high_min:
        return RiskLevel.HIGH
    if score >= scoring.risk_medium_min:
        return RiskLevel.MEDIUM
    return RiskLevel.NORMAL


class RiskScorer:
    """Scores single transactions against batch statistics.

    Holds only immutable thresholds, so one instance can score from many
    threads at once.
    """

    def __init__(self, scoring: ScoringConfig | None = None):
        """Initialize scorer.

        Args:
            scoring: Thresholds and point values; defaults to ScoringConfig().
        """
        self.scoring = scoring or ScoringConfig()

    def score(self, txn: CanonicalTransaction, stats: BatchStatistics) -> RiskResult:
        """Evaluate every signal for one transaction.

        Args:
            txn: Normalized transaction.
            stats: Statistics for the transaction's batch.

        Returns:
            RiskResult with the triggered signals in evaluation order.
        """
        amount = float(txn.absolute_amount)
        signals = [
            s
            for s in (
                self._check_deviation(amount, stats),
                self._check_high_value(amount, stats),
                self._check_unusual_hour(txn, stats),
                self._check_category_spike(txn, stats),
                self._check_frequency_spike(stats),
            )
            if s is not None
        ]
        total = sum(s.points for s in signals)
        return RiskResult(risk_level=classify_risk(total, self.scoring), signals=tuple(signals))

    def _check_deviation(self, amount: float, stats: BatchStatistics) -> TriggeredSignal | None:
        if stats.std_dev <= 0:
            return None

        z_score = abs((amount - stats.mean) / stats.std_dev)
        if z_score > self.scoring.zscore_extreme:
            return TriggeredSignal(
                RiskSignal.EXTREME_DEVIATION,
                self.scoring.points_zscore_extreme,
                f"Extreme amount deviation (Z={z_score:.2f})",
            )
        if z_score > self.scoring.zscore_moderate:
            return TriggeredSignal(
                RiskSignal.HIGH_DEVIATION,
                self.scoring.points_zscore_moderate,
                f"High amount deviation (Z={z_score:.2f})",
            )
        return None

    def _check_high_value(self, amount: float, stats: BatchStatistics) -> TriggeredSignal | None:
        if stats.mean <= 0 or amount <= stats.mean * self.scoring.high_value_multiplier:
            return None
        return TriggeredSignal(
            RiskSignal.HIGH_VALUE,
            self.scoring.points_high_value,
            f"High value transaction ({amount:.0f} vs avg {stats.mean:.0f})",
        )

    def _check_unusual_hour(
        self, txn: CanonicalTransaction, stats: BatchStatistics
    ) -> TriggeredSignal | None:
        if txn.date is None or not stats.peak_hours:
            return None

        hour = txn.date.hour
        if hour in stats.peak_hours:
            return None
        return TriggeredSignal(
            RiskSignal.UNUSUAL_HOUR,
            self.scoring.points_unusual_hour,
            f"Unusual hour ({hour}:00, outside normal activity)",
        )

    def _check_category_spike(
        self, txn: CanonicalTransaction, stats: BatchStatistics
    ) -> TriggeredSignal | None:
        category = txn.category or DEFAULT_CATEGORY
        category_avg = stats.category_avg_spending.get(category)
        if not category_avg or category_avg <= 0:
            return None

        category_total = stats.category_totals.get(category, 0.0)
        if category_total <= category_avg * (1 + self.scoring.category_spike_percent):
            return None

        percent_above = (category_total / category_avg - 1) * 100
        return TriggeredSignal(
            RiskSignal.CATEGORY_SPIKE,
            self.scoring.points_category_spike,
            f"Category spending spike: {category} ({percent_above:.0f}% above avg)",
        )

    def _check_frequency_spike(self, stats: BatchStatistics) -> TriggeredSignal | None:
        if stats.weekly_avg <= 0:
            return None
        if stats.current_week_count <= stats.weekly_avg * (1 + self.scoring.frequency_spike_percent):
            return None
        return TriggeredSignal(
            RiskSignal.FREQUENCY_SPIKE,
            self.scoring.points_frequency_spike,
            f"Weekly frequency spike ({stats.current_week_count} txns vs avg {stats.weekly_avg:.1f})",
        )


def calculate_risk(
    txn: CanonicalTransaction,
    stats: BatchStatistics,
    scoring: ScoringConfig | None = None,
) -> RiskResult:
    """Convenience function to score one transaction.

    Args:
        txn: Normalized transaction.
        stats: Batch statistics.
        scoring: Optional thresholds.

    Returns:
        RiskResult.
    """
    return RiskScorer(scoring).score(txn, stats)
