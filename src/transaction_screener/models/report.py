"""Result models for a screened upload batch."""

from dataclasses import dataclass, field

from transaction_screener.models.mapping import ColumnMapping
from transaction_screener.models.risk import BatchStatistics, RiskResult
from transaction_screener.models.transaction import CanonicalTransaction, RiskLevel


def empty_distribution() -> dict[str, int]:
    """Zero-filled risk distribution keyed by level name."""
    return {level.value: 0 for level in RiskLevel}


@dataclass
class NormalizationStats:
    """Row accounting for one normalization run.

    Attributes:
        rows_parsed: Raw rows received.
        rows_retained: Rows turned into transactions.
        skip_reasons: Reason -> number of rows dropped for it.
    """

    rows_parsed: int = 0
    rows_retained: int = 0
    skip_reasons: dict[str, int] = field(default_factory=dict)

    @property
    def skipped_rows(self) -> int:
        """Rows dropped for any reason."""
        return self.rows_parsed - self.rows_retained

    def record_skip(self, reason: str) -> None:
        """Count one dropped row."""
        self.skip_reasons[reason] = self.skip_reasons.get(reason, 0) + 1


@dataclass
class AnalysisResult:
    """Scored transactions for one batch.

    Attributes:
        transactions: Transactions with score and level applied, input order.
        risk_results: Scoring result per transaction (same order).
        risk_distribution: Level name -> count; sums to len(transactions).
        statistics: Batch statistics, None for batches of 0 or 1 transactions.
    """

    transactions: list[CanonicalTransaction] = field(default_factory=list)
    risk_results: list[RiskResult] = field(default_factory=list)
    risk_distribution: dict[str, int] = field(default_factory=empty_distribution)
    statistics: BatchStatistics | None = None

    @property
    def flagged(self) -> list[tuple[CanonicalTransaction, RiskResult]]:
        """Transactions with a non-zero score, highest score first."""
        pairs = [
            (txn, result)
            for txn, result in zip(self.transactions, self.risk_results)
            if result.anomaly_score > 0
        ]
        return sorted(pairs, key=lambda p: p[1].anomaly_score, reverse=True)


@dataclass
class PipelineResult:
    """Everything produced for one upload: mapping, row counts, scores."""

    mapping: ColumnMapping
    has_debit_credit: bool
    unmapped_headers: list[str]
    normalization: NormalizationStats
    analysis: AnalysisResult

    @property
    def transactions(self) -> list[CanonicalTransaction]:
        return self.analysis.transactions

    @property
    def risk_results(self) -> list[RiskResult]:
        return self.analysis.risk_results

    @property
    def risk_distribution(self) -> dict[str, int]:
        return self.analysis.risk_distribution

    @property
    def columns_detected(self) -> dict[str, str]:
        return self.mapping.to_dict()

    @property
    def rows_parsed(self) -> int:
        return self.normalization.rows_parsed

    @property
    def rows_retained(self) -> int:
        return self.normalization.rows_retained

    @property
    def skipped_rows(self) -> int:
        return self.normalization.skipped_rows

    def to_dict(self) -> dict[str, object]:
        """Render in the external wire shape."""
        return {
            "success": True,
            "transactions": [
                txn.to_dict(result.risk_factors)
                for txn, result in zip(self.transactions, self.risk_results)
            ],
            "riskDistribution": dict(self.risk_distribution),
            "columnsDetected": self.columns_detected,
            "summary": {
                "totalRowsParsed": self.rows_parsed,
                "totalNormalized": self.rows_retained,
                "skippedRows": self.skipped_rows,
            },
        }
