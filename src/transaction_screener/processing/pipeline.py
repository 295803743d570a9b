"""Batch anomaly pipeline.

Runs one upload end to end:

    1) Detect columns from the headers
    2) Normalize raw rows into canonical transactions
    3) Compute batch statistics (once, before any scoring)
    4) Score each transaction against the shared statistics
    5) Tally the Normal/Medium/High distribution
"""

from concurrent.futures import ThreadPoolExecutor

from transaction_screener.config import ScoringConfig
from transaction_screener.models.mapping import ColumnDetectionFailure
from transaction_screener.models.report import (
    AnalysisResult,
    PipelineResult,
    empty_distribution,
)
from transaction_screener.models.risk import BatchStatistics, RiskResult
from transaction_screener.models.transaction import CanonicalTransaction, RawRow, RiskLevel
from transaction_screener.processing.column_mapper import ColumnMapper
from transaction_screener.processing.normalizer import RowNormalizer
from transaction_screener.processing.risk_scorer import RiskScorer
from transaction_screener.processing.statistics import compute_batch_statistics
from transaction_screener.utils.logging_config import LogContext, get_logger

logger = get_logger(__name__)


class AnomalyPipeline:
    """Orchestrates column detection, normalization, statistics and scoring."""

    def __init__(
        self,
        scoring: ScoringConfig | None = None,
        max_workers: int = 1,
        column_mapper: ColumnMapper | None = None,
    ):
        """Initialize the pipeline.

        Args:
            scoring: Risk thresholds; defaults to ScoringConfig().
            max_workers: Scoring threads; 1 scores sequentially.
            column_mapper: Mapper to use; defaults to the keyword mapper.
        """
        if max_workers < 1:
            raise ValueError("max_workers must be a positive integer")
        self.scorer = RiskScorer(scoring)
        self.max_workers = max_workers
        self.column_mapper = column_mapper or ColumnMapper()

    def process(
        self, headers: list[str], rows: list[RawRow]
    ) -> PipelineResult | ColumnDetectionFailure:
        """Screen one upload batch.

        Args:
            headers: Header strings from the decoder.
            rows: Raw rows keyed by those headers.

        Returns:
            PipelineResult, or ColumnDetectionFailure when required columns
            are missing (no partial mapping is used).
        """
        with LogContext(logger, "process batch", headers=len(headers), rows=len(rows)):
            detection = self.column_mapper.detect(headers)
            if isinstance(detection, ColumnDetectionFailure):
                return detection

            normalizer = RowNormalizer(detection.mapping, detection.has_debit_credit)
            transactions = normalizer.normalize(rows)
            analysis = self.analyze(transactions)

            return PipelineResult(
                mapping=detection.mapping,
                has_debit_credit=detection.has_debit_credit,
                unmapped_headers=detection.unmapped,
                normalization=normalizer.stats,
                analysis=analysis,
            )

    def analyze(self, transactions: list[CanonicalTransaction]) -> AnalysisResult:
        """Score a normalized batch.

        Transactions are updated in place with their score and level.

        Args:
            transactions: Normalized transactions.

        Returns:
            AnalysisResult with per-transaction results and the distribution.
        """
        if not transactions:
            return AnalysisResult()

        if len(transactions) == 1:
            # No deviation is measurable from a single transaction
            txn = transactions[0]
            result = RiskResult(risk_level=RiskLevel.NORMAL)
            txn.apply_risk(result)
            distribution = empty_distribution()
            distribution[RiskLevel.NORMAL.value] = 1
            return AnalysisResult([txn], [result], distribution)

        with LogContext(
            logger, "score batch", transactions=len(transactions), workers=self.max_workers
        ):
            stats = compute_batch_statistics(transactions)
            results = self._score_all(transactions, stats)

        distribution = empty_distribution()
        for txn, result in zip(transactions, results):
            txn.apply_risk(result)
            distribution[result.risk_level.value] += 1
            if result.anomaly_score > 0:
                logger.debug(
                    f"[{result.risk_level.value}] Score {result.anomaly_score}: "
                    f"{txn.description or txn.category} | {'; '.join(result.risk_factors)}"
                )

        logger.info(
            "Anomaly analysis complete: "
            + ", ".join(f"{count} {level}" for level, count in distribution.items())
        )
        return AnalysisResult(list(transactions), results, distribution, stats)

    def _score_all(
        self, transactions: list[CanonicalTransaction], stats: BatchStatistics
    ) -> list[RiskResult]:
        """Score every transaction against one statistics snapshot, in input order."""
        if self.max_workers == 1:
            return [self.scorer.score(txn, stats) for txn in transactions]

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(pool.map(lambda txn: self.scorer.score(txn, stats), transactions))


def analyze_transactions(
    transactions: list[CanonicalTransaction],
    scoring: ScoringConfig | None = None,
) -> AnalysisResult:
    """Convenience function to score a normalized batch.

    Args:
        transactions: Normalized transactions.
        scoring: Optional thresholds.

    Returns:
        AnalysisResult.
    """
    return AnomalyPipeline(scoring).analyze(transactions)


def screen_upload(
    headers: list[str],
    rows: list[RawRow],
    scoring: ScoringConfig | None = None,
) -> PipelineResult | ColumnDetectionFailure:
    """Convenience function to run the full pipeline.

    Args:
        headers: Header strings.
        rows: Raw rows.
        scoring: Optional thresholds.

    Returns:
        PipelineResult or ColumnDetectionFailure.
    """
    return AnomalyPipeline(scoring).process(headers, rows)
