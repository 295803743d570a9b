"""Transaction screening pipeline components."""

from transaction_screener.processing.column_mapper import (
    ColumnMapper,
    detect_columns,
)
from transaction_screener.processing.normalizer import (
    RowNormalizer,
    normalize_rows,
)
from transaction_screener.processing.statistics import compute_batch_statistics
from transaction_screener.processing.risk_scorer import (
    RiskScorer,
    calculate_risk,
    classify_risk,
)
from transaction_screener.processing.pipeline import (
    AnomalyPipeline,
    analyze_transactions,
    screen_upload,
)

__all__ = [
    "ColumnMapper",
    "detect_columns",
    "RowNormalizer",
    "normalize_rows",
    "compute_batch_statistics",
    "RiskScorer",
    "calculate_risk",
    "classify_risk",
    "AnomalyPipeline",
    "analyze_transactions",
    "screen_upload",
]
