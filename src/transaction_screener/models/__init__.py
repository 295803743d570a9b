"""Data models for canonical transactions, column mappings and risk results."""

from transaction_screener.models.mapping import (
    ColumnDetection,
    ColumnDetectionFailure,
    ColumnMapping,
)
from transaction_screener.models.report import (
    AnalysisResult,
    NormalizationStats,
    PipelineResult,
)
from transaction_screener.models.risk import (
    BatchStatistics,
    RiskResult,
    RiskSignal,
    TriggeredSignal,
)
from transaction_screener.models.transaction import (
    CanonicalTransaction,
    RawRow,
    RiskLevel,
    TransactionType,
)

__all__ = [
    "CanonicalTransaction",
    "RawRow",
    "RiskLevel",
    "TransactionType",
    "ColumnMapping",
    "ColumnDetection",
    "ColumnDetectionFailure",
    "BatchStatistics",
    "RiskResult",
    "RiskSignal",
    "TriggeredSignal",
    "AnalysisResult",
    "NormalizationStats",
    "PipelineResult",
]
