"""Tests for the end-to-end anomaly pipeline."""

from datetime import datetime
from decimal import Decimal

import pytest

from transaction_screener.models.mapping import ColumnDetectionFailure
from transaction_screener.models.report import PipelineResult
from transaction_screener.models.risk import RiskSignal
from transaction_screener.models.transaction import CanonicalTransaction, RiskLevel
from transaction_screener.processing.normalizer import SKIP_INVALID_DATE, SKIP_ZERO_AMOUNT
from transaction_screener.processing.pipeline import (
    AnomalyPipeline,
    analyze_transactions,
    screen_upload,
)
from transaction_screener.processing.risk_scorer import classify_risk

HEADERS = ["Date", "Description", "Amount", "Category", "Reference"]


def build_statement_rows() -> list[dict[str, str]]:
    """Build 59 routine daytime purchases and one large purchase at 03:00.

    Every row falls in ISO week 2024-W03 and shares one category, so only the
    amount and hour signals can fire.
    """
    rows = []
    for i in range(59):
        amount = "900.00" if i % 2 == 0 else "1,100.00"
        rows.append({
            "Date": f"2024-01-{15 + i % 5:02d} {9 + i % 9:02d}:30:00",
            "Description": f"POS purchase {i}",
            "Amount": f"-{amount}",
            "Category": "Groceries",
            "Reference": f"REF{i:04d}",
        })
    rows.append({
        "Date": "2024-01-16 03:00:00",
        "Description": "Electronics store",
        "Amount": "₹1,900 Dr",
        "Category": "Groceries",
        "Reference": "REF9999",
    })
    return rows


def create_transaction(amount: str, hour: int = 12) -> CanonicalTransaction:
    """Helper to create a CanonicalTransaction for testing."""
    return CanonicalTransaction(date=datetime(2024, 1, 15, hour, 0), amount=Decimal(amount))


@pytest.fixture
def pipeline() -> AnomalyPipeline:
    """Create a sequential pipeline with default thresholds."""
    return AnomalyPipeline()


class TestAnalyze:
    """Tests for AnomalyPipeline.analyze."""

    def test_empty_batch(self, pipeline: AnomalyPipeline) -> None:
        """Test that an empty batch yields an empty result."""
        result = pipeline.analyze([])

        assert result.transactions == []
        assert result.risk_results == []
        assert result.risk_distribution == {"Normal": 0, "Medium": 0, "High": 0}
        assert result.statistics is None

    def test_single_transaction_is_normal(self, pipeline: AnomalyPipeline) -> None:
        """Test that a lone transaction is never scored."""
        txn = create_transaction("99999", hour=3)
        txn.anomaly_score = 77
        txn.risk_level = RiskLevel.HIGH

        result = pipeline.analyze([txn])

        assert txn.anomaly_score == 0
        assert txn.risk_level == RiskLevel.NORMAL
        assert result.risk_results[0].risk_factors == []
        assert result.risk_distribution == {"Normal": 1, "Medium": 0, "High": 0}
        assert result.statistics is None

    def test_transactions_updated_in_place(self, pipeline: AnomalyPipeline) -> None:
        """Test that scores and levels are written back to the transactions."""
        txns = [create_transaction("100") for _ in range(9)] + [create_transaction("100", hour=2)]

        result = pipeline.analyze(txns)

        for txn, risk in zip(txns, result.risk_results):
            assert txn.anomaly_score == risk.anomaly_score
            assert txn.risk_level == risk.risk_level
        assert result.transactions == txns
        assert result.statistics is not None

    def test_distribution_sums_to_batch_size(self, pipeline: AnomalyPipeline) -> None:
        """Test the distribution covers every transaction exactly once."""
        txns = [create_transaction(str(a), hour=h) for a, h in [(10, 9), (20, 10), (5000, 3), (15, 11)]]

        result = pipeline.analyze(txns)

        assert sum(result.risk_distribution.values()) == len(txns)
        for risk in result.risk_results:
            assert risk.anomaly_score == sum(s.points for s in risk.signals)
            assert risk.risk_level == classify_risk(risk.anomaly_score)

    def test_parallel_scoring_matches_sequential(self) -> None:
        """Test that worker threads give the same results in the same order."""
        rows = build_statement_rows()
        sequential = AnomalyPipeline(max_workers=1).process(HEADERS, rows)
        parallel = AnomalyPipeline(max_workers=4).process(HEADERS, rows)

        assert isinstance(sequential, PipelineResult)
        assert isinstance(parallel, PipelineResult)
        assert sequential.risk_results == parallel.risk_results
        assert sequential.risk_distribution == parallel.risk_distribution

    def test_invalid_worker_count(self) -> None:
        """Test that fewer than one worker is rejected."""
        with pytest.raises(ValueError, match="max_workers"):
            AnomalyPipeline(max_workers=0)


class TestProcess:
    """Tests for AnomalyPipeline.process."""

    def test_outlier_flagged_medium(self, pipeline: AnomalyPipeline) -> None:
        """Test that the night-time outlier is the only flagged transaction."""
        result = pipeline.process(HEADERS, build_statement_rows())

        assert isinstance(result, PipelineResult)
        assert result.rows_parsed == 60
        assert result.rows_retained == 60
        assert result.risk_distribution == {"Normal": 59, "Medium": 1, "High": 0}

        outlier = result.transactions[-1]
        risk = result.risk_results[-1]
        assert outlier.amount == Decimal("-1900.00")
        assert outlier.anomaly_score == 55
        assert outlier.risk_level == RiskLevel.MEDIUM
        assert [s.signal for s in risk.signals] == [
            RiskSignal.EXTREME_DEVIATION,
            RiskSignal.UNUSUAL_HOUR,
        ]
        assert risk.risk_factors[0].startswith("Extreme amount deviation (Z=")
        assert risk.risk_factors[1] == "Unusual hour (3:00, outside normal activity)"

        assert all(t.anomaly_score == 0 for t in result.transactions[:-1])
        assert result.analysis.flagged == [(outlier, risk)]

    def test_mapping_reported(self, pipeline: AnomalyPipeline) -> None:
        """Test that detected columns and unmapped headers are exposed."""
        headers = HEADERS + ["Branch"]
        rows = [dict(row, Branch="Main") for row in build_statement_rows()[:3]]
        result = pipeline.process(headers, rows)

        assert isinstance(result, PipelineResult)
        assert result.columns_detected == {
            "date": "Date",
            "amount": "Amount",
            "description": "Description",
            "category": "Category",
            "transactionId": "Reference",
        }
        assert result.unmapped_headers == ["Branch"]
        assert result.has_debit_credit is False
        assert result.transactions[0].metadata["Branch"] == "Main"

    def test_detection_failure_returned(self, pipeline: AnomalyPipeline) -> None:
        """Test that missing required columns short-circuit the run."""
        result = pipeline.process(["Foo", "Bar"], [{"Foo": "1", "Bar": "2"}])

        assert isinstance(result, ColumnDetectionFailure)
        assert result.missing == ["date", "amount (or debit/credit)"]

    def test_skipped_rows_counted(self, pipeline: AnomalyPipeline) -> None:
        """Test that dropped rows are reported by reason."""
        rows = [
            {"Date": "2024-01-15", "Amount": "10"},
            {"Date": "yesterday-ish", "Amount": "10"},
            {"Date": "2024-01-15", "Amount": "0.00"},
        ]
        result = pipeline.process(["Date", "Amount"], rows)

        assert isinstance(result, PipelineResult)
        assert result.rows_parsed == 3
        assert result.rows_retained == 1
        assert result.skipped_rows == 2
        assert result.normalization.skip_reasons == {SKIP_INVALID_DATE: 1, SKIP_ZERO_AMOUNT: 1}
        assert result.risk_distribution["Normal"] == 1

    def test_all_rows_dropped(self, pipeline: AnomalyPipeline) -> None:
        """Test a batch with nothing usable."""
        result = pipeline.process(["Date", "Amount"], [{"Date": "bad", "Amount": "10"}])

        assert isinstance(result, PipelineResult)
        assert result.transactions == []
        assert result.risk_distribution == {"Normal": 0, "Medium": 0, "High": 0}

    def test_oversized_amount_does_not_abort_batch(self, pipeline: AnomalyPipeline) -> None:
        """Test that one overlong amount is skipped and the rest are scored."""
        rows = build_statement_rows()
        rows.insert(3, {"Date": "2024-01-15 10:00:00", "Amount": "9" * 27})

        result = pipeline.process(HEADERS, rows)

        assert isinstance(result, PipelineResult)
        assert result.rows_parsed == 61
        assert result.rows_retained == 60
        assert result.normalization.skip_reasons == {SKIP_ZERO_AMOUNT: 1}
        assert result.risk_distribution == {"Normal": 59, "Medium": 1, "High": 0}

    def test_wire_shape(self, pipeline: AnomalyPipeline) -> None:
        """Test the external dictionary rendering."""
        result = pipeline.process(HEADERS, build_statement_rows())
        assert isinstance(result, PipelineResult)

        data = result.to_dict()

        assert data["success"] is True
        assert data["riskDistribution"] == {"Normal": 59, "Medium": 1, "High": 0}
        assert data["summary"] == {"totalRowsParsed": 60, "totalNormalized": 60, "skippedRows": 0}
        assert data["columnsDetected"]["transactionId"] == "Reference"

        last = data["transactions"][-1]
        assert last["amount"] == "-1900.00"
        assert last["type"] == "debit"
        assert last["anomalyScore"] == 55
        assert last["riskLevel"] == "Medium"
        assert len(last["riskFactors"]) == 2
        assert last["metadata"]["Reference"] == "REF9999"


class TestConvenienceFunctions:
    """Tests for module-level helpers."""

    def test_screen_upload(self) -> None:
        """Test parity with AnomalyPipeline.process."""
        result = screen_upload(HEADERS, build_statement_rows())

        assert isinstance(result, PipelineResult)
        assert result.risk_distribution["Medium"] == 1

    def test_analyze_transactions(self) -> None:
        """Test scoring an already-normalized batch."""
        result = analyze_transactions([create_transaction("10"), create_transaction("20")])

        assert sum(result.risk_distribution.values()) == 2
