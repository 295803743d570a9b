"""Tests for keyword-based column detection."""

import pytest

from transaction_screener.models.mapping import ColumnDetection, ColumnDetectionFailure
from transaction_screener.processing.column_mapper import (
    EXACT_MATCH_SCORE,
    PREFIX_MATCH_SCORE,
    SUBSTRING_MATCH_SCORE,
    ColumnMapper,
    detect_columns,
    keyword_score,
)


@pytest.fixture
def mapper() -> ColumnMapper:
    """Create a mapper with the default keyword lists."""
    return ColumnMapper()


class TestKeywordScore:
    """Tests for keyword_score."""

    def test_exact_match(self) -> None:
        """Test exact matches score highest, reduced by keyword index."""
        assert keyword_score("date", "date", 0) == EXACT_MATCH_SCORE
        assert keyword_score("txn date", "txn date", 15) == EXACT_MATCH_SCORE - 15

    def test_prefix_match(self) -> None:
        """Test keyword followed by an underscore or space."""
        assert keyword_score("date_posted", "date", 0) == PREFIX_MATCH_SCORE
        assert keyword_score("amount inr", "amount", 0) == PREFIX_MATCH_SCORE

    def test_prefix_requires_separator(self) -> None:
        """Test that a bare prefix is not a prefix match."""
        assert keyword_score("dates", "date", 0) == SUBSTRING_MATCH_SCORE

    def test_substring_match(self) -> None:
        """Test long keywords match anywhere in the header."""
        assert keyword_score("transaction date", "date", 0) == SUBSTRING_MATCH_SCORE

    def test_short_keywords_never_substring(self) -> None:
        """Test that 'dr', 'cr' and 'id' do not match inside other words."""
        assert keyword_score("address", "dr", 6) == 0
        assert keyword_score("description", "cr", 6) == 0
        assert keyword_score("paid by", "id", 15) == 0

    def test_short_keyword_prefix_allowed(self) -> None:
        """Test that short keywords still match as a prefix."""
        assert keyword_score("dr amount", "dr", 6) == PREFIX_MATCH_SCORE - 6

    def test_no_match(self) -> None:
        """Test unrelated header."""
        assert keyword_score("balance", "amount", 0) == 0


class TestColumnMapper:
    """Tests for ColumnMapper.detect."""

    def test_simple_layout(self, mapper: ColumnMapper) -> None:
        """Test a plain date/description/amount/category export."""
        result = mapper.detect(["Date", "Description", "Amount", "Category"])

        assert isinstance(result, ColumnDetection)
        assert result.success is True
        assert result.mapping.date == "Date"
        assert result.mapping.amount == "Amount"
        assert result.mapping.description == "Description"
        assert result.mapping.category == "Category"
        assert result.has_debit_credit is False
        assert result.unmapped == []

    def test_original_header_text_preserved(self, mapper: ColumnMapper) -> None:
        """Test that matching is case-insensitive but mappings keep the source text."""
        result = mapper.detect(["  Transaction Date ", "AMOUNT"])

        assert isinstance(result, ColumnDetection)
        assert result.mapping.date == "  Transaction Date "
        assert result.mapping.amount == "AMOUNT"

    def test_bank_debit_credit_layout(self, mapper: ColumnMapper) -> None:
        """Test a withdrawal/deposit statement layout."""
        headers = ["Txn Date", "Narration", "Withdrawal Amt", "Deposit Amt", "Closing Balance"]
        result = mapper.detect(headers)

        assert isinstance(result, ColumnDetection)
        assert result.mapping.date == "Txn Date"
        assert result.mapping.description == "Narration"
        assert result.mapping.debit == "Withdrawal Amt"
        assert result.mapping.credit == "Deposit Amt"
        assert result.mapping.amount is None
        assert result.has_debit_credit is True
        assert result.unmapped == ["Closing Balance"]

    def test_single_debit_column_enables_debit_credit_mode(self, mapper: ColumnMapper) -> None:
        """Test that one of debit/credit is enough for debit/credit mode."""
        result = mapper.detect(["Date", "Debit", "Details"])

        assert isinstance(result, ColumnDetection)
        assert result.mapping.debit == "Debit"
        assert result.mapping.credit is None
        assert result.has_debit_credit is True

    def test_short_keywords_do_not_steal_headers(self, mapper: ColumnMapper) -> None:
        """Test that 'cr' and 'id' do not claim Description or Paid By."""
        result = mapper.detect(["Date", "Amount", "Description", "Paid By"])

        assert isinstance(result, ColumnDetection)
        assert result.mapping.credit is None
        assert result.mapping.transaction_id is None
        assert result.has_debit_credit is False
        assert "Paid By" in result.unmapped

    def test_transaction_id_prefix(self, mapper: ColumnMapper) -> None:
        """Test that ID_Number maps to the transaction id via prefix match."""
        result = mapper.detect(["Date", "Amount", "ID_Number"])

        assert isinstance(result, ColumnDetection)
        assert result.mapping.transaction_id == "ID_Number"
        assert result.mapping.to_dict()["transactionId"] == "ID_Number"

    def test_higher_priority_keyword_wins(self, mapper: ColumnMapper) -> None:
        """Test that an exact 'amount' beats an exact 'transaction amount'."""
        result = mapper.detect(["Date", "Transaction Amount", "Amount"])

        assert isinstance(result, ColumnDetection)
        assert result.mapping.amount == "Amount"
        assert result.unmapped == ["Transaction Amount"]

    def test_first_header_wins_ties(self, mapper: ColumnMapper) -> None:
        """Test that equal scores resolve to the earliest header."""
        result = mapper.detect(["Date of Txn", "Date Posted", "Amount"])

        assert isinstance(result, ColumnDetection)
        assert result.mapping.date == "Date of Txn"
        assert "Date Posted" in result.unmapped

    def test_earlier_field_claims_contested_header(self, mapper: ColumnMapper) -> None:
        """Test greedy assignment: amount is assigned before debit."""
        result = mapper.detect(["Date", "Amount Debit"])

        assert isinstance(result, ColumnDetection)
        assert result.mapping.amount == "Amount Debit"
        assert result.mapping.debit is None
        assert result.has_debit_credit is False

    def test_each_header_used_once(self, mapper: ColumnMapper) -> None:
        """Test that no header is assigned to two fields."""
        headers = ["Date", "Value Date", "Amount", "Debit", "Credit", "Remarks", "Type", "Ref No"]
        result = mapper.detect(headers)

        assert isinstance(result, ColumnDetection)
        mapped = result.mapping.mapped_headers()
        assert len(mapped) == len(set(mapped))
        assert sorted(mapped + result.unmapped) == sorted(headers)

    def test_detection_is_deterministic(self, mapper: ColumnMapper) -> None:
        """Test that repeated detection gives identical results."""
        headers = ["Posting Date", "Memo", "Money Out", "Money In", "Channel"]
        assert mapper.detect(headers) == mapper.detect(headers)


class TestDetectionFailure:
    """Tests for missing required columns."""

    def test_missing_date(self, mapper: ColumnMapper) -> None:
        """Test that a missing date column fails detection."""
        result = mapper.detect(["Amount", "Description"])

        assert isinstance(result, ColumnDetectionFailure)
        assert result.success is False
        assert result.missing == ["date"]

    def test_missing_amount(self, mapper: ColumnMapper) -> None:
        """Test that no amount, debit or credit column fails detection."""
        result = mapper.detect(["Date", "Description"])

        assert isinstance(result, ColumnDetectionFailure)
        assert result.missing == ["amount (or debit/credit)"]

    def test_both_missing(self, mapper: ColumnMapper) -> None:
        """Test that both missing fields are reported in order."""
        result = mapper.detect(["Foo", "Bar"])

        assert isinstance(result, ColumnDetectionFailure)
        assert result.missing == ["date", "amount (or debit/credit)"]
        assert result.detected_headers == ["Foo", "Bar"]

    def test_empty_headers(self, mapper: ColumnMapper) -> None:
        """Test that an empty header row fails detection."""
        result = mapper.detect([])

        assert isinstance(result, ColumnDetectionFailure)
        assert result.detected_headers == []

    def test_failure_wire_shape(self, mapper: ColumnMapper) -> None:
        """Test the external error dictionary."""
        data = mapper.detect(["Foo"]).to_dict()  # type: ignore[union-attr]

        assert data["success"] is False
        assert data["error"] == "Required columns not found"
        assert data["detectedHeaders"] == ["Foo"]
        assert "date and amount (or debit/credit)" in data["suggestion"]


class TestDetectColumns:
    """Tests for the detect_columns convenience function."""

    def test_uses_default_keywords(self) -> None:
        """Test parity with a default ColumnMapper."""
        headers = ["Date", "Amount"]
        assert detect_columns(headers) == ColumnMapper().detect(headers)

    def test_custom_keywords(self) -> None:
        """Test a mapper built with custom keyword lists."""
        mapper = ColumnMapper({"date": ["fecha"], "amount": ["importe"]})
        result = mapper.detect(["Fecha", "Importe"])

        assert isinstance(result, ColumnDetection)
        assert result.mapping.date == "Fecha"
        assert result.mapping.amount == "Importe"
