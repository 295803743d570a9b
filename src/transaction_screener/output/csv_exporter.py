"""CSV export of scored transactions and batch summaries."""

import csv
from pathlib import Path

from transaction_screener.config import OutputConfig
from transaction_screener.models.report import PipelineResult
from transaction_screener.models.transaction import RiskLevel
from transaction_screener.utils.decimal_utils import format_amount
from transaction_screener.utils.logging_config import get_logger
from transaction_screener.utils.sanitize import sanitize_for_csv

logger = get_logger(__name__)

TRANSACTION_HEADERS = [
    "Date",
    "Amount",
    "Type",
    "Category",
    "Description",
    "Anomaly Score",
    "Risk Level",
    "Risk Factors",
]

FACTOR_SEPARATOR = "; "


class CSVExporter:
    """Writes scored transactions and summaries as spreadsheet-safe CSV."""

    def __init__(self, output_config: OutputConfig | None = None):
        """Initialize CSV exporter.

        Args:
            output_config: Output settings; defaults to OutputConfig().
        """
        self.output_config = output_config or OutputConfig()

    def export(self, output_path: Path, result: PipelineResult) -> Path:
        """Export one row per transaction.

        Args:
            output_path: Destination CSV path (parent directories are created).
            result: Pipeline result to export.

        Returns:
            Path to the created file.
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)

        written = 0
        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(TRANSACTION_HEADERS)

            for txn, risk in zip(result.transactions, result.risk_results):
                if not self.output_config.include_normal and txn.risk_level == RiskLevel.NORMAL:
                    continue
                writer.writerow([
                    txn.date.isoformat(sep=" "),
                    format_amount(txn.amount),
                    txn.transaction_type.value,
                    sanitize_for_csv(txn.category),
                    sanitize_for_csv(txn.description),
                    txn.anomaly_score,
                    txn.risk_level.value,
                    sanitize_for_csv(FACTOR_SEPARATOR.join(risk.risk_factors)),
                ])
                written += 1

        logger.info(f"Exported {written} transactions to {output_path}")
        return output_path

    def export_summary(self, output_path: Path, result: PipelineResult) -> Path:
        """Export row counts, detected columns and the risk distribution.

        Args:
            output_path: Destination CSV path.
            result: Pipeline result to summarize.

        Returns:
            Path to the created file.
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(["Metric", "Value"])
            writer.writerow(["Rows Parsed", result.rows_parsed])
            writer.writerow(["Rows Retained", result.rows_retained])
            writer.writerow(["Rows Skipped", result.skipped_rows])
            for level, count in result.risk_distribution.items():
                writer.writerow([f"Risk: {level}", count])
            for field_name, header in result.columns_detected.items():
                writer.writerow([f"Column: {field_name}", sanitize_for_csv(header)])

        logger.info(f"Exported summary to {output_path}")
        return output_path
