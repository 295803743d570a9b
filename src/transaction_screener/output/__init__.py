"""Output generation modules."""

from transaction_screener.output.csv_exporter import CSVExporter

__all__ = ["CSVExporter"]
