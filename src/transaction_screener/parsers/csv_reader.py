"""CSV reader producing headers and raw rows for the pipeline."""

import csv
import io
from pathlib import Path
from typing import Optional

from transaction_screener.models.transaction import RawRow
from transaction_screener.utils.logging_config import get_logger

logger = get_logger(__name__)

# Maximum CSV file size to prevent memory exhaustion (50 MB)
MAX_CSV_FILE_SIZE = 50 * 1024 * 1024

# Maximum number of rows to prevent memory exhaustion from many small rows
MAX_CSV_ROWS = 500_000

SUPPORTED_EXTENSIONS = (".csv", ".tsv", ".txt")

SNIFF_DELIMITERS = ",\t;|"


class ParseError(Exception):
    """Exception raised when a file cannot be read."""

    def __init__(self, message: str, file_path: Optional[Path] = None):
        """Initialize ParseError.

        Args:
            message: Error message.
            file_path: Optional path to the file that failed to parse.
        """
        self.file_path = file_path
        super().__init__(message)


def detect_delimiter(lines: list[str]) -> str:
    """Detect the delimiter from the first lines of a file.

    Args:
        lines: First few lines of the file.

    Returns:
        Detected delimiter character (comma if undecidable).
    """
    sample = "\n".join(lines[:10])
    try:
        return csv.Sniffer().sniff(sample, delimiters=SNIFF_DELIMITERS).delimiter
    except csv.Error:
        pass

    # Fallback: the candidate present on most lines with the highest average count
    best_delimiter = ","
    best_score = 0.0
    for d in SNIFF_DELIMITERS:
        counts = [line.count(d) for line in lines[:10]]
        non_zero = [c for c in counts if c > 0]
        if not non_zero or len(non_zero) <= len(counts) / 2:
            continue
        avg = sum(non_zero) / len(non_zero)
        if avg > best_score:
            best_score = avg
            best_delimiter = d
    return best_delimiter


def _unique_headers(headers: list[str]) -> list[str]:
    """Make header names unique so no column is silently overwritten."""
    seen: dict[str, int] = {}
    unique = []
    for header in headers:
        name = header.strip()
        if name in seen:
            seen[name] += 1
            name = f"{name}_{seen[name]}"
        else:
            seen[name] = 0
        unique.append(name)
    return unique


def read_csv(file_path: Path) -> tuple[list[str], list[RawRow]]:
    """Read a delimited file into headers and raw rows.

    The first non-empty line is the header row. Blank rows are skipped;
    short rows are padded with empty strings.

    Args:
        file_path: Path to the file.

    Returns:
        Tuple of (headers, rows keyed by header).

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ParseError: If the file is too large, has too many rows, or can't be read.
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    if file_path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise ParseError(
            f"Unsupported file type '{file_path.suffix}'. Only CSV files are supported.",
            file_path,
        )

    file_size = file_path.stat().st_size
    if file_size > MAX_CSV_FILE_SIZE:
        raise ParseError(
            f"File too large ({file_size / 1024 / 1024:.1f} MB). "
            f"Maximum allowed is {MAX_CSV_FILE_SIZE / 1024 / 1024:.0f} MB",
            file_path,
        )

    try:
        # utf-8-sig strips the BOM that spreadsheet exports often carry
        with open(file_path, encoding="utf-8-sig", errors="replace", newline="") as f:
            text = f.read()
    except OSError as e:
        raise ParseError(f"Failed to read CSV file: {e}", file_path) from e

    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return [], []

    delimiter = detect_delimiter(lines)
    reader = csv.reader(io.StringIO(text), delimiter=delimiter)

    headers: list[str] = []
    rows: list[RawRow] = []
    try:
        for record in reader:
            if not record or all(cell.strip() == "" for cell in record):
                continue
            if not headers:
                headers = _unique_headers(record)
                continue
            if len(rows) >= MAX_CSV_ROWS:
                raise ParseError(
                    f"File exceeds maximum row limit ({MAX_CSV_ROWS:,} rows). "
                    f"Split file into smaller chunks.",
                    file_path,
                )
            padded = record + [""] * (len(headers) - len(record))
            rows.append(dict(zip(headers, padded)))
    except csv.Error as e:
        raise ParseError(f"Failed to parse CSV file: {e}", file_path) from e

    logger.info(
        f"Read {len(rows)} rows from {file_path.name} "
        f"(delimiter={delimiter!r}, {len(headers)} columns)"
    )
    return headers, rows
