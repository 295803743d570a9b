"""Command-line interface for the transaction screener."""

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from transaction_screener import __version__
from transaction_screener.config import Config, ConfigError, load_config
from transaction_screener.models.mapping import ColumnDetectionFailure
from transaction_screener.models.report import PipelineResult
from transaction_screener.utils.logging_config import get_logger, setup_logging

# Load environment variables from .env file (if it exists)
load_dotenv()

console = Console()
logger = get_logger(__name__)

RISK_STYLES = {"Normal": "green", "Medium": "yellow", "High": "red"}


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="transaction-screener",
        description=(
            "Detect columns in a transaction export, normalize every row and "
            "score each transaction for statistical anomalies"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s statement.csv
  %(prog)s statement.csv -o scored.csv --summary summary.csv
  %(prog)s statement.csv --json > result.json
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "input",
        type=Path,
        help="CSV file with a header row",
    )

    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Write scored transactions to this CSV file",
    )

    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        metavar="FILE",
        help="Write row counts and risk distribution to this CSV file",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to settings.yaml (default: config/settings.yaml)",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full result as JSON instead of tables",
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Threads used for scoring (default: 1)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase output verbosity (-v, -vv)",
    )

    return parser


def get_log_level(verbosity: int) -> str:
    """Convert verbosity count to log level.

    Args:
        verbosity: Number of -v flags.

    Returns:
        Log level string.
    """
    if verbosity >= 2:
        return "DEBUG"
    elif verbosity >= 1:
        return "INFO"
    else:
        return "WARNING"


def display_detection_failure(failure: ColumnDetectionFailure) -> None:
    """Show which required columns are missing and how to fix it."""
    console.print(f"[red]Error: {failure.error}[/red]")
    console.print(f"  Missing: {', '.join(failure.missing)}")
    console.print(f"  Detected headers: {', '.join(failure.detected_headers) or '(none)'}")
    console.print(f"\n[dim]{failure.suggestion}[/dim]")


def display_summary(result: PipelineResult) -> None:
    """Display row counts, detected columns and the risk distribution.

    Args:
        result: Pipeline result.
    """
    console.print("\n[bold]Processing Summary[/bold]")
    console.print(f"  Rows parsed: {result.rows_parsed}")
    console.print(f"  Transactions retained: {result.rows_retained}")
    console.print(f"  Rows skipped: {result.skipped_rows}")
    for reason, count in result.normalization.skip_reasons.items():
        console.print(f"    - {reason.replace('_', ' ')}: {count}")

    console.print("\n[bold]Columns Detected[/bold]")
    for field_name, header in result.columns_detected.items():
        console.print(f"  {field_name}: {header}")
    if result.unmapped_headers:
        console.print(f"  [dim]Unmapped: {', '.join(result.unmapped_headers)}[/dim]")

    console.print("\n[bold]Risk Distribution[/bold]")
    for level, count in result.risk_distribution.items():
        console.print(f"  [{RISK_STYLES[level]}]{level}[/{RISK_STYLES[level]}]: {count}")


def display_flagged(result: PipelineResult, limit: int) -> None:
    """Display the highest-scoring transactions.

    Args:
        result: Pipeline result.
        limit: Maximum number of rows to show.
    """
    flagged = result.analysis.flagged
    if not flagged or limit <= 0:
        return

    table = Table(title=f"Top flagged transactions ({min(limit, len(flagged))} of {len(flagged)})")
    table.add_column("Date")
    table.add_column("Amount", justify="right")
    table.add_column("Category")
    table.add_column("Description", overflow="fold")
    table.add_column("Score", justify="right")
    table.add_column("Risk")
    table.add_column("Factors", overflow="fold")

    for txn, risk in flagged[:limit]:
        level = risk.risk_level.value
        table.add_row(
            txn.date.strftime("%Y-%m-%d %H:%M"),
            f"{txn.amount:,.2f}",
            txn.category,
            txn.description,
            str(risk.anomaly_score),
            f"[{RISK_STYLES[level]}]{level}[/{RISK_STYLES[level]}]",
            "\n".join(risk.risk_factors),
        )

    console.print()
    console.print(table)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config: Config = load_config(args.config)
    except (ConfigError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    log_level = get_log_level(args.verbose) if args.verbose else config.logging.level
    setup_logging(level=log_level, log_file=config.logging.file, console_output=args.verbose > 0)
    logger.info(f"Transaction Screener v{__version__} starting: {args.input}")

    if args.workers < 1:
        console.print("[red]Error: --workers must be at least 1[/red]")
        return 1

    from transaction_screener.output import CSVExporter
    from transaction_screener.parsers import ParseError, read_csv
    from transaction_screener.processing import AnomalyPipeline

    try:
        headers, rows = read_csv(args.input)
    except (FileNotFoundError, ParseError) as e:
        logger.error(f"Failed to read {args.input}: {e}")
        console.print(f"[red]Error: {e}[/red]")
        return 1

    if not rows:
        console.print("[red]Error: CSV file is empty or contains no valid data rows.[/red]")
        return 1

    pipeline = AnomalyPipeline(scoring=config.scoring, max_workers=args.workers)
    if args.json:
        result = pipeline.process(headers, rows)
    else:
        with console.status("[bold green]Screening transactions..."):
            result = pipeline.process(headers, rows)

    if isinstance(result, ColumnDetectionFailure):
        if args.json:
            print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        else:
            display_detection_failure(result)
        return 1

    if not result.transactions:
        console.print(
            "[red]Error: No valid transactions could be extracted. "
            "Rows may have invalid dates or zero amounts.[/red]"
        )
        console.print(f"  Rows parsed: {result.rows_parsed}")
        return 1

    exporter = CSVExporter(config.output)
    if args.output:
        exporter.export(args.output, result)
    if args.summary:
        exporter.export_summary(args.summary, result)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return 0

    console.print(f"[bold]Transaction Screener v{__version__}[/bold]")
    console.print(f"Input file: {args.input}")
    display_summary(result)
    display_flagged(result, config.output.top_flagged)
    if args.output:
        console.print(f"\n[green]Scored transactions written to {args.output}[/green]")
    if args.summary:
        console.print(f"[green]Summary written to {args.summary}[/green]")

    return 0


if __name__ == "__main__":
    sys.exit(main())
