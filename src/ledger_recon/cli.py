"""
Command-line interface for the ledger reconciliation engine.
"""

from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import load_config, generate_default_config
from .matching.engine import ReconciliationEngine
from .models.transaction import ReconciliationReport, Side
from .parsers.ledger_parser import LedgerParser
from .parsers.workbook_splitter import split_workbook
from .reports.csv_export import export_csv
from .reports.excel_generator import ExcelReportGenerator
from .reports.text_report import render_json, render_text
from .utils.exceptions import (
    ConfigurationError,
    InputFileError,
    InternalError,
    ReconciliationError,
)
from .utils.logging_config import setup_logging

console = Console()
err_console = Console(stderr=True)

EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2
EXIT_IO_ERROR = 3
EXIT_INTERNAL_ERROR = 4


@click.group()
@click.version_option(version=__version__)
def main():
    """Credit/debit ledger reconciliation tool."""
    pass


@main.command()
@click.argument("credit_file", type=click.Path(path_type=Path))
@click.argument("debit_file", type=click.Path(path_type=Path))
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option(
    "-t",
    "--threshold",
    default=None,
    help="Maximum amount difference, in ledger currency units",
)
@click.option("-d", "--days", type=int, default=None, help="Maximum date difference in days")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Report format written to stdout",
)
@click.option(
    "--excel",
    type=click.Path(path_type=Path),
    help="Also write an Excel report (file or directory)",
)
@click.option(
    "--export-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Also write matched/unmatched CSV files to this directory",
)
@click.option("--summary", is_flag=True, help="Show a summary table on stderr")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def reconcile(
    credit_file: Path,
    debit_file: Path,
    config: Optional[Path],
    threshold: Optional[str],
    days: Optional[int],
    output_format: str,
    excel: Optional[Path],
    export_dir: Optional[Path],
    summary: bool,
    verbose: bool,
):
    """
    Reconcile a credit ledger against a debit ledger.

    CREDIT_FILE: Path to the credit ledger (id, date, amount)
    DEBIT_FILE: Path to the debit ledger (id, date, amount)
    """
    try:
        recon_config = load_config(config)
        _setup_logging(recon_config, verbose)

        engine = ReconciliationEngine(recon_config)
        report = engine.run(credit_file, debit_file, threshold, days)

        rendered = render_json(report) if output_format == "json" else render_text(report)

        # A failed side output leaves stdout empty
        if excel is not None:
            report_path = ExcelReportGenerator(recon_config).generate_report(report, excel)
            err_console.print(f"[green]Excel report generated: {report_path}[/green]")

        if export_dir is not None:
            export_csv(report, export_dir)
            err_console.print(f"[green]CSV files exported to: {export_dir}[/green]")

        click.echo(rendered, nl=False)

        if summary:
            _display_summary(report)

        if report.has_parse_errors:
            err_console.print(
                f"[yellow]Warning: {len(report.parse_errors)} malformed row(s) "
                "skipped; see Parse Errors[/yellow]"
            )

    except ReconciliationError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        if verbose:
            err_console.print_exception()
        sys.exit(_exit_code(e))


@main.command("parse-ledger")
@click.argument("ledger_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--side",
    type=click.Choice([s.value for s in Side]),
    default=Side.CREDIT.value,
    show_default=True,
)
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def parse_ledger(ledger_file: Path, side: str, config: Optional[Path]):
    """
    Parse a ledger file and display a transaction summary.

    LEDGER_FILE: Path to the ledger file
    """
    try:
        recon_config = load_config(config)
        ledger = LedgerParser(recon_config).parse_file(ledger_file, Side(side))
    except ReconciliationError as e:
        console.print(f"[red]Error parsing file: {e}[/red]")
        sys.exit(_exit_code(e))

    table = Table(title=f"{side.capitalize()} Transactions: {ledger_file.name}")
    table.add_column("Line", justify="right")
    table.add_column("ID")
    table.add_column("Date")
    table.add_column("Amount", justify="right")

    for txn in ledger.transactions[:20]:  # Show first 20
        table.add_row(str(txn.line), txn.id, txn.date.isoformat(), f"{txn.amount:,}")

    console.print(table)

    if len(ledger.transactions) > 20:
        console.print(f"\n... and {len(ledger.transactions) - 20} more transactions")

    console.print(f"\nTotal transactions: {len(ledger.transactions)}")

    if ledger.errors:
        errors = Table(title="Parse Errors")
        errors.add_column("Line", justify="right")
        errors.add_column("Reason")
        for error in ledger.errors:
            errors.add_row(str(error.line), error.reason)
        console.print(errors)


@main.command("split-workbook")
@click.argument("xlsx_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-o",
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
)
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def split_workbook_command(xlsx_file: Path, output_dir: Path, config: Optional[Path]):
    """
    Split a bank-export workbook into credits.csv and debits.csv.

    XLSX_FILE: Path to the exported workbook
    """
    try:
        recon_config = load_config(config)
        credit_csv, debit_csv = split_workbook(xlsx_file, output_dir, recon_config.workbook)
    except ReconciliationError as e:
        console.print(f"[red]Error splitting workbook: {e}[/red]")
        sys.exit(_exit_code(e))

    console.print(f"[green]Credit ledger: {credit_csv}[/green]")
    console.print(f"[green]Debit ledger: {debit_csv}[/green]")


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _setup_logging(recon_config, verbose: bool) -> None:
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(recon_config.logging.level.upper())
        if not isinstance(level, int):
            raise ConfigurationError(f"Unknown logging level: {recon_config.logging.level}")
    log_file = Path(recon_config.logging.file) if recon_config.logging.file else None
    setup_logging(level, log_file=log_file, log_format=recon_config.logging.format)


def _exit_code(error: ReconciliationError) -> int:
    """Distinct exit statuses let callers tell failure kinds apart."""
    if isinstance(error, ConfigurationError):
        return EXIT_CONFIG_ERROR
    if isinstance(error, InputFileError):
        return EXIT_IO_ERROR
    if isinstance(error, InternalError):
        return EXIT_INTERNAL_ERROR
    return EXIT_FAILURE


def _display_summary(report: ReconciliationReport) -> None:
    """Display reconciliation summary on stderr."""
    table = Table(title="Reconciliation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Credits Parsed", str(report.credit_count))
    table.add_row("Debits Parsed", str(report.debit_count))
    table.add_row("Matched Pairs", str(report.matched_count))
    table.add_row("Unmatched Credits", str(report.unmatched_credit_count))
    table.add_row("Unmatched Debits", str(report.unmatched_debit_count))
    table.add_row("Total Reconciled", format(report.total_reconciled, "f"))
    table.add_row("Credit Match Rate", f"{report.match_rate_credits:.1f}%")
    table.add_row("Debit Match Rate", f"{report.match_rate_debits:.1f}%")
    table.add_row("Parse Errors", str(len(report.parse_errors)))

    err_console.print(table)


if __name__ == "__main__":
    main()
