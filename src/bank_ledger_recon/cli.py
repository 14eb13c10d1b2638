"""
Command-line interface for the bank to ledger reconciliation tool.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .config import MAX_TOLERANCE_DAYS, ReconConfig, generate_default_config, load_config
from .models.transaction import ReconciliationResult, ReconciliationStrategy
from .parsers.bank_csv_parser import BankCsvParser
from .parsers.ledger_csv_parser import LedgerCsvParser
from .parsers.mapping_loader import load_category_mappings
from .reports.excel_generator import ExcelReportGenerator
from .service import run_reconciliation
from .utils.exceptions import ReconciliationError
from .utils.logging_config import setup_logging

console = Console()

PREVIEW_ROWS = 20


@click.group()
@click.version_option(version="0.1.0")
def main():
    """Bank to budgeting-ledger reconciliation tool."""
    pass


@main.command()
@click.argument("bank_file", type=click.Path(exists=True, path_type=Path))
@click.argument("ledger_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-m",
    "--mappings",
    type=click.Path(exists=True, path_type=Path),
    help="Category mapping catalog (YAML)",
)
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output Excel file path")
@click.option(
    "--tolerance-days",
    type=click.IntRange(min=0, max=MAX_TOLERANCE_DAYS),
    default=None,
    help="Override date tolerance",
)
@click.option(
    "--strategy",
    type=click.Choice([s.value for s in ReconciliationStrategy]),
    default=None,
    help="Override matching strategy",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--dry-run", is_flag=True, help="Show summary without generating report")
def reconcile(
    bank_file: Path,
    ledger_file: Path,
    mappings: Optional[Path],
    config: Optional[Path],
    output: Optional[Path],
    tolerance_days: Optional[int],
    strategy: Optional[str],
    verbose: bool,
    dry_run: bool,
):
    """
    Find bank transactions missing from the ledger and guess their categories.

    BANK_FILE: Path to the bank transaction CSV export
    LEDGER_FILE: Path to the budgeting ledger CSV export
    """
    setup_logging(logging.DEBUG if verbose else logging.INFO)

    try:
        recon_config = load_config(config)
        setup_logging(
            logging.DEBUG if verbose else recon_config.logging.level,
            log_format=recon_config.logging.format,
        )
        if tolerance_days is not None:
            recon_config.matching.tolerance_days = tolerance_days
        if strategy is not None:
            recon_config.matching.strategy = ReconciliationStrategy(strategy)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Parsing bank CSV...", total=None)
            bank_transactions = BankCsvParser(recon_config).parse_file(bank_file)
            progress.update(task, completed=True)

            task = progress.add_task("Parsing ledger CSV...", total=None)
            ledger_transactions = LedgerCsvParser(recon_config).parse_file(ledger_file)
            progress.update(task, completed=True)

            category_mappings = load_category_mappings(mappings) if mappings else ()

            task = progress.add_task("Running reconciliation...", total=None)
            result = run_reconciliation(
                bank_transactions, ledger_transactions, category_mappings, recon_config
            )
            progress.update(task, completed=True)

        _display_summary(result)
        _display_missing(result)

        if dry_run:
            console.print("\n[yellow]Dry run - no report generated[/yellow]")
            return

        if output is None:
            now = datetime.now()
            output = Path(
                recon_config.output.excel.filename_template.format(
                    date=now.strftime("%Y%m%d"), time=now.strftime("%H%M%S")
                )
            )

        report_path = ExcelReportGenerator(recon_config).generate_report(result, output)
        console.print(f"\n[green]Report generated: {report_path}[/green]")

    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command("parse-bank")
@click.argument("bank_file", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def parse_bank(bank_file: Path, config: Optional[Path]):
    """
    Parse a bank CSV file and display a transaction preview.

    BANK_FILE: Path to the bank transaction CSV export
    """
    try:
        transactions = BankCsvParser(load_config(config)).parse_file(bank_file)
    except ReconciliationError as e:
        console.print(f"[red]Error parsing file: {e}[/red]")
        sys.exit(1)

    table = Table(title=f"Bank Transactions: {bank_file.name}")
    table.add_column("ID")
    table.add_column("Account")
    table.add_column("Date")
    table.add_column("Amount", justify="right")
    table.add_column("Name")

    for txn in transactions[:PREVIEW_ROWS]:
        table.add_row(
            txn.id, txn.account_id, str(txn.date), f"{txn.amount:,.2f}", _truncate(txn.display_name)
        )

    console.print(table)
    _print_remaining(len(transactions))


@main.command("parse-ledger")
@click.argument("ledger_file", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def parse_ledger(ledger_file: Path, config: Optional[Path]):
    """
    Parse a ledger CSV file and display a transaction preview.

    LEDGER_FILE: Path to the budgeting ledger CSV export
    """
    try:
        transactions = LedgerCsvParser(load_config(config)).parse_file(ledger_file)
    except ReconciliationError as e:
        console.print(f"[red]Error parsing file: {e}[/red]")
        sys.exit(1)

    table = Table(title=f"Ledger Transactions: {ledger_file.name}")
    table.add_column("ID")
    table.add_column("Account")
    table.add_column("Date")
    table.add_column("Amount", justify="right")
    table.add_column("Payee")
    table.add_column("Category")

    for txn in transactions[:PREVIEW_ROWS]:
        table.add_row(
            txn.id,
            txn.account_id,
            str(txn.date),
            f"{txn.amount:,.2f}",
            _truncate(txn.display_name),
            txn.category.name,
        )

    console.print(table)
    _print_remaining(len(transactions))


@main.command("init-config")
@click.option("-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml"))
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _truncate(text: str, width: int = 40) -> str:
    return text[:width] + "..." if len(text) > width else text


def _print_remaining(total: int) -> None:
    if total > PREVIEW_ROWS:
        console.print(f"\n... and {total - PREVIEW_ROWS} more transactions")
    console.print(f"\nTotal transactions: {total}")


def _display_summary(result: ReconciliationResult) -> None:
    """Display reconciliation summary in console."""
    summary = result.summary
    table = Table(title="Reconciliation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Strategy", f"{summary.strategy.value} ({summary.tolerance_days} day(s))")
    table.add_row("Total Bank Transactions", str(summary.total_bank_transactions))
    table.add_row("Total Ledger Transactions", str(summary.total_ledger_transactions))
    table.add_row("Matched", str(summary.matched_count))
    table.add_row("Missing From Ledger", str(summary.missing_from_ledger_count))
    table.add_row("Categorized", str(summary.categorized_count))
    table.add_row("Reconciled", f"{summary.reconciliation_percentage:.1f}%")
    table.add_row("Processing Time", f"{summary.processing_time_seconds:.2f}s")

    console.print(table)


def _display_missing(result: ReconciliationResult) -> None:
    if not result.categorized:
        return

    table = Table(title="Missing From Ledger")
    table.add_column("ID")
    table.add_column("Date")
    table.add_column("Amount", justify="right")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Confidence", justify="right")

    for item in result.categorized[:PREVIEW_ROWS]:
        txn = item.transaction
        table.add_row(
            txn.id,
            str(txn.date),
            f"{txn.amount:,.2f}",
            _truncate(txn.display_name),
            item.category.name,
            f"{item.inference.confidence:.2f}",
        )

    console.print(table)


if __name__ == "__main__":
    main()
