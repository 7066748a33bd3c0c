"""
Command-line interface for the ledger reconciliation tool.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .config import load_config, generate_default_config, ReconConfig
from .matching.engine import ReconciliationEngine
from .models.transaction import ReconciliationResult
from .parsers.bank_parser import BankStatementParser
from .parsers.system_parser import SystemLedgerParser
from .reports.excel_generator import ExcelReportGenerator
from .reports.summary import build_summary, format_timestamp, render_summary, write_summary
from .utils.exceptions import ReconciliationError
from .utils.logging_config import setup_logging

# stdout is reserved for the JSON summary
console = Console(stderr=True)

DATE_TYPE = click.DateTime(formats=["%Y-%m-%d"])


@click.group()
@click.version_option(version="0.1.0")
def main():
    """System ledger to bank statement reconciliation tool."""
    pass


@main.command()
@click.option(
    "--system",
    "system_file",
    required=True,
    type=click.Path(path_type=Path),
    help="System transaction CSV file path",
)
@click.option(
    "--bank",
    "bank_files",
    required=True,
    help="Comma-separated list of bank statement CSV file paths",
)
@click.option("--start", required=True, type=DATE_TYPE, help="Start date (YYYY-MM-DD) inclusive")
@click.option("--end", required=True, type=DATE_TYPE, help="End date (YYYY-MM-DD) inclusive")
@click.option(
    "--output-json",
    type=click.Path(path_type=Path),
    help="Optional path to write the JSON summary",
)
@click.option("--excel", type=click.Path(path_type=Path), help="Optional Excel report path")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def reconcile(
    system_file: Path,
    bank_files: str,
    start: datetime,
    end: datetime,
    output_json: Optional[Path],
    excel: Optional[Path],
    config: Optional[Path],
    verbose: bool,
):
    """
    Reconcile a system ledger against one or more bank statements.

    The JSON summary is written to stdout and, with --output-json, to a file.
    """
    bank_paths = [Path(p.strip()) for p in bank_files.split(",") if p.strip()]
    if not bank_paths:
        raise click.BadParameter("no bank statement paths given", param_hint="--bank")

    window_start = start.date()
    window_end = end.date()

    try:
        recon_config = load_config(config)
        _setup_logging(recon_config, verbose)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Parsing system ledger...", total=None)
            system_transactions = SystemLedgerParser(recon_config).parse_file(system_file)
            progress.update(task, completed=True)

            task = progress.add_task("Parsing bank statements...", total=None)
            bank_statements = BankStatementParser(recon_config).parse_files(bank_paths)
            progress.update(task, completed=True)

            task = progress.add_task("Running reconciliation...", total=None)
            result = ReconciliationEngine().reconcile(
                system_transactions, bank_statements, window_start, window_end
            )
            progress.update(task, completed=True)

        _display_summary(result)

        summary = build_summary(result)
        indent = recon_config.output.json_summary.indent
        click.echo(render_summary(summary, indent), nl=False)

        if output_json is not None:
            write_summary(summary, output_json, indent)
            console.print(f"[green]Summary written: {escape(str(output_json))}[/green]")

        if excel is not None:
            report_path = ExcelReportGenerator(recon_config).generate_report(
                result=result,
                output_path=excel,
                window_start=window_start,
                window_end=window_end,
                system_file=system_file.name,
                bank_files=[p.name for p in bank_paths],
            )
            console.print(f"[green]Report generated: {escape(str(report_path))}[/green]")

    except ReconciliationError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command("parse-system")
@click.argument("system_file", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def parse_system(system_file: Path, config: Optional[Path]):
    """
    Parse a system ledger CSV and display a transaction summary.

    SYSTEM_FILE: Path to the system transaction CSV
    """
    try:
        recon_config = load_config(config)
        transactions = SystemLedgerParser(recon_config).parse_file(system_file)
    except ReconciliationError as e:
        console.print(f"[red]Error parsing file: {escape(str(e))}[/red]")
        sys.exit(1)

    table = Table(title=f"System Transactions: {system_file.name}")
    table.add_column("Transaction Time")
    table.add_column("ID")
    table.add_column("Amount", justify="right")
    table.add_column("Type")

    for txn in transactions[:20]:  # Show first 20
        table.add_row(
            format_timestamp(txn.transaction_time),
            txn.trx_id,
            str(txn.amount),
            txn.type.value,
        )

    console.print(table)

    if len(transactions) > 20:
        console.print(f"\n... and {len(transactions) - 20} more transactions")

    console.print(f"\nTotal transactions: {len(transactions)}")


@main.command("parse-bank")
@click.argument("bank_file", type=click.Path(exists=True, path_type=Path))
@click.option("--bank-name", default=None, help="Bank name for rows without one")
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def parse_bank(bank_file: Path, bank_name: Optional[str], config: Optional[Path]):
    """
    Parse a bank statement CSV and display a statement summary.

    BANK_FILE: Path to the bank statement CSV
    """
    try:
        recon_config = load_config(config)
        statements = BankStatementParser(recon_config).parse_file(
            bank_file, bank_name=bank_name if bank_name is not None else bank_file.stem
        )
    except ReconciliationError as e:
        console.print(f"[red]Error parsing file: {escape(str(e))}[/red]")
        sys.exit(1)

    table = Table(title=f"Bank Statements: {bank_file.name}")
    table.add_column("Date")
    table.add_column("ID")
    table.add_column("Amount", justify="right")
    table.add_column("Bank")

    for statement in statements[:20]:  # Show first 20
        table.add_row(
            statement.date.isoformat(),
            statement.unique_identifier,
            str(statement.amount),
            statement.bank,
        )

    console.print(table)

    if len(statements) > 20:
        console.print(f"\n... and {len(statements) - 20} more statements")

    console.print(f"\nTotal statements: {len(statements)}")


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {escape(str(output))}[/green]")


def _setup_logging(config: ReconConfig, verbose: bool) -> None:
    """Configure logging from settings, with --verbose forcing DEBUG."""
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(config.logging.level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    log_file = Path(config.logging.file) if config.logging.file else None
    setup_logging(level, log_file=log_file, log_format=config.logging.format)


def _display_summary(result: ReconciliationResult) -> None:
    """Display reconciliation summary in console."""
    table = Table(title="Reconciliation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total System Transactions", str(result.total_system_transactions))
    table.add_row("Total Bank Transactions", str(result.total_bank_transactions))
    table.add_row("Total Processed", str(result.total_processed))
    table.add_row("Matched", str(result.matched_count))
    table.add_row("Unmatched System", str(len(result.unmatched_system)))
    table.add_row("Unmatched Bank", str(result.unmatched_bank_count))
    table.add_row("System Match Rate", f"{result.match_rate_system:.1f}%")
    table.add_row("Bank Match Rate", f"{result.match_rate_bank:.1f}%")
    table.add_row("Total Discrepancy", str(result.total_discrepancy))

    console.print(table)


if __name__ == "__main__":
    main()
