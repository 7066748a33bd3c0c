"""
JSON summary output for reconciliation results.
Money is always rendered as a two-decimal string, never as a float.
"""

from datetime import datetime, timedelta
from pathlib import Path
from typing import Any
import json
import logging

from ..models.transaction import BankStatement, ReconciliationResult, SystemTransaction
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)


def format_timestamp(value: datetime) -> str:
    """Render an aware datetime as RFC 3339, using Z for a zero offset."""
    text = value.isoformat(timespec="seconds")
    if value.utcoffset() == timedelta(0):
        text = text[: -len("+00:00")] + "Z"
    return text


def _system_row(txn: SystemTransaction) -> dict[str, str]:
    return {
        "trxID": txn.trx_id,
        "amount": str(txn.amount),
        "type": txn.type.value,
        "transactionTime": format_timestamp(txn.transaction_time),
    }


def _bank_row(statement: BankStatement) -> dict[str, str]:
    return {
        "unique_identifier": statement.unique_identifier,
        "amount": str(statement.amount),
        "date": statement.date.isoformat(),
        "bank": statement.bank,
    }


def build_summary(result: ReconciliationResult) -> dict[str, Any]:
    """
    Shape a reconciliation result into a JSON-serializable summary.

    Args:
        result: Reconciliation result

    Returns:
        Ordered dictionary of summary fields
    """
    return {
        "total_system_transactions": result.total_system_transactions,
        "total_bank_transactions": result.total_bank_transactions,
        "total_processed": result.total_processed,
        "matched_count": result.matched_count,
        "unmatched_total": result.unmatched_total,
        "unmatched_system": [_system_row(t) for t in result.unmatched_system],
        "unmatched_bank_by_name": {
            bank: [_bank_row(s) for s in statements]
            for bank, statements in result.unmatched_bank_by_name.items()
        },
        "total_discrepancy": str(result.total_discrepancy),
    }


def render_summary(summary: dict[str, Any], indent: int = 2) -> str:
    """Serialize a summary to JSON text with a trailing newline."""
    return json.dumps(summary, indent=indent) + "\n"


def write_summary(summary: dict[str, Any], output_path: Path, indent: int = 2) -> Path:
    """
    Write a summary to a JSON file.

    Args:
        summary: Summary from build_summary
        output_path: Destination file
        indent: JSON indentation

    Returns:
        Path to the written file

    Raises:
        ReportGenerationError: If the file cannot be written
    """
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(render_summary(summary, indent), encoding="utf-8")
    except OSError as e:
        raise ReportGenerationError(f"Failed to write summary to {output_path}: {e}") from e

    logger.info(f"Summary saved: {output_path}")
    return output_path
