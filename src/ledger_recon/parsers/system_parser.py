"""
Internal system ledger parser.
Parses system transaction CSV exports into typed SystemTransaction records.
"""

from datetime import datetime
from pathlib import Path
import logging

import pandas as pd

from ..config import ReconConfig
from ..models.money import Money
from ..models.transaction import SystemTransaction, TransactionType
from ..utils.exceptions import (
    InvalidTypeError,
    MalformedAmountError,
    MalformedTimestampError,
)
from .base import CsvLedgerParser

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("trx_id", "amount", "type", "transaction_time")


class SystemLedgerParser(CsvLedgerParser):
    """
    Parser for the internal system ledger.

    Expects columns trxID, amount, type and transactionTime (names can be
    remapped in configuration). Any malformed row aborts the whole parse.
    """

    def __init__(self, config: ReconConfig):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config
        system_config = config.input.system
        self.encoding = system_config.encoding
        self.delimiter = system_config.delimiter
        self.column_mappings = dict(system_config.column_mappings)

    def parse_file(self, file_path: Path) -> list[SystemTransaction]:
        """
        Parse a system ledger CSV file.

        Args:
            file_path: Path to the CSV file

        Returns:
            Transactions in file order

        Raises:
            ParseError: If the file is unreadable or any row is malformed
        """
        logger.info(f"Parsing system ledger: {file_path}")

        df = self.read_frame(file_path)
        columns = self.resolve_columns(df, file_path, REQUIRED_FIELDS)

        transactions: list[SystemTransaction] = []
        for row_number, (_, row) in enumerate(df.iterrows(), start=1):
            transactions.append(self._normalize_row(row, row_number, columns, file_path))

        logger.info(f"Extracted {len(transactions)} transactions from {file_path}")
        return transactions

    def _normalize_row(
        self,
        row: pd.Series,
        row_number: int,
        columns: dict[str, str],
        file_path: Path,
    ) -> SystemTransaction:
        """Convert one DataFrame row into a SystemTransaction."""
        source = str(file_path)

        amount_col = columns["amount"]
        try:
            amount = Money.parse(row[amount_col])
        except MalformedAmountError as e:
            raise MalformedAmountError(
                e.message, source=source, row=row_number, field=amount_col
            ) from e
        if amount.is_negative:
            raise MalformedAmountError(
                f"amount must be non-negative: {row[amount_col]!r}",
                source=source,
                row=row_number,
                field=amount_col,
            )

        type_col = columns["type"]
        type_value = row[type_col].upper()
        try:
            txn_type = TransactionType(type_value)
        except ValueError as e:
            raise InvalidTypeError(
                f"invalid type: {row[type_col]!r} (expected DEBIT or CREDIT)",
                source=source,
                row=row_number,
                field=type_col,
            ) from e

        time_col = columns["transaction_time"]
        transaction_time = parse_timestamp(row[time_col], source, row_number, time_col)

        return SystemTransaction(
            trx_id=row[columns["trx_id"]],
            amount=amount,
            type=txn_type,
            transaction_time=transaction_time,
        )


def parse_timestamp(value: str, source: str, row_number: int, field: str) -> datetime:
    """
    Parse an RFC 3339 date-time with a UTC offset.

    Raises:
        MalformedTimestampError: If the value is invalid or has no offset
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise MalformedTimestampError(
            f"invalid RFC 3339 timestamp: {value!r}",
            source=source,
            row=row_number,
            field=field,
        ) from e

    if parsed.tzinfo is None:
        raise MalformedTimestampError(
            f"timestamp has no UTC offset: {value!r}",
            source=source,
            row=row_number,
            field=field,
        )

    return parsed
