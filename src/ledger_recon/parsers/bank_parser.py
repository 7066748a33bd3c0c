"""
Bank statement CSV parser.
Parses one or more bank exports into typed BankStatement records.
"""

from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Optional
import logging

import pandas as pd

from ..config import ReconConfig
from ..models.money import Money
from ..models.transaction import BankStatement
from ..utils.exceptions import MalformedAmountError, MalformedDateError
from .base import CsvLedgerParser

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("unique_identifier", "amount", "date")
OPTIONAL_FIELDS = ("bank",)


class BankStatementParser(CsvLedgerParser):
    """
    Parser for bank statement CSV files.

    Amounts are signed (negative for debits). The bank name of a row comes
    from its own bank column when present and non-blank, then from the
    caller-supplied name, then from the configured unknown label.
    """

    def __init__(self, config: ReconConfig):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config
        bank_config = config.input.bank
        self.encoding = bank_config.encoding
        self.delimiter = bank_config.delimiter
        self.date_format = bank_config.date_format
        self.unknown_bank_label = bank_config.unknown_bank_label
        self.column_mappings = dict(bank_config.column_mappings)

    def parse_files(self, file_paths: Iterable[Path]) -> list[BankStatement]:
        """
        Parse several bank files, each named after its file stem.

        Files are read one after another so the combined rows keep file
        order then row order.

        Args:
            file_paths: Bank statement CSV paths

        Returns:
            Concatenated statements from all files
        """
        statements: list[BankStatement] = []
        for file_path in file_paths:
            statements.extend(self.parse_file(file_path, bank_name=file_path.stem))
        return statements

    def parse_file(
        self, file_path: Path, bank_name: Optional[str] = None
    ) -> list[BankStatement]:
        """
        Parse a single bank statement CSV file.

        Args:
            file_path: Path to the CSV file
            bank_name: Default bank name for rows without one

        Returns:
            Statements in file order

        Raises:
            ParseError: If the file is unreadable or any row is malformed
        """
        logger.info(f"Parsing bank statement: {file_path}")

        df = self.read_frame(file_path)
        columns = self.resolve_columns(df, file_path, REQUIRED_FIELDS, OPTIONAL_FIELDS)

        default_bank = (bank_name or "").strip() or self.unknown_bank_label

        statements: list[BankStatement] = []
        for row_number, (_, row) in enumerate(df.iterrows(), start=1):
            statements.append(
                self._normalize_row(row, row_number, columns, file_path, default_bank)
            )

        logger.info(f"Extracted {len(statements)} statements from {file_path}")
        return statements

    def _normalize_row(
        self,
        row: pd.Series,
        row_number: int,
        columns: dict[str, str],
        file_path: Path,
        default_bank: str,
    ) -> BankStatement:
        """Convert one DataFrame row into a BankStatement."""
        source = str(file_path)

        amount_col = columns["amount"]
        try:
            amount = Money.parse(row[amount_col])
        except MalformedAmountError as e:
            raise MalformedAmountError(
                e.message, source=source, row=row_number, field=amount_col
            ) from e

        date_col = columns["date"]
        statement_date = self._parse_date(row[date_col], source, row_number, date_col)

        bank = default_bank
        if "bank" in columns and row[columns["bank"]]:
            bank = row[columns["bank"]]

        return BankStatement(
            unique_identifier=row[columns["unique_identifier"]],
            amount=amount,
            date=statement_date,
            bank=bank,
        )

    def _parse_date(self, value: str, source: str, row_number: int, field: str) -> date:
        """
        Parse a calendar date using the configured format.

        Raises:
            MalformedDateError: If the value does not match the format
        """
        try:
            return datetime.strptime(value, self.date_format).date()
        except ValueError as e:
            raise MalformedDateError(
                f"invalid date: {value!r} (expected {self.date_format})",
                source=source,
                row=row_number,
                field=field,
            ) from e
