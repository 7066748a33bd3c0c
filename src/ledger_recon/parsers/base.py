"""
Shared CSV handling for ledger parsers.
Reads files as text-only DataFrames and resolves configured headers.
"""

from pathlib import Path
from typing import Iterable
import logging

import pandas as pd

from ..utils.exceptions import IOFailureError, MissingHeaderError

logger = logging.getLogger(__name__)


class CsvLedgerParser:
    """
    Base class for parsers that read a ledger CSV into typed records.

    Every cell is read as a string so that amounts reach Money.parse
    untouched by float conversion.
    """

    encoding: str = "utf-8"
    delimiter: str = ","
    column_mappings: dict[str, str] = {}

    def read_frame(self, file_path: Path) -> pd.DataFrame:
        """
        Read a CSV file into a DataFrame of stripped strings.

        Args:
            file_path: Path to the CSV file

        Returns:
            DataFrame with one string column per header

        Raises:
            MissingHeaderError: If the file has no header line
            IOFailureError: If the file cannot be opened or tokenized
        """
        try:
            df = pd.read_csv(
                file_path,
                encoding=self.encoding,
                delimiter=self.delimiter,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                # Extra trailing fields are dropped, never used as the row index
                index_col=False,
            )
        except pd.errors.EmptyDataError as e:
            raise MissingHeaderError("file has no header line", source=str(file_path)) from e
        except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
            logger.error(f"Failed to read CSV file {file_path}: {e}")
            raise IOFailureError(f"failed to read CSV file: {e}", source=str(file_path)) from e

        # Short rows leave NaN in trailing cells
        df = df.fillna("")
        for column in df.columns:
            df[column] = df[column].str.strip()
        return df

    def resolve_columns(
        self,
        df: pd.DataFrame,
        file_path: Path,
        required: Iterable[str],
        optional: Iterable[str] = (),
    ) -> dict[str, str]:
        """
        Map logical field names to the actual DataFrame columns.

        Header names are compared case-insensitively after trimming.

        Args:
            df: DataFrame read from the file
            file_path: Source path, for error context
            required: Logical fields that must be present
            optional: Logical fields that may be absent

        Returns:
            Mapping of logical field name to DataFrame column label

        Raises:
            MissingHeaderError: If any required header is absent
        """
        by_name = {str(col).strip().lower(): col for col in df.columns}

        resolved: dict[str, str] = {}
        missing: list[str] = []

        for logical in required:
            header = self.column_mappings[logical]
            column = by_name.get(header.strip().lower())
            if column is None:
                missing.append(header)
            else:
                resolved[logical] = column

        if missing:
            raise MissingHeaderError(
                f"missing required headers: {', '.join(missing)}",
                source=str(file_path),
            )

        for logical in optional:
            header = self.column_mappings.get(logical)
            if header is None:
                continue
            column = by_name.get(header.strip().lower())
            if column is not None:
                resolved[logical] = column

        return resolved
