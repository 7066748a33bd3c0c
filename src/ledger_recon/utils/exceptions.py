"""Custom exceptions for the reconciliation application."""

from typing import Optional


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class ParseError(ReconciliationError):
    """
    Error turning raw ledger input into typed records.

    Carries enough context (source path, 1-based data row, field name)
    to locate the offending cell.
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        row: Optional[int] = None,
        field: Optional[str] = None,
    ):
        self.message = message
        self.source = source
        self.row = row
        self.field = field
        super().__init__(self._format())

    def _format(self) -> str:
        location = []
        if self.source:
            location.append(str(self.source))
        if self.row is not None:
            location.append(f"row {self.row}")
        if self.field:
            location.append(f"field '{self.field}'")
        if not location:
            return self.message
        return f"{', '.join(location)}: {self.message}"


class MissingHeaderError(ParseError):
    """Required column header is absent."""

    pass


class MalformedAmountError(ParseError):
    """Amount is not a valid decimal string."""

    pass


class MalformedDateError(ParseError):
    """Date is not a valid YYYY-MM-DD calendar date."""

    pass


class MalformedTimestampError(ParseError):
    """Timestamp is not a valid offset-bearing RFC 3339 date-time."""

    pass


class InvalidTypeError(ParseError):
    """Transaction type is neither DEBIT nor CREDIT."""

    pass


class IOFailureError(ParseError):
    """Ledger file could not be opened or read."""

    pass


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    pass


class ReportGenerationError(ReconciliationError):
    """Error writing the JSON summary or Excel report."""

    pass
