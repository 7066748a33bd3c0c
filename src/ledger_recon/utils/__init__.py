"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    ParseError,
    MissingHeaderError,
    MalformedAmountError,
    MalformedDateError,
    MalformedTimestampError,
    InvalidTypeError,
    IOFailureError,
    ConfigurationError,
    ReportGenerationError,
)
from .logging_config import setup_logging

__all__ = [
    "ReconciliationError",
    "ParseError",
    "MissingHeaderError",
    "MalformedAmountError",
    "MalformedDateError",
    "MalformedTimestampError",
    "InvalidTypeError",
    "IOFailureError",
    "ConfigurationError",
    "ReportGenerationError",
    "setup_logging",
]
