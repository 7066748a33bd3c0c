"""Parsers for system ledger and bank statement files."""

from .bank_parser import BankStatementParser
from .system_parser import SystemLedgerParser

__all__ = ["BankStatementParser", "SystemLedgerParser"]
