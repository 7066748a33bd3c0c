"""Data models for reconciliation."""

from .money import Money
from .transaction import (
    BankStatement,
    MatchResult,
    ReconciliationResult,
    SystemTransaction,
    TransactionType,
)

__all__ = [
    "Money",
    "BankStatement",
    "MatchResult",
    "ReconciliationResult",
    "SystemTransaction",
    "TransactionType",
]
