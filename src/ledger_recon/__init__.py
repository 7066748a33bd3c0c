"""Reconcile a system transaction ledger against bank statement exports."""

from .matching.engine import ReconciliationEngine, reconcile
from .models.money import Money
from .models.transaction import (
    BankStatement,
    ReconciliationResult,
    SystemTransaction,
    TransactionType,
)

__version__ = "0.1.0"

__all__ = [
    "ReconciliationEngine",
    "reconcile",
    "Money",
    "BankStatement",
    "ReconciliationResult",
    "SystemTransaction",
    "TransactionType",
]
