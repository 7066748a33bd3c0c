"""Data models for ledger records and reconciliation results."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from .money import Money


class TransactionType(Enum):
    """Direction of a system ledger entry."""

    CREDIT = "CREDIT"  # Money in
    DEBIT = "DEBIT"  # Money out


@dataclass(frozen=True)
class SystemTransaction:
    """
    Transaction from the internal system of record.

    The amount is a non-negative magnitude; the direction comes from the
    transaction type. Matching happens at calendar-day granularity.
    """

    trx_id: str
    amount: Money
    type: TransactionType
    # Timezone-aware
    transaction_time: datetime

    @property
    def signed_amount(self) -> Money:
        if self.type == TransactionType.CREDIT:
            return self.amount
        return -self.amount

    @property
    def date_key(self) -> date:
        """Calendar day of the transaction in its own UTC offset."""
        return self.transaction_time.date()


@dataclass(frozen=True)
class BankStatement:
    """Row from an external bank statement; the amount carries its own sign."""

    unique_identifier: str
    amount: Money
    date: date
    bank: str

    @property
    def signed_amount(self) -> Money:
        return self.amount

    @property
    def date_key(self) -> date:
        return self.date


@dataclass(frozen=True)
class MatchResult:
    """A system transaction paired with the bank statement it claimed."""

    system_transaction: SystemTransaction
    bank_statement: BankStatement

    @property
    def discrepancy(self) -> Money:
        """Absolute amount difference between the two sides."""
        return abs(
            self.system_transaction.signed_amount - self.bank_statement.signed_amount
        )

    @property
    def is_exact_match(self) -> bool:
        return self.discrepancy == Money.zero()


@dataclass(frozen=True)
class ReconciliationResult:
    """Outcome of one reconciliation run."""

    # In-window record counts
    total_system_transactions: int
    total_bank_transactions: int

    matched_count: int

    # Matched pairs in processing order
    matches: tuple[MatchResult, ...] = ()

    unmatched_system: tuple[SystemTransaction, ...] = ()

    # Source name -> unclaimed statements, in order of first appearance
    unmatched_bank_by_name: Mapping[str, tuple[BankStatement, ...]] = field(
        default_factory=dict
    )

    # Sum of absolute differences across matched pairs
    total_discrepancy: Money = field(default_factory=Money.zero)

    def __post_init__(self):
        # Read-only view over a private copy
        object.__setattr__(
            self,
            "unmatched_bank_by_name",
            MappingProxyType(dict(self.unmatched_bank_by_name)),
        )

    @property
    def total_processed(self) -> int:
        return self.total_system_transactions + self.total_bank_transactions

    @property
    def unmatched_bank_count(self) -> int:
        return sum(len(group) for group in self.unmatched_bank_by_name.values())

    @property
    def unmatched_total(self) -> int:
        return len(self.unmatched_system) + self.unmatched_bank_count

    @property
    def match_rate_system(self) -> float:
        """Percentage of in-window system transactions matched."""
        if self.total_system_transactions == 0:
            return 0.0
        return (self.matched_count / self.total_system_transactions) * 100

    @property
    def match_rate_bank(self) -> float:
        """Percentage of in-window bank statements matched."""
        if self.total_bank_transactions == 0:
            return 0.0
        return (self.matched_count / self.total_bank_transactions) * 100
