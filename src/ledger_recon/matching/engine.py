"""
Bucket-based matching engine for ledger reconciliation.
Matches system transactions to bank statements of the same day and sign,
greedily choosing the nearest amount.
"""

from datetime import date, datetime
from typing import Optional, Sequence
import logging

from ..models.money import Money
from ..models.transaction import (
    BankStatement,
    MatchResult,
    ReconciliationResult,
    SystemTransaction,
)
from .strategies import MatchBucket, MatchingStrategy, NearestAmountStrategy

logger = logging.getLogger(__name__)

BucketKey = tuple[date, int]


class ReconciliationEngine:
    """
    Main reconciliation engine that orchestrates the matching process.

    Each call to reconcile() works on fresh buckets, so an engine can be
    reused and concurrent runs over disjoint inputs do not interact.
    """

    def __init__(self, strategy: Optional[MatchingStrategy] = None):
        """
        Initialize the reconciliation engine.

        Args:
            strategy: Candidate selection strategy (nearest amount by default)
        """
        self.strategy = strategy or NearestAmountStrategy()

    def reconcile(
        self,
        system_transactions: Sequence[SystemTransaction],
        bank_statements: Sequence[BankStatement],
        window_start: date,
        window_end: date,
    ) -> ReconciliationResult:
        """
        Reconcile system transactions against bank statements.

        Only records dated within [window_start, window_end] (inclusive)
        take part. An inverted window simply selects nothing.

        Args:
            system_transactions: Internal ledger records
            bank_statements: Bank statement records, in population order
            window_start: First calendar day of the window
            window_end: Last calendar day of the window

        Returns:
            Reconciliation result for the window
        """
        start_time = datetime.now()

        system_in = [
            t for t in system_transactions if window_start <= t.date_key <= window_end
        ]
        bank_in = [b for b in bank_statements if window_start <= b.date_key <= window_end]

        logger.info(
            f"Starting reconciliation for {window_start} to {window_end}: "
            f"{len(system_in)} system txns, {len(bank_in)} bank statements in window"
        )

        buckets = self._build_buckets(bank_in)

        # Stable sort: equal timestamps keep their input order
        system_in.sort(key=lambda t: t.transaction_time)

        matches: list[MatchResult] = []
        unmatched_system: list[SystemTransaction] = []
        discrepancy = Money.zero()

        for txn in system_in:
            target = txn.signed_amount
            bucket = buckets.get((txn.date_key, target.sign))

            index = self.strategy.select(target, bucket) if bucket else None
            if index is None:
                unmatched_system.append(txn)
                continue

            match = MatchResult(system_transaction=txn, bank_statement=bucket.claim(index))
            matches.append(match)
            discrepancy += match.discrepancy

        result = ReconciliationResult(
            total_system_transactions=len(system_in),
            total_bank_transactions=len(bank_in),
            matched_count=len(matches),
            matches=tuple(matches),
            unmatched_system=tuple(unmatched_system),
            unmatched_bank_by_name=self._group_leftovers(buckets),
            total_discrepancy=discrepancy,
        )

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Reconciliation complete in {elapsed:.2f}s: {result.matched_count} matches, "
            f"{len(result.unmatched_system)} unmatched system, "
            f"{result.unmatched_bank_count} unmatched bank, "
            f"discrepancy {result.total_discrepancy}"
        )

        return result

    def _build_buckets(
        self, bank_statements: Sequence[BankStatement]
    ) -> dict[BucketKey, MatchBucket]:
        """
        Partition bank statements by (date, sign), keeping input order.

        Args:
            bank_statements: In-window bank statements

        Returns:
            Insertion-ordered mapping of bucket key to bucket
        """
        buckets: dict[BucketKey, MatchBucket] = {}
        for statement in bank_statements:
            key = (statement.date_key, statement.signed_amount.sign)
            buckets.setdefault(key, MatchBucket()).add(statement)

        logger.debug(f"Built {len(buckets)} buckets from {len(bank_statements)} statements")
        return buckets

    def _group_leftovers(
        self, buckets: dict[BucketKey, MatchBucket]
    ) -> dict[str, tuple[BankStatement, ...]]:
        """
        Collect unclaimed statements grouped by bank name.

        Buckets are visited in creation order and candidates in bucket
        order, so both group order and within-group order are stable.
        """
        grouped: dict[str, list[BankStatement]] = {}
        for bucket in buckets.values():
            for statement in bucket.remaining():
                grouped.setdefault(statement.bank, []).append(statement)

        return {bank: tuple(statements) for bank, statements in grouped.items()}


def reconcile(
    system_transactions: Sequence[SystemTransaction],
    bank_statements: Sequence[BankStatement],
    window_start: date,
    window_end: date,
) -> ReconciliationResult:
    """Reconcile with the default engine; see ReconciliationEngine.reconcile."""
    return ReconciliationEngine().reconcile(
        system_transactions, bank_statements, window_start, window_end
    )
