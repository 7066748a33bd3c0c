"""
Candidate selection for bucket-based matching.
A bucket holds bank statements sharing a calendar day and sign; a strategy
decides which unclaimed candidate a system transaction takes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterator, Optional

from ..models.money import Money
from ..models.transaction import BankStatement


@dataclass
class MatchBucket:
    """
    Bank statements sharing one (date, sign) key, in population order.

    Claimed candidates are flagged rather than removed, so candidate
    indices never shift while a bucket is being scanned.
    """

    candidates: list[BankStatement] = field(default_factory=list)
    claimed: list[bool] = field(default_factory=list)

    def add(self, statement: BankStatement) -> None:
        self.candidates.append(statement)
        self.claimed.append(False)

    def claim(self, index: int) -> BankStatement:
        """Mark a candidate as taken and return it."""
        if self.claimed[index]:
            raise ValueError(f"candidate {index} already claimed")
        self.claimed[index] = True
        return self.candidates[index]

    def available(self) -> Iterator[tuple[int, BankStatement]]:
        """Yield (index, statement) for unclaimed candidates in bucket order."""
        for index, statement in enumerate(self.candidates):
            if not self.claimed[index]:
                yield index, statement

    def remaining(self) -> list[BankStatement]:
        return [statement for _, statement in self.available()]

    def __len__(self) -> int:
        return self.claimed.count(False)


class MatchingStrategy(ABC):
    """Abstract base class for candidate selection strategies."""

    @abstractmethod
    def select(self, target: Money, bucket: MatchBucket) -> Optional[int]:
        """
        Choose a candidate for a system transaction.

        Args:
            target: Signed amount of the system transaction
            bucket: Bucket sharing the transaction's date and sign

        Returns:
            Index of the chosen candidate, or None if nothing is available
        """
        pass


class NearestAmountStrategy(MatchingStrategy):
    """
    Pick the unclaimed candidate closest in amount.

    Ties go to the candidate seen first in bucket order.
    """

    def select(self, target: Money, bucket: MatchBucket) -> Optional[int]:
        best_index: Optional[int] = None
        best_diff: Optional[Money] = None

        for index, candidate in bucket.available():
            diff = abs(target - candidate.signed_amount)
            # Strict comparison keeps the first-seen candidate on ties
            if best_diff is None or diff < best_diff:
                best_index = index
                best_diff = diff

        return best_index
