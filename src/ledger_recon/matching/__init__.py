"""Matching engine and strategies."""

from .engine import ReconciliationEngine, reconcile
from .strategies import (
    MatchBucket,
    MatchingStrategy,
    NearestAmountStrategy,
)

__all__ = [
    "ReconciliationEngine",
    "reconcile",
    "MatchBucket",
    "MatchingStrategy",
    "NearestAmountStrategy",
]
