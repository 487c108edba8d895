"""Debit index, matcher and reconciliation driver."""

from .engine import ReconciliationEngine
from .index import DebitIndex
from .matcher import best_candidate, match

__all__ = [
    "ReconciliationEngine",
    "DebitIndex",
    "best_candidate",
    "match",
]
