"""Data models for reconciliation."""

from .transaction import (
    Side,
    Transaction,
    MatchCandidate,
    Matched,
    Unmatched,
    MatchResult,
    ParsedLedger,
    ReconciliationReport,
)

__all__ = [
    "Side",
    "Transaction",
    "MatchCandidate",
    "Matched",
    "Unmatched",
    "MatchResult",
    "ParsedLedger",
    "ReconciliationReport",
]
