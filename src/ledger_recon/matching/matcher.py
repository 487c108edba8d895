"""
Greedy best-fit matcher pairing credits with indexed debits.
"""

from decimal import Decimal
from typing import Iterable, Optional
import logging

from ..models.transaction import (
    MatchCandidate,
    Matched,
    MatchResult,
    Side,
    Transaction,
    Unmatched,
)
from ..utils.exceptions import InternalError
from .index import DebitIndex

logger = logging.getLogger(__name__)

NO_MATCHING_CREDIT = "no matching credit"


def best_candidate(
    credit: Transaction, debits: Iterable[Transaction], threshold_minor: int, days: int
) -> tuple[Optional[MatchCandidate], Optional[MatchCandidate]]:
    """
    Pick the best qualifying debit for a credit.

    Returns:
        Tuple of (best qualifying candidate, closest-by-amount candidate
        overall). The second element only feeds the unmatched reason.
    """
    best: Optional[MatchCandidate] = None
    closest: Optional[MatchCandidate] = None

    for debit in debits:
        candidate = MatchCandidate(credit=credit, debit=debit)
        if closest is None or candidate.rank < closest.rank:
            closest = candidate
        if not candidate.is_within(threshold_minor, days):
            continue
        if best is None or candidate.rank < best.rank:
            best = candidate

    return best, closest


def match(
    credits: Iterable[Transaction],
    index: DebitIndex,
    threshold_minor: int,
    days: int,
    minor_unit_digits: int = 2,
) -> list[MatchResult]:
    """
    Match credits against the debit index one-to-one.

    Credits are visited in line order. Each takes the candidate with the
    smallest amount delta, then day delta, then debit line number, and that
    debit leaves the index. Leftover debits follow in line order.

    Args:
        credits: Credit transactions
        index: Debit index; consumed as matches are made
        threshold_minor: Maximum amount delta in minor units
        days: Maximum date distance in days
        minor_unit_digits: Precision used when describing deltas

    Returns:
        One result per credit, then one per unmatched debit
    """
    results: list[MatchResult] = []

    for credit in sorted(credits, key=lambda t: t.line):
        if credit.side is not Side.CREDIT:
            raise InternalError(f"Cannot match {credit.side.value} transaction {credit.id}")

        window = index.candidates_for(credit, days)
        best, closest = best_candidate(credit, window, threshold_minor, days)

        if best is None:
            reason = _unmatched_reason(closest, threshold_minor, days, minor_unit_digits)
            logger.debug(f"Credit {credit.id} (line {credit.line}) unmatched: {reason}")
            results.append(Unmatched(transaction=credit, reason=reason))
            continue

        index.remove(best.debit)
        logger.debug(
            f"Matched credit {credit.id} with debit {best.debit.id} "
            f"(amount delta {best.amount_delta}, day delta {best.day_delta})"
        )
        results.append(Matched(candidate=best))

    for debit in index.remaining():
        results.append(Unmatched(transaction=debit, reason=NO_MATCHING_CREDIT))

    return results


def _unmatched_reason(
    closest: Optional[MatchCandidate], threshold_minor: int, days: int, digits: int
) -> str:
    if closest is None:
        return f"no debit dated within {days} day(s)"

    scale = Decimal(1).scaleb(-digits)
    delta = Decimal(closest.amount_delta_minor) * scale
    threshold = Decimal(threshold_minor) * scale
    return (
        f"closest debit {closest.debit.id} differs by {delta} "
        f"(threshold {threshold})"
    )
