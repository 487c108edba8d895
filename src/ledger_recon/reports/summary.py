"""Aggregation of match results into the final reconciliation report."""

from decimal import Decimal
from typing import Iterable, Sequence
import logging

from ..models.transaction import (
    Matched,
    MatchResult,
    ReconciliationReport,
    Side,
    Transaction,
    Unmatched,
)
from ..utils.exceptions import InternalError, ParseError

logger = logging.getLogger(__name__)


def summarize(
    results: Sequence[MatchResult],
    parse_errors: Iterable[ParseError] = (),
    *,
    threshold: Decimal,
    days: int,
    credit_count: int,
    debit_count: int,
    credit_source: str = "",
    debit_source: str = "",
    minor_unit_digits: int = 2,
) -> ReconciliationReport:
    """
    Build the immutable report, keeping result order untouched.

    Every parsed transaction must appear in exactly one result; a duplicate
    or a missing transaction is an engine defect.

    Raises:
        InternalError: If the conservation check fails
    """
    seen: dict[Side, set[int]] = {Side.CREDIT: set(), Side.DEBIT: set()}

    def record(txn: Transaction, expected: Side) -> None:
        if txn.side is not expected:
            raise InternalError(
                f"Transaction {txn.id} recorded as {expected.value} but is {txn.side.value}"
            )
        if txn.line in seen[expected]:
            raise InternalError(
                f"{expected.value.capitalize()} {txn.id} (line {txn.line}) "
                "appears in more than one result"
            )
        seen[expected].add(txn.line)

    for result in results:
        if isinstance(result, Matched):
            record(result.credit, Side.CREDIT)
            record(result.debit, Side.DEBIT)
        elif isinstance(result, Unmatched):
            record(result.transaction, result.side)
        else:
            raise InternalError(f"Unknown match result type: {type(result).__name__}")

    if len(seen[Side.CREDIT]) != credit_count or len(seen[Side.DEBIT]) != debit_count:
        message = (
            f"Conservation check failed: {len(seen[Side.CREDIT])}/{credit_count} credits "
            f"and {len(seen[Side.DEBIT])}/{debit_count} debits accounted for"
        )
        logger.error(message)
        raise InternalError(message)

    return ReconciliationReport(
        results=tuple(results),
        threshold=threshold,
        days=days,
        credit_source=credit_source,
        debit_source=debit_source,
        credit_count=credit_count,
        debit_count=debit_count,
        minor_unit_digits=minor_unit_digits,
        parse_errors=tuple(parse_errors),
    )
