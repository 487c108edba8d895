"""
Date-bucketed index of debit transactions.
Supports day-window range lookups and removal of consumed debits.
"""

from bisect import bisect_left, bisect_right, insort
from datetime import date, timedelta
from typing import Iterable
import logging

from ..models.transaction import Side, Transaction
from ..utils.exceptions import InternalError

logger = logging.getLogger(__name__)


class DebitIndex:
    """
    Unconsumed debits bucketed by calendar date.

    Each bucket maps line number to transaction in insertion (line) order;
    ``_dates`` holds the occupied dates sorted, so a window lookup only
    visits the buckets that fall inside it.
    """

    def __init__(self) -> None:
        self._buckets: dict[date, dict[int, Transaction]] = {}
        self._dates: list[date] = []
        self._size = 0

    @classmethod
    def build(cls, debits: Iterable[Transaction]) -> "DebitIndex":
        """
        Build an index over debit transactions.

        Args:
            debits: Debit transactions, any order

        Raises:
            InternalError: If a non-debit or duplicate line is supplied
        """
        index = cls()
        for debit in sorted(debits, key=lambda t: t.line):
            index._add(debit)
        logger.debug(f"Indexed {index._size} debits across {len(index._dates)} dates")
        return index

    def _add(self, debit: Transaction) -> None:
        if debit.side is not Side.DEBIT:
            raise InternalError(f"Cannot index {debit.side.value} transaction {debit.id}")

        bucket = self._buckets.get(debit.date)
        if bucket is None:
            bucket = {}
            self._buckets[debit.date] = bucket
            insort(self._dates, debit.date)
        if debit.line in bucket:
            raise InternalError(f"Duplicate debit line {debit.line} in index")

        bucket[debit.line] = debit
        self._size += 1

    def candidates_for(self, credit: Transaction, days: int) -> list[Transaction]:
        """
        Debits dated within ``days`` of the credit, inclusive on both ends.

        Returns:
            Matching debits ordered by date, then line number
        """
        start, end = _window(credit.date, days)
        low = bisect_left(self._dates, start)
        high = bisect_right(self._dates, end)

        candidates: list[Transaction] = []
        for bucket_date in self._dates[low:high]:
            candidates.extend(self._buckets[bucket_date].values())
        return candidates

    def remove(self, debit: Transaction) -> None:
        """
        Consume a debit so it cannot match again.

        Raises:
            InternalError: If the debit is not present
        """
        bucket = self._buckets.get(debit.date)
        if bucket is None or bucket.pop(debit.line, None) is None:
            raise InternalError(
                f"Debit {debit.id} (line {debit.line}) is not in the index"
            )

        self._size -= 1
        if not bucket:
            del self._buckets[debit.date]
            del self._dates[bisect_left(self._dates, debit.date)]

    def remaining(self) -> list[Transaction]:
        """Unconsumed debits in line order."""
        leftovers = [debit for bucket in self._buckets.values() for debit in bucket.values()]
        return sorted(leftovers, key=lambda t: t.line)

    def __len__(self) -> int:
        return self._size


def _window(center: date, days: int) -> tuple[date, date]:
    """Inclusive date range around ``center``, clamped to the calendar."""
    try:
        start = center - timedelta(days=days)
    except OverflowError:
        start = date.min
    try:
        end = center + timedelta(days=days)
    except OverflowError:
        end = date.max
    return start, end
