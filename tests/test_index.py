from datetime import date

import pytest

from ledger_recon.matching.index import DebitIndex
from ledger_recon.utils.exceptions import InternalError
from tests.conftest import credit, debit

D = date(2024, 1, 10)


class TestDebitIndex:
    """Tests for the date-bucketed debit index."""

    def test_candidates_within_inclusive_window(self):
        debits = [
            debit("early", 1, date(2024, 1, 6), "10"),
            debit("edge-low", 2, date(2024, 1, 7), "10"),
            debit("same", 3, D, "10"),
            debit("edge-high", 4, date(2024, 1, 13), "10"),
            debit("late", 5, date(2024, 1, 14), "10"),
        ]
        index = DebitIndex.build(debits)

        found = index.candidates_for(credit("c", 1, D, "10"), 3)

        assert [d.id for d in found] == ["edge-low", "same", "edge-high"]

    def test_zero_day_window_is_same_day_only(self):
        index = DebitIndex.build(
            [debit("a", 1, D, "1"), debit("b", 2, date(2024, 1, 11), "1")]
        )

        assert [d.id for d in index.candidates_for(credit("c", 1, D, "1"), 0)] == ["a"]

    def test_candidates_ordered_by_date_then_line(self):
        index = DebitIndex.build(
            [
                debit("b", 2, D, "1"),
                debit("z", 9, date(2024, 1, 9), "1"),
                debit("a", 1, D, "1"),
            ]
        )

        found = index.candidates_for(credit("c", 1, D, "1"), 1)

        assert [d.id for d in found] == ["z", "a", "b"]

    def test_remove_consumes_debit(self):
        a = debit("a", 1, D, "1")
        b = debit("b", 2, D, "1")
        index = DebitIndex.build([a, b])

        index.remove(a)

        assert len(index) == 1
        assert index.candidates_for(credit("c", 1, D, "1"), 0) == [b]
        assert index.remaining() == [b]

    def test_emptied_bucket_drops_out_of_lookup(self):
        a = debit("a", 1, D, "1")
        index = DebitIndex.build([a])

        index.remove(a)

        assert len(index) == 0
        assert index.candidates_for(credit("c", 1, D, "1"), 30) == []

    def test_removing_absent_debit_is_internal_error(self):
        a = debit("a", 1, D, "1")
        index = DebitIndex.build([a])
        index.remove(a)

        with pytest.raises(InternalError):
            index.remove(a)

    def test_rejects_credit_transactions(self):
        with pytest.raises(InternalError):
            DebitIndex.build([credit("c", 1, D, "1")])

    def test_remaining_in_line_order(self):
        index = DebitIndex.build(
            [
                debit("c", 3, date(2024, 1, 1), "1"),
                debit("a", 1, date(2024, 3, 1), "1"),
                debit("b", 2, date(2024, 2, 1), "1"),
            ]
        )

        assert [d.id for d in index.remaining()] == ["a", "b", "c"]

    def test_huge_window_is_clamped(self):
        index = DebitIndex.build([debit("a", 1, D, "1")])

        assert len(index.candidates_for(credit("c", 1, D, "1"), 10**12)) == 1
