from datetime import date
from decimal import Decimal

from ledger_recon.matching.index import DebitIndex
from ledger_recon.matching.matcher import NO_MATCHING_CREDIT, best_candidate, match
from ledger_recon.models.transaction import Matched, Side, Unmatched
from tests.conftest import credit, debit

D = date(2024, 1, 10)


def run_match(credits, debits, threshold_minor, days):
    return match(credits, DebitIndex.build(debits), threshold_minor, days)


class TestMatch:
    """Tests for greedy best-fit matching."""

    def test_match_within_threshold_and_window(self):
        results = run_match(
            [credit("1", 1, D, "500")],
            [debit("A", 1, date(2024, 1, 12), "505")],
            threshold_minor=1000,
            days=3,
        )

        assert len(results) == 1
        result = results[0]
        assert isinstance(result, Matched)
        assert (result.credit.id, result.debit.id) == ("1", "A")
        assert result.amount_delta == Decimal("5.00")
        assert result.day_delta == 2

    def test_amount_outside_threshold_leaves_both_unmatched(self):
        results = run_match(
            [credit("1", 1, D, "500")],
            [debit("A", 1, date(2024, 1, 12), "505")],
            threshold_minor=300,
            days=3,
        )

        assert [type(r) for r in results] == [Unmatched, Unmatched]
        assert results[0].side is Side.CREDIT
        assert results[0].reason == "closest debit A differs by 5.00 (threshold 3.00)"
        assert results[1].side is Side.DEBIT
        assert results[1].reason == NO_MATCHING_CREDIT

    def test_empty_window_reason(self):
        results = run_match(
            [credit("1", 1, D, "500")],
            [debit("A", 1, date(2024, 2, 12), "500")],
            threshold_minor=0,
            days=7,
        )

        assert results[0].reason == "no debit dated within 7 day(s)"

    def test_tie_break_prefers_lower_debit_line(self):
        results = run_match(
            [credit("1", 1, D, "100")],
            [debit("A", 1, D, "100"), debit("B", 2, D, "100")],
            threshold_minor=0,
            days=0,
        )

        assert results[0].debit.id == "A"
        assert results[1].transaction.id == "B"

    def test_smallest_amount_delta_wins_over_closer_date(self):
        results = run_match(
            [credit("1", 1, D, "100")],
            [debit("near", 1, D, "104"), debit("exact", 2, date(2024, 1, 15), "100")],
            threshold_minor=1000,
            days=7,
        )

        assert results[0].debit.id == "exact"

    def test_day_delta_breaks_amount_ties(self):
        results = run_match(
            [credit("1", 1, D, "100")],
            [debit("far", 1, date(2024, 1, 15), "101"), debit("near", 2, D, "99")],
            threshold_minor=1000,
            days=7,
        )

        assert results[0].debit.id == "near"

    def test_debit_matches_only_once(self):
        """A consumed debit is not offered to later credits."""
        results = run_match(
            [credit("1", 1, D, "100"), credit("2", 2, D, "100")],
            [debit("A", 1, D, "100")],
            threshold_minor=0,
            days=0,
        )

        assert isinstance(results[0], Matched)
        assert isinstance(results[1], Unmatched)
        assert results[1].transaction.id == "2"

    def test_credits_processed_in_line_order(self):
        """Earlier lines claim the best debit regardless of input ordering."""
        results = run_match(
            [credit("late", 5, D, "100"), credit("early", 2, D, "100")],
            [debit("A", 1, D, "100")],
            threshold_minor=0,
            days=0,
        )

        assert results[0].credit.id == "early"
        assert results[1].transaction.id == "late"

    def test_zero_threshold_and_days_require_exact_equality(self):
        results = run_match(
            [
                credit("same", 1, D, "50"),
                credit("off-by-cent", 2, D, "50.01"),
                credit("off-by-day", 3, date(2024, 1, 11), "70"),
            ],
            [debit("X", 1, D, "50"), debit("Y", 2, D, "50"), debit("Z", 3, D, "70")],
            threshold_minor=0,
            days=0,
        )

        matched = [(r.credit.id, r.debit.id) for r in results if isinstance(r, Matched)]
        assert matched == [("same", "X")]
        assert [r.transaction.id for r in results if isinstance(r, Unmatched)] == [
            "off-by-cent",
            "off-by-day",
            "Y",
            "Z",
        ]

    def test_empty_inputs(self):
        assert run_match([], [], threshold_minor=1000, days=7) == []

    def test_negative_amounts_compare_by_signed_difference(self):
        results = run_match(
            [credit("1", 1, D, "-20")],
            [debit("A", 1, D, "20")],
            threshold_minor=100,
            days=0,
        )

        assert all(isinstance(r, Unmatched) for r in results)


class TestBestCandidate:
    """Tests for candidate selection."""

    def test_no_debits(self):
        assert best_candidate(credit("1", 1, D, "1"), [], 0, 0) == (None, None)

    def test_reports_closest_even_when_nothing_qualifies(self):
        best, closest = best_candidate(
            credit("1", 1, D, "100"),
            [debit("A", 1, D, "150"), debit("B", 2, D, "120")],
            threshold_minor=500,
            days=0,
        )

        assert best is None
        assert closest.debit.id == "B"
