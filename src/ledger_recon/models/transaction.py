"""Data models for ledger transactions and reconciliation results."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Union

from ..utils.exceptions import ParseError


class Side(Enum):
    """Ledger a transaction was read from."""

    CREDIT = "credit"
    DEBIT = "debit"


@dataclass(frozen=True)
class Transaction:
    """
    One ledger entry, immutable once parsed.

    ``amount`` is the Decimal value quantized to the ledger's minor-unit
    precision; ``minor_units`` is the same value as an exact integer and is
    what every comparison uses.
    """

    # Provided identifier, or the line number when the cell is blank
    id: str

    # 1-based physical line in the source file
    line: int

    date: date
    amount: Decimal
    minor_units: int
    side: Side

    # Original cells for audit output
    raw_fields: tuple[str, ...] = ()

    # Source file name
    source: str = ""


@dataclass(frozen=True)
class MatchCandidate:
    """A potential pairing of one credit with one debit."""

    credit: Transaction
    debit: Transaction

    @property
    def amount_delta_minor(self) -> int:
        return abs(self.credit.minor_units - self.debit.minor_units)

    @property
    def amount_delta(self) -> Decimal:
        return abs(self.credit.amount - self.debit.amount)

    @property
    def day_delta(self) -> int:
        return abs((self.credit.date - self.debit.date).days)

    @property
    def rank(self) -> tuple[int, int, int]:
        """Tie-break key: smallest amount delta, then day delta, then debit line."""
        return (self.amount_delta_minor, self.day_delta, self.debit.line)

    def is_within(self, threshold_minor: int, days: int) -> bool:
        return self.amount_delta_minor <= threshold_minor and self.day_delta <= days


@dataclass(frozen=True)
class Matched:
    """A credit paired with a debit."""

    candidate: MatchCandidate

    @property
    def credit(self) -> Transaction:
        return self.candidate.credit

    @property
    def debit(self) -> Transaction:
        return self.candidate.debit

    @property
    def amount_delta(self) -> Decimal:
        return self.candidate.amount_delta

    @property
    def day_delta(self) -> int:
        return self.candidate.day_delta


@dataclass(frozen=True)
class Unmatched:
    """A transaction left without a counterpart, with the reason why."""

    transaction: Transaction
    reason: str

    @property
    def side(self) -> Side:
        return self.transaction.side


MatchResult = Union[Matched, Unmatched]


@dataclass(frozen=True)
class ParsedLedger:
    """Output of parsing one ledger file."""

    side: Side
    source: str
    transactions: tuple[Transaction, ...] = ()
    errors: tuple[ParseError, ...] = ()


@dataclass(frozen=True)
class ReconciliationReport:
    """
    Final result of one reconciliation run.

    ``results`` keeps matcher order: one entry per credit in line order,
    followed by the leftover debits in line order.
    """

    results: tuple[MatchResult, ...]
    threshold: Decimal
    days: int
    credit_source: str = ""
    debit_source: str = ""
    credit_count: int = 0
    debit_count: int = 0
    minor_unit_digits: int = 2
    parse_errors: tuple[ParseError, ...] = field(default_factory=tuple)

    @property
    def matches(self) -> list[Matched]:
        return [r for r in self.results if isinstance(r, Matched)]

    @property
    def unmatched_credits(self) -> list[Unmatched]:
        return [
            r for r in self.results if isinstance(r, Unmatched) and r.side is Side.CREDIT
        ]

    @property
    def unmatched_debits(self) -> list[Unmatched]:
        return [
            r for r in self.results if isinstance(r, Unmatched) and r.side is Side.DEBIT
        ]

    @property
    def matched_count(self) -> int:
        return len(self.matches)

    @property
    def unmatched_credit_count(self) -> int:
        return len(self.unmatched_credits)

    @property
    def unmatched_debit_count(self) -> int:
        return len(self.unmatched_debits)

    @property
    def total_reconciled(self) -> Decimal:
        """Sum of matched credit amounts."""
        total = sum((m.credit.amount for m in self.matches), Decimal("0"))
        return total.quantize(Decimal(1).scaleb(-self.minor_unit_digits))

    @property
    def has_parse_errors(self) -> bool:
        return bool(self.parse_errors)

    @property
    def match_rate_credits(self) -> float:
        """Percentage of credits matched."""
        if self.credit_count == 0:
            return 0.0
        return (self.matched_count / self.credit_count) * 100

    @property
    def match_rate_debits(self) -> float:
        """Percentage of debits matched."""
        if self.debit_count == 0:
            return 0.0
        return (self.matched_count / self.debit_count) * 100
