"""
Reconciliation driver: validate, parse, index, match, summarize.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from decimal import ROUND_FLOOR, Decimal, InvalidOperation, Overflow
from pathlib import Path
from typing import Optional, Union
import logging

from ..models.transaction import ParsedLedger, ReconciliationReport, Side
from ..config import ReconConfig
from ..parsers.ledger_parser import LedgerParser
from ..reports.summary import summarize
from ..utils.exceptions import ConfigurationError, InternalError
from .index import DebitIndex
from .matcher import match

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
ThresholdLike = Union[Decimal, int, float, str]


class ReconciliationEngine:
    """
    Orchestrates one reconciliation per call.

    The engine only holds configuration and a stateless parser; every run
    allocates its own ledgers, index and results, so one instance can serve
    concurrent runs.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the reconciliation engine.

        Args:
            config: Application configuration; defaults when omitted
        """
        self.config = config or ReconConfig()
        self.parser = LedgerParser(self.config)

    def run(
        self,
        credit_path: PathLike,
        debit_path: PathLike,
        threshold: Optional[ThresholdLike] = None,
        days: Optional[int] = None,
    ) -> ReconciliationReport:
        """
        Reconcile a credit ledger file against a debit ledger file.

        Args:
            credit_path: Path to the credit ledger
            debit_path: Path to the debit ledger
            threshold: Maximum amount difference, in ledger currency units
            days: Maximum date difference in days

        Returns:
            The reconciliation report; malformed rows appear as parse errors

        Raises:
            ConfigurationError: Invalid threshold, days or paths
            InputFileError: A ledger file could not be read
            InternalError: An engine invariant was violated
        """
        threshold_value = self._validate_threshold(threshold)
        days_value = self._validate_days(days)
        credit_file = self._validate_path(credit_path, Side.CREDIT)
        debit_file = self._validate_path(debit_path, Side.DEBIT)

        credits, debits = self._parse_ledgers(credit_file, debit_file)
        return self.reconcile(credits, debits, threshold_value, days_value)

    def reconcile(
        self,
        credits: ParsedLedger,
        debits: ParsedLedger,
        threshold: Optional[ThresholdLike] = None,
        days: Optional[int] = None,
    ) -> ReconciliationReport:
        """
        Reconcile two already-parsed ledgers.

        Args:
            credits: Parsed credit ledger
            debits: Parsed debit ledger
            threshold: Maximum amount difference, in ledger currency units
            days: Maximum date difference in days

        Returns:
            The reconciliation report
        """
        threshold_value = self._validate_threshold(threshold)
        days_value = self._validate_days(days)
        digits = self.config.input.minor_unit_digits
        threshold_minor = _to_minor_units(threshold_value, digits)

        start_time = datetime.now()
        logger.info(
            f"Starting reconciliation: {len(credits.transactions)} credits, "
            f"{len(debits.transactions)} debits, threshold {threshold_value}, "
            f"window {days_value} day(s)"
        )

        try:
            index = DebitIndex.build(debits.transactions)
            results = match(credits.transactions, index, threshold_minor, days_value, digits)
            report = summarize(
                results,
                credits.errors + debits.errors,
                threshold=threshold_value,
                days=days_value,
                credit_count=len(credits.transactions),
                debit_count=len(debits.transactions),
                credit_source=credits.source,
                debit_source=debits.source,
                minor_unit_digits=digits,
            )
        except InternalError:
            logger.exception("Reconciliation aborted by an internal error")
            raise

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Reconciliation complete in {elapsed:.2f}s: {report.matched_count} matches, "
            f"{report.unmatched_credit_count} unmatched credits, "
            f"{report.unmatched_debit_count} unmatched debits, "
            f"{len(report.parse_errors)} parse errors"
        )

        return report

    def _parse_ledgers(
        self, credit_file: Path, debit_file: Path
    ) -> tuple[ParsedLedger, ParsedLedger]:
        """Parse both ledgers, concurrently when configured."""
        if not self.config.input.parallel_parse:
            return (
                self.parser.parse_file(credit_file, Side.CREDIT),
                self.parser.parse_file(debit_file, Side.DEBIT),
            )

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="ledger-parse") as pool:
            credit_future = pool.submit(self.parser.parse_file, credit_file, Side.CREDIT)
            debit_future = pool.submit(self.parser.parse_file, debit_file, Side.DEBIT)
            return credit_future.result(), debit_future.result()

    def _validate_threshold(self, threshold: Optional[ThresholdLike]) -> Decimal:
        if threshold is None:
            threshold = self.config.matching.threshold
        if isinstance(threshold, bool):
            raise ConfigurationError(f"Threshold must be a number, got {threshold!r}")
        if isinstance(threshold, float):
            threshold = str(threshold)

        try:
            value = threshold if isinstance(threshold, Decimal) else Decimal(threshold)
        except (InvalidOperation, TypeError, ValueError) as e:
            raise ConfigurationError(f"Threshold must be a number, got {threshold!r}") from e

        if not value.is_finite():
            raise ConfigurationError(f"Threshold must be finite, got {threshold!r}")
        if value < 0:
            raise ConfigurationError(f"Threshold must be >= 0, got {value}")
        _to_minor_units(value, self.config.input.minor_unit_digits)
        return value

    def _validate_days(self, days: Optional[int]) -> int:
        if days is None:
            days = self.config.matching.days
        if isinstance(days, bool) or not isinstance(days, int):
            raise ConfigurationError(f"Days must be an integer, got {days!r}")
        if days < 0:
            raise ConfigurationError(f"Days must be >= 0, got {days}")
        return days

    def _validate_path(self, path: Optional[PathLike], side: Side) -> Path:
        if path is None or str(path) == "":
            raise ConfigurationError(f"A {side.value} file path is required")

        file_path = Path(path)
        if not file_path.exists():
            raise ConfigurationError(f"{side.value.capitalize()} file not found: {file_path}")
        if not file_path.is_file():
            raise ConfigurationError(
                f"{side.value.capitalize()} path is not a regular file: {file_path}"
            )
        return file_path


def _to_minor_units(threshold: Decimal, digits: int) -> int:
    """Floor a threshold to whole minor units."""
    try:
        return int(threshold.scaleb(digits).to_integral_value(rounding=ROUND_FLOOR))
    except (Overflow, InvalidOperation) as e:
        raise ConfigurationError(f"Threshold is out of range: {threshold}") from e
