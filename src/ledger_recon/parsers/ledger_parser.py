"""
Delimited ledger file parser.
Reads a credit or debit ledger into immutable transactions, collecting
row-level errors instead of aborting on the first malformed line.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional, Union
import csv
import logging

from ..models.transaction import ParsedLedger, Side, Transaction
from ..config import ReconConfig
from ..utils.exceptions import ConfigurationError, InputFileError, ParseError

logger = logging.getLogger(__name__)


class LedgerParser:
    """
    Parser for ``id, date, amount`` ledger exports.

    The column layout is fixed per deployment and read from
    ``config.input``. The parser keeps no state between calls, so one
    instance can parse both ledgers, including from two threads at once.
    """

    def __init__(self, config: ReconConfig):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object

        Raises:
            ConfigurationError: If a mapped column lies outside the row width
        """
        self.config = config
        self.input_config = config.input
        self.columns = self.input_config.columns

        for name in ("id", "date", "amount"):
            position = getattr(self.columns, name)
            if position >= self.input_config.field_count:
                raise ConfigurationError(
                    f"Column '{name}' at position {position} is outside a "
                    f"{self.input_config.field_count}-field row"
                )

        self.quantum = Decimal(1).scaleb(-self.input_config.minor_unit_digits)

    def parse_file(self, file_path: Union[str, Path], side: Side) -> ParsedLedger:
        """
        Parse a ledger file.

        Args:
            file_path: Path to the delimited file
            side: Which ledger the file holds

        Returns:
            Parsed transactions in line order plus any row errors

        Raises:
            InputFileError: If the file cannot be opened or decoded
        """
        file_path = Path(file_path)
        logger.info(f"Parsing {side.value} ledger: {file_path}")

        transactions: list[Transaction] = []
        errors: list[ParseError] = []

        try:
            with open(
                file_path, "r", encoding=self.input_config.encoding, newline=""
            ) as f:
                reader = csv.reader(f, delimiter=self.input_config.delimiter)
                header_pending = self.input_config.has_header
                last_line = 0

                while True:
                    line = last_line + 1
                    try:
                        row = next(reader)
                    except StopIteration:
                        break
                    except csv.Error as e:
                        # Reader made no progress, so the rest of the file is unreadable
                        if reader.line_num == last_line:
                            raise
                        last_line = reader.line_num
                        header_pending = False
                        error = ParseError(line, f"unreadable row: {e}", file_path)
                        logger.warning(f"Skipping malformed row: {error}")
                        errors.append(error)
                        continue
                    last_line = reader.line_num

                    if _is_blank(row):
                        continue
                    if header_pending:
                        header_pending = False
                        continue

                    try:
                        transactions.append(self._parse_row(row, line, side, file_path))
                    except ParseError as e:
                        logger.warning(f"Skipping malformed row: {e}")
                        errors.append(e)
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            logger.error(f"Failed to read ledger file {file_path}: {e}")
            raise InputFileError(f"Failed to read ledger file {file_path}: {e}") from e

        logger.info(
            f"Extracted {len(transactions)} {side.value} transactions from "
            f"{file_path.name} ({len(errors)} malformed rows)"
        )

        return ParsedLedger(
            side=side,
            source=file_path.name,
            transactions=tuple(transactions),
            errors=tuple(errors),
        )

    def _parse_row(
        self, row: list[str], line: int, side: Side, file_path: Path
    ) -> Transaction:
        """
        Convert one row into a Transaction.

        Raises:
            ParseError: On wrong field count, bad date or bad amount
        """
        expected = self.input_config.field_count
        if len(row) != expected:
            raise ParseError(line, f"expected {expected} fields, found {len(row)}", file_path)

        raw_date = row[self.columns.date]
        txn_date = self._parse_date(raw_date)
        if txn_date is None:
            raise ParseError(line, f"unparsable date {raw_date.strip()!r}", file_path)

        raw_amount = row[self.columns.amount]
        amount = self._parse_amount(raw_amount)
        if amount is None:
            raise ParseError(line, f"unparsable amount {raw_amount.strip()!r}", file_path)

        try:
            quantized = amount.quantize(self.quantum)
        except InvalidOperation as e:
            raise ParseError(
                line, f"amount {raw_amount.strip()!r} is out of range", file_path
            ) from e
        if quantized != amount:
            raise ParseError(
                line,
                f"amount {raw_amount.strip()!r} has more than "
                f"{self.input_config.minor_unit_digits} decimal places",
                file_path,
            )

        txn_id = row[self.columns.id].strip() or str(line)

        return Transaction(
            id=txn_id,
            line=line,
            date=txn_date,
            amount=quantized,
            minor_units=int(quantized.scaleb(self.input_config.minor_unit_digits)),
            side=side,
            raw_fields=tuple(row),
            source=file_path.name,
        )

    def _parse_date(self, date_value: str) -> Optional[date]:
        """
        Parse a date cell against each configured format in turn.

        Returns:
            Python date object or None
        """
        text = date_value.strip()
        if not text:
            return None

        for date_format in self.input_config.date_formats:
            try:
                return datetime.strptime(text, date_format).date()
            except ValueError:
                continue
        return None

    def _parse_amount(self, amount_value: str) -> Optional[Decimal]:
        """
        Parse an amount cell into an exact Decimal.

        Returns:
            Finite Decimal amount or None
        """
        # Remove any currency symbols and thousands separators
        text = amount_value.strip().replace("$", "").replace(",", "")
        if not text:
            return None

        try:
            value = Decimal(text)
        except InvalidOperation:
            return None

        return value if value.is_finite() else None


def _is_blank(row: list[str]) -> bool:
    """An empty or whitespace-only line; a row of empty cells is still a row."""
    return not row or (len(row) == 1 and not row[0].strip())
