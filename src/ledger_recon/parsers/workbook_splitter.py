"""
Bank-export workbook splitter.
Turns the credit and debit sheets of an exported workbook into the two
header-less ``id,date,amount`` ledger files the engine consumes.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional, Sequence
import logging
import zipfile

import pandas as pd
from openpyxl import load_workbook
from openpyxl.utils import column_index_from_string
from openpyxl.utils.exceptions import InvalidFileException

from ..config import WorkbookConfig
from ..utils.exceptions import ConfigurationError, InputFileError

logger = logging.getLogger(__name__)

LEDGER_COLUMNS = ["id", "date", "amount"]


class WorkbookSplitter:
    """Extracts ledger rows from the fixed layout of a bank-export workbook."""

    def __init__(self, settings: WorkbookConfig):
        self.settings = settings
        try:
            self.id_index = column_index_from_string(settings.id_column) - 1
            self.date_index = column_index_from_string(settings.date_column) - 1
            self.amount_index = column_index_from_string(settings.amount_column) - 1
        except ValueError as e:
            raise ConfigurationError(f"Invalid workbook column letter: {e}") from e
        self.required_width = max(
            settings.min_columns, self.id_index + 1, self.date_index + 1, self.amount_index + 1
        )

    def split(self, xlsx_path: Path, output_dir: Path) -> tuple[Path, Path]:
        """
        Write ``credits.csv`` and ``debits.csv`` extracted from the workbook.

        Args:
            xlsx_path: Path to the exported workbook
            output_dir: Directory receiving the two CSV files

        Returns:
            Tuple of (credit_csv, debit_csv) paths

        Raises:
            InputFileError: If the workbook cannot be read or the CSVs written
        """
        logger.info(f"Splitting workbook: {xlsx_path}")

        try:
            wb = load_workbook(xlsx_path, read_only=True, data_only=True)
        except (OSError, InvalidFileException, zipfile.BadZipFile) as e:
            raise InputFileError(f"Failed to open workbook {xlsx_path}: {e}") from e

        try:
            credit_rows = self._extract_sheet(wb, self.settings.credit_sheet)
            debit_rows = self._extract_sheet(wb, self.settings.debit_sheet)
        finally:
            wb.close()

        output_dir.mkdir(parents=True, exist_ok=True)
        credit_csv = output_dir / "credits.csv"
        debit_csv = output_dir / "debits.csv"

        try:
            pd.DataFrame(credit_rows, columns=LEDGER_COLUMNS).to_csv(
                credit_csv, header=False, index=False
            )
            pd.DataFrame(debit_rows, columns=LEDGER_COLUMNS).to_csv(
                debit_csv, header=False, index=False
            )
        except OSError as e:
            raise InputFileError(f"Failed to write ledger CSV files: {e}") from e

        logger.info(
            f"Wrote {len(credit_rows)} credits to {credit_csv} and "
            f"{len(debit_rows)} debits to {debit_csv}"
        )
        return credit_csv, debit_csv

    def _extract_sheet(self, wb, sheet_name: str) -> list[list[str]]:
        """Extract ledger rows from one sheet, dropping header and footer blocks."""
        if sheet_name not in wb.sheetnames:
            raise InputFileError(f"Workbook has no sheet named '{sheet_name}'")

        rows = list(wb[sheet_name].iter_rows(values_only=True))
        body_end = max(len(rows) - self.settings.footer_rows, 0)
        body = rows[self.settings.header_rows:body_end]

        records: list[list[str]] = []
        for offset, row in enumerate(body, start=self.settings.header_rows + 1):
            if _used_width(row) < self.required_width:
                continue

            amount = self._parse_amount(row[self.amount_index])
            if amount is None:
                logger.warning(
                    f"{sheet_name} row {offset}: unparsable amount "
                    f"{row[self.amount_index]!r}, skipping"
                )
                continue

            records.append(
                [
                    _cell_text(row[self.id_index]),
                    _date_text(row[self.date_index]),
                    format(amount, "f"),
                ]
            )

        logger.debug(f"Sheet {sheet_name}: {len(records)} ledger rows")
        return records

    def _parse_amount(self, value: Any) -> Optional[Decimal]:
        """Amounts are written unsigned with thousands separators removed."""
        if value is None:
            return None
        text = str(value).replace(",", "").strip()
        if text.startswith("-"):
            text = text[1:]
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return None
        return amount if amount.is_finite() else None


def _used_width(row: Sequence[Any]) -> int:
    """Number of cells up to and including the last non-empty one."""
    for index in range(len(row) - 1, -1, -1):
        if row[index] not in (None, ""):
            return index + 1
    return 0


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _date_text(value: Any) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return _cell_text(value)


def split_workbook(
    xlsx_path: Path, output_dir: Path, settings: Optional[WorkbookConfig] = None
) -> tuple[Path, Path]:
    """Split a bank-export workbook into credit and debit ledger files."""
    return WorkbookSplitter(settings or WorkbookConfig()).split(xlsx_path, output_dir)
