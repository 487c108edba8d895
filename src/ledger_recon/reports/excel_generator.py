"""
Excel report generator for reconciliation results.
Creates multi-sheet workbooks with formatted output.
"""

from datetime import datetime
from pathlib import Path
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side as BorderSide
from openpyxl.worksheet.worksheet import Worksheet

from ..models.transaction import Matched, ReconciliationReport, Unmatched
from ..config import ReconConfig
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
MATCH_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
VARIANCE_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
UNMATCHED_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
THIN_BORDER = Border(
    left=BorderSide(style="thin"),
    right=BorderSide(style="thin"),
    top=BorderSide(style="thin"),
    bottom=BorderSide(style="thin"),
)


class ExcelReportGenerator:
    """Generates Excel reconciliation reports with multiple sheets."""

    def __init__(self, config: ReconConfig):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config
        self.sheet_config = config.output.sheets

    def generate_report(self, report: ReconciliationReport, output_path: Path) -> Path:
        """
        Generate the complete reconciliation workbook.

        Args:
            report: Reconciliation report
            output_path: Path for output file; a directory gets a
                file named from the configured template

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        output_path = Path(output_path)
        if output_path.is_dir():
            output_path = output_path / self.default_filename()

        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()

        # Remove default sheet
        if wb.active:
            wb.remove(wb.active)

        sheets = self.sheet_config
        if sheets.summary.enabled:
            self._create_summary_sheet(wb, report)
        if sheets.matched.enabled:
            self._create_matched_sheet(wb, report.matches)
        if sheets.unmatched_credits.enabled:
            self._create_unmatched_sheet(
                wb, sheets.unmatched_credits.name, report.unmatched_credits
            )
        if sheets.unmatched_debits.enabled:
            self._create_unmatched_sheet(
                wb, sheets.unmatched_debits.name, report.unmatched_debits
            )
        if sheets.parse_errors.enabled:
            self._create_parse_errors_sheet(wb, report)

        # A workbook needs at least one sheet to be saved
        if not wb.sheetnames:
            wb.create_sheet(sheets.summary.name)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to save Excel report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def default_filename(self) -> str:
        """Report file name from ``output.excel.filename_template``."""
        now = datetime.now()
        return self.config.output.excel.filename_template.format(
            date=now.strftime("%Y%m%d"), time=now.strftime("%H%M%S")
        )

    def _create_summary_sheet(self, wb: Workbook, report: ReconciliationReport) -> None:
        """Create the summary sheet with key metrics."""
        ws = wb.create_sheet(self.sheet_config.summary.name)

        ws["A1"] = "Ledger Reconciliation Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        ws["A3"] = "Run Parameters"
        ws["A3"].font = Font(bold=True)

        parameters = [
            ("Credit File:", report.credit_source),
            ("Debit File:", report.debit_source),
            ("Threshold:", format(report.threshold, "f")),
            ("Day Window:", report.days),
        ]
        for i, (label, value) in enumerate(parameters, start=4):
            ws[f"A{i}"] = label
            ws[f"B{i}"] = value

        ws["A9"] = "Transaction Counts"
        ws["A9"].font = Font(bold=True)

        counts = [
            ("Credits Parsed:", report.credit_count),
            ("Debits Parsed:", report.debit_count),
            ("Matched Pairs:", report.matched_count),
            ("Unmatched Credits:", report.unmatched_credit_count),
            ("Unmatched Debits:", report.unmatched_debit_count),
            ("Parse Errors:", len(report.parse_errors)),
        ]
        for i, (label, value) in enumerate(counts, start=10):
            ws[f"A{i}"] = label
            ws[f"B{i}"] = value

        ws["A17"] = "Match Rates"
        ws["A17"].font = Font(bold=True)
        ws["A18"] = "Credit Match Rate:"
        ws["B18"] = f"{report.match_rate_credits:.1f}%"
        ws["A19"] = "Debit Match Rate:"
        ws["B19"] = f"{report.match_rate_debits:.1f}%"

        ws["A21"] = "Total Reconciled:"
        ws["A21"].font = Font(bold=True)
        ws["B21"] = format(report.total_reconciled, "f")

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 40

    def _create_matched_sheet(self, wb: Workbook, matches: list[Matched]) -> None:
        """Create the matched transactions sheet."""
        ws = wb.create_sheet(self.sheet_config.matched.name)

        self._write_headers(
            ws,
            [
                "Credit ID",
                "Credit Line",
                "Credit Date",
                "Credit Amount",
                "Debit ID",
                "Debit Line",
                "Debit Date",
                "Debit Amount",
                "Amount Delta",
                "Day Delta",
            ],
        )

        for row_num, match in enumerate(matches, start=2):
            row_data = [
                match.credit.id,
                match.credit.line,
                match.credit.date,
                match.credit.amount,
                match.debit.id,
                match.debit.line,
                match.debit.date,
                match.debit.amount,
                match.amount_delta,
                match.day_delta,
            ]
            exact = not match.amount_delta and not match.day_delta

            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                cell.fill = MATCH_FILL if exact else VARIANCE_FILL

        self._auto_fit_columns(ws)

    def _create_unmatched_sheet(
        self, wb: Workbook, sheet_name: str, unmatched: list[Unmatched]
    ) -> None:
        """Create a sheet listing one side's unmatched transactions."""
        ws = wb.create_sheet(sheet_name)

        self._write_headers(ws, ["ID", "Line", "Date", "Amount", "Reason"])

        for row_num, item in enumerate(unmatched, start=2):
            txn = item.transaction
            row_data = [txn.id, txn.line, txn.date, txn.amount, item.reason]

            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                cell.fill = UNMATCHED_FILL

        self._auto_fit_columns(ws)

    def _create_parse_errors_sheet(self, wb: Workbook, report: ReconciliationReport) -> None:
        """Create the sheet of rows skipped during parsing."""
        ws = wb.create_sheet(self.sheet_config.parse_errors.name)

        self._write_headers(ws, ["File", "Line", "Reason"])

        for row_num, error in enumerate(report.parse_errors, start=2):
            file_name = Path(error.path).name if error.path else ""
            for col, value in enumerate([file_name, error.line, error.reason], start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER

        self._auto_fit_columns(ws)

    def _write_headers(self, ws: Worksheet, headers: list[str]) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            max_length = 0
            column = column_cells[0].column_letter

            for cell in column_cells:
                if cell.value is not None:
                    max_length = max(max_length, len(str(cell.value)))

            ws.column_dimensions[column].width = min(max_length + 2, 50)
