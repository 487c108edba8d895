"""CSV side-output of matched and unmatched transactions."""

from pathlib import Path
import logging

import pandas as pd

from ..models.transaction import ReconciliationReport, Unmatched
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

MATCHED_FILENAME = "matched_transactions.csv"
UNMATCHED_CREDITS_FILENAME = "unmatched_credits.csv"
UNMATCHED_DEBITS_FILENAME = "unmatched_debits.csv"

MATCHED_COLUMNS = [
    "credit_id",
    "credit_line",
    "credit_date",
    "credit_amount",
    "debit_id",
    "debit_line",
    "debit_date",
    "debit_amount",
    "amount_delta",
    "day_delta",
]
UNMATCHED_COLUMNS = ["id", "line", "date", "amount", "reason"]


def matched_frame(report: ReconciliationReport) -> pd.DataFrame:
    """One row per matched pair, amounts kept as exact decimal strings."""
    rows = [
        [
            m.credit.id,
            m.credit.line,
            m.credit.date.isoformat(),
            format(m.credit.amount, "f"),
            m.debit.id,
            m.debit.line,
            m.debit.date.isoformat(),
            format(m.debit.amount, "f"),
            format(m.amount_delta, "f"),
            m.day_delta,
        ]
        for m in report.matches
    ]
    return pd.DataFrame(rows, columns=MATCHED_COLUMNS)


def unmatched_frame(unmatched: list[Unmatched]) -> pd.DataFrame:
    rows = [
        [
            u.transaction.id,
            u.transaction.line,
            u.transaction.date.isoformat(),
            format(u.transaction.amount, "f"),
            u.reason,
        ]
        for u in unmatched
    ]
    return pd.DataFrame(rows, columns=UNMATCHED_COLUMNS)


def export_csv(report: ReconciliationReport, output_dir: Path) -> list[Path]:
    """
    Write the matched, unmatched-credit and unmatched-debit CSV files.

    Args:
        report: Reconciliation report
        output_dir: Directory receiving the files

    Returns:
        Paths of the written files

    Raises:
        ReportGenerationError: If a file cannot be written
    """
    outputs = [
        (output_dir / MATCHED_FILENAME, matched_frame(report)),
        (output_dir / UNMATCHED_CREDITS_FILENAME, unmatched_frame(report.unmatched_credits)),
        (output_dir / UNMATCHED_DEBITS_FILENAME, unmatched_frame(report.unmatched_debits)),
    ]

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        for path, frame in outputs:
            frame.to_csv(path, index=False)
    except OSError as e:
        raise ReportGenerationError(f"Failed to write CSV export to {output_dir}: {e}") from e

    logger.info(f"Exported reconciliation CSV files to {output_dir}")
    return [path for path, _ in outputs]
