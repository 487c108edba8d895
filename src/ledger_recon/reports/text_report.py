"""
Plain-text and JSON renderings of a reconciliation report.

Both renderings are pure functions of the report and carry no timestamps,
so identical inputs always render to identical bytes.
"""

from decimal import Decimal
from pathlib import Path
from typing import Any
import json

from ..models.transaction import Matched, ReconciliationReport, Transaction, Unmatched
from ..utils.exceptions import ParseError


def _money(value: Decimal) -> str:
    return format(value, "f")


def _describe(txn: Transaction) -> str:
    return f"{txn.id} ({_money(txn.amount)}, {txn.date.isoformat()})"


def render_text(report: ReconciliationReport) -> str:
    """Render the report as the plain-text body returned to callers."""
    lines = [
        "Reconciliation Report",
        "=====================",
        f"Credit file: {report.credit_source or '-'}",
        f"Debit file: {report.debit_source or '-'}",
        f"Threshold: {_money(report.threshold)}",
        f"Day window: {report.days} day(s)",
        "",
        "Summary",
        "-------",
        f"Credits parsed: {report.credit_count}",
        f"Debits parsed: {report.debit_count}",
        f"Matched pairs: {report.matched_count}",
        f"Unmatched credits: {report.unmatched_credit_count}",
        f"Unmatched debits: {report.unmatched_debit_count}",
        f"Total reconciled: {_money(report.total_reconciled)}",
        f"Parse errors: {len(report.parse_errors)}",
        "",
        "Matched Transactions:",
    ]

    lines.extend(_matched_lines(report.matches))
    lines.append("")
    lines.append("Unmatched Credit Transactions:")
    lines.extend(_unmatched_lines(report.unmatched_credits))
    lines.append("")
    lines.append("Unmatched Debit Transactions:")
    lines.extend(_unmatched_lines(report.unmatched_debits))
    lines.append("")
    lines.append("Parse Errors:")
    lines.extend(_parse_error_lines(report.parse_errors))

    return "\n".join(lines) + "\n"


def _matched_lines(matches: list[Matched]) -> list[str]:
    if not matches:
        return ["None"]
    return [
        f"Credit: {_describe(m.credit)} - Debit: {_describe(m.debit)} "
        f"[amount delta {_money(m.amount_delta)}, day delta {m.day_delta}]"
        for m in matches
    ]


def _unmatched_lines(unmatched: list[Unmatched]) -> list[str]:
    if not unmatched:
        return ["None"]
    return [
        f"{u.transaction.id} (line {u.transaction.line}, {u.transaction.date.isoformat()}, "
        f"{_money(u.transaction.amount)}): {u.reason}"
        for u in unmatched
    ]


def _parse_error_lines(errors: tuple[ParseError, ...]) -> list[str]:
    if not errors:
        return ["None"]
    return [str(error) for error in errors]


def _transaction_dict(txn: Transaction) -> dict[str, Any]:
    return {
        "id": txn.id,
        "line": txn.line,
        "date": txn.date.isoformat(),
        "amount": _money(txn.amount),
        "side": txn.side.value,
    }


def report_to_dict(report: ReconciliationReport) -> dict[str, Any]:
    """Structured form of the report with amounts as exact decimal strings."""
    return {
        "parameters": {
            "credit_file": report.credit_source,
            "debit_file": report.debit_source,
            "threshold": _money(report.threshold),
            "days": report.days,
        },
        "summary": {
            "credits_parsed": report.credit_count,
            "debits_parsed": report.debit_count,
            "matched_pairs": report.matched_count,
            "unmatched_credits": report.unmatched_credit_count,
            "unmatched_debits": report.unmatched_debit_count,
            "total_reconciled": _money(report.total_reconciled),
            "parse_errors": len(report.parse_errors),
        },
        "matched": [
            {
                "credit": _transaction_dict(m.credit),
                "debit": _transaction_dict(m.debit),
                "amount_delta": _money(m.amount_delta),
                "day_delta": m.day_delta,
            }
            for m in report.matches
        ],
        "unmatched_credits": [
            {**_transaction_dict(u.transaction), "reason": u.reason}
            for u in report.unmatched_credits
        ],
        "unmatched_debits": [
            {**_transaction_dict(u.transaction), "reason": u.reason}
            for u in report.unmatched_debits
        ],
        "parse_errors": [
            {
                "file": Path(error.path).name if error.path else None,
                "line": error.line,
                "reason": error.reason,
            }
            for error in report.parse_errors
        ],
    }


def render_json(report: ReconciliationReport) -> str:
    """Render the report as a stable JSON document."""
    return json.dumps(report_to_dict(report), indent=2, sort_keys=True) + "\n"
