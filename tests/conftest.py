"""Shared fixtures and helpers for the ledger reconciliation test suite."""

from datetime import date
from decimal import Decimal
from pathlib import Path
import logging

import pytest

from ledger_recon.config import ReconConfig
from ledger_recon.matching.engine import ReconciliationEngine
from ledger_recon.models.transaction import Side, Transaction


def make_txn(
    txn_id: str,
    line: int,
    txn_date: date,
    amount: str,
    side: Side = Side.CREDIT,
) -> Transaction:
    """Helper to build a Transaction with two-digit minor units."""
    value = Decimal(amount).quantize(Decimal("0.01"))
    return Transaction(
        id=txn_id,
        line=line,
        date=txn_date,
        amount=value,
        minor_units=int(value.scaleb(2)),
        side=side,
        raw_fields=(txn_id, txn_date.isoformat(), amount),
        source="test.csv",
    )


def credit(txn_id: str, line: int, txn_date: date, amount: str) -> Transaction:
    return make_txn(txn_id, line, txn_date, amount, Side.CREDIT)


def debit(txn_id: str, line: int, txn_date: date, amount: str) -> Transaction:
    return make_txn(txn_id, line, txn_date, amount, Side.DEBIT)


@pytest.fixture
def write_ledger(tmp_path):
    """Write ledger text (or a list of rows) to a file under tmp_path."""

    def _write(name: str, content) -> Path:
        if not isinstance(content, str):
            content = "".join(",".join(row) + "\n" for row in content)
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def config():
    return ReconConfig()


@pytest.fixture
def engine(config):
    return ReconciliationEngine(config)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """CLI runs attach handlers to captured streams; drop them after each test."""
    yield
    logger = logging.getLogger("ledger_recon")
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []
