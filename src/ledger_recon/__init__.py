"""Deterministic credit/debit ledger reconciliation engine."""

__version__ = "0.1.0"

from .config import ReconConfig, load_config
from .matching.engine import ReconciliationEngine
from .models.transaction import ReconciliationReport, Side, Transaction
from .uploads import reconcile_uploads

__all__ = [
    "__version__",
    "ReconConfig",
    "load_config",
    "ReconciliationEngine",
    "ReconciliationReport",
    "Side",
    "Transaction",
    "reconcile_uploads",
]
