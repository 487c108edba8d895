"""
In-process entry point for upload handlers.

Writes the two uploaded ledgers into a private temporary directory, runs
the engine on them and removes the directory on every exit path. No shell
command is ever built; parameters reach the engine as typed values.
"""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import BinaryIO, Optional, Union
import logging
import shutil
import tempfile

from .config import ReconConfig
from .matching.engine import ReconciliationEngine, ThresholdLike
from .models.transaction import ReconciliationReport
from .utils.exceptions import EngineTimeoutError, InputFileError

logger = logging.getLogger(__name__)

Upload = Union[bytes, BinaryIO]


def reconcile_uploads(
    credit_data: Upload,
    debit_data: Upload,
    threshold: Optional[ThresholdLike] = None,
    days: Optional[int] = None,
    *,
    config: Optional[ReconConfig] = None,
    timeout: Optional[float] = None,
    workdir: Optional[Path] = None,
    credit_name: str = "credits.csv",
    debit_name: str = "debits.csv",
) -> ReconciliationReport:
    """
    Reconcile two uploaded ledgers.

    On timeout the worker thread cannot be interrupted. It runs on after
    the temporary directory is removed, and its late result or error is
    discarded.

    Args:
        credit_data: Credit ledger as bytes or a binary file object
        debit_data: Debit ledger as bytes or a binary file object
        threshold: Maximum amount difference, in ledger currency units
        days: Maximum date difference in days
        config: Application configuration
        timeout: Wall-clock budget in seconds for the whole run
        workdir: Parent directory for the scoped temporary directory
        credit_name: Upload file name shown in the report
        debit_name: Upload file name shown in the report

    Returns:
        The reconciliation report

    Raises:
        EngineTimeoutError: If the run exceeds ``timeout``
        ReconciliationError: Any configuration, I/O or internal failure
    """
    engine = ReconciliationEngine(config)

    with tempfile.TemporaryDirectory(prefix="ledger-recon-", dir=workdir) as tmp:
        tmp_dir = Path(tmp)
        credit_path = _store_upload(credit_data, tmp_dir / "credit", credit_name)
        debit_path = _store_upload(debit_data, tmp_dir / "debit", debit_name)

        if timeout is None:
            return engine.run(credit_path, debit_path, threshold, days)

        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ledger-recon")
        future = pool.submit(engine.run, credit_path, debit_path, threshold, days)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as e:
            logger.error(f"Reconciliation exceeded its {timeout}s budget")
            raise EngineTimeoutError(f"Reconciliation exceeded {timeout} seconds") from e
        finally:
            pool.shutdown(wait=False, cancel_futures=True)


def _store_upload(data: Upload, directory: Path, name: str) -> Path:
    """Write one upload under its base name inside ``directory``."""
    directory.mkdir()
    base_name = Path(name).name
    if base_name in ("", ".", ".."):
        base_name = "ledger.csv"
    target = directory / base_name

    try:
        if isinstance(data, (bytes, bytearray)):
            target.write_bytes(data)
        else:
            with open(target, "wb") as f:
                shutil.copyfileobj(data, f)
    except OSError as e:
        raise InputFileError(f"Failed to store upload {name}: {e}") from e

    return target
