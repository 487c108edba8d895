"""Custom exceptions for the reconciliation engine."""

from pathlib import Path
from typing import Optional, Union


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class ConfigurationError(ReconciliationError):
    """Invalid threshold, day window, input path or configuration file."""

    pass


class InputFileError(ReconciliationError):
    """Ledger file could not be read, decoded or written."""

    pass


class ParseError(ReconciliationError):
    """
    A malformed ledger row.

    Instances are collected per row and carried in the report instead of
    aborting the parse.
    """

    def __init__(self, line: int, reason: str, path: Optional[Union[str, Path]] = None):
        self.line = line
        self.reason = reason
        self.path = str(path) if path is not None else None
        location = f"{Path(self.path).name}:{line}" if self.path else f"line {line}"
        super().__init__(f"{location}: {reason}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseError):
            return NotImplemented
        return (self.line, self.reason, self.path) == (other.line, other.reason, other.path)

    def __hash__(self) -> int:
        return hash((self.line, self.reason, self.path))


class InternalError(ReconciliationError):
    """Invariant violation inside the engine (a programming defect)."""

    pass


class EngineTimeoutError(ReconciliationError):
    """Reconciliation exceeded the caller's wall-clock budget."""

    pass


class ReportGenerationError(ReconciliationError):
    """Error writing an Excel or CSV report."""

    pass
