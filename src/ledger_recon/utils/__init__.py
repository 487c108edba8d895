"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    ConfigurationError,
    InputFileError,
    ParseError,
    InternalError,
    EngineTimeoutError,
    ReportGenerationError,
)
from .logging_config import setup_logging

__all__ = [
    "ReconciliationError",
    "ConfigurationError",
    "InputFileError",
    "ParseError",
    "InternalError",
    "EngineTimeoutError",
    "ReportGenerationError",
    "setup_logging",
]
