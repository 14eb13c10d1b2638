"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    ValidationError,
    BankParseError,
    LedgerParseError,
    MappingLoadError,
    ConfigurationError,
    ReportGenerationError,
    LedgerApiError,
)
from .logging_config import setup_logging

__all__ = [
    "ReconciliationError",
    "ValidationError",
    "BankParseError",
    "LedgerParseError",
    "MappingLoadError",
    "ConfigurationError",
    "ReportGenerationError",
    "LedgerApiError",
    "setup_logging",
]
