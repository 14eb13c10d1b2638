"""Matching index and reconciliation engine."""

from .engine import DEFAULT_TOLERANCE_DAYS, ReconciliationEngine
from .index import MatchingIndex

__all__ = [
    "DEFAULT_TOLERANCE_DAYS",
    "ReconciliationEngine",
    "MatchingIndex",
]
