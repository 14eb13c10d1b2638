"""Reconcile bank transactions against a budgeting ledger and categorize what is missing."""

from .config import ReconConfig, load_config
from .inference.engine import CategoryInferenceEngine
from .matching.engine import ReconciliationEngine
from .matching.index import MatchingIndex
from .service import ReconciliationService, run_reconciliation

__version__ = "0.1.0"

__all__ = [
    "ReconConfig",
    "load_config",
    "CategoryInferenceEngine",
    "ReconciliationEngine",
    "MatchingIndex",
    "ReconciliationService",
    "run_reconciliation",
]
