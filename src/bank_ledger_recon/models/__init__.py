"""Data models for reconciliation."""

from .category import (
    Category,
    CategoryType,
    CategoryMapping,
    CategoryInferenceResult,
)
from .transaction import (
    BankTransaction,
    LedgerTransaction,
    NormalizedTransaction,
    TransactionOrigin,
    ClearedStatus,
    ReconciliationStrategy,
    MatchCandidateKey,
    MatchedPair,
    TransactionMatchResult,
    ReconciliationRequest,
    ReconciliationSummary,
    CategorizedTransaction,
    ReconciliationResult,
)
from .adapters import normalize_bank_transaction, normalize_ledger_transaction

__all__ = [
    "Category",
    "CategoryType",
    "CategoryMapping",
    "CategoryInferenceResult",
    "BankTransaction",
    "LedgerTransaction",
    "NormalizedTransaction",
    "TransactionOrigin",
    "ClearedStatus",
    "ReconciliationStrategy",
    "MatchCandidateKey",
    "MatchedPair",
    "TransactionMatchResult",
    "ReconciliationRequest",
    "ReconciliationSummary",
    "CategorizedTransaction",
    "ReconciliationResult",
    "normalize_bank_transaction",
    "normalize_ledger_transaction",
]
