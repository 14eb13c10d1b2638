"""
Adapters from source records to NormalizedTransaction.

Both adapters are pure functions. Record validation already happened when the
BankTransaction or LedgerTransaction was constructed, so adapting never fails
for a record that exists.
"""

from typing import Iterable, Optional, Sequence

from ..utils.exceptions import ValidationError
from .category import CONTEXT_SEPARATOR
from .transaction import (
    BankTransaction,
    LedgerTransaction,
    NormalizedTransaction,
    TransactionOrigin,
)


def _join_context(*segments: Optional[str]) -> str:
    """Join the present segments; absent or blank ones leave no separator behind."""
    return CONTEXT_SEPARATOR.join(s for s in segments if s and s.strip())


def bank_reconciliation_context(txn: BankTransaction, include_category: bool = True) -> str:
    """
    Description, then memo, then merchant name.

    With ``include_category`` a category already inferred for the transaction
    is appended so it shows up in audit output.
    """
    category_segment = None
    if include_category and txn.has_category_inferred:
        category_segment = txn.inferred_category.name
    return _join_context(txn.description, txn.memo, txn.merchant_name, category_segment)


def ledger_reconciliation_context(txn: LedgerTransaction) -> str:
    category_segment = None if txn.category.is_unknown else txn.category.name
    return _join_context(txn.payee_name, category_segment)


def normalize_bank_transaction(txn: BankTransaction) -> NormalizedTransaction:
    return NormalizedTransaction(
        id=txn.id,
        account_id=txn.account_id,
        date=txn.date,
        amount=txn.amount,
        display_name=txn.display_name,
        category=txn.inferred_category,
        source=TransactionOrigin.BANK,
        reconciliation_context=bank_reconciliation_context(txn),
    )


def normalize_ledger_transaction(txn: LedgerTransaction) -> NormalizedTransaction:
    return NormalizedTransaction(
        id=txn.id,
        account_id=txn.account_id,
        date=txn.date,
        amount=txn.amount,
        display_name=txn.display_name,
        category=txn.category,
        source=TransactionOrigin.LEDGER,
        reconciliation_context=ledger_reconciliation_context(txn),
    )


def ensure_unique_ids(
    transactions: Iterable[NormalizedTransaction],
) -> Sequence[NormalizedTransaction]:
    """
    Reject a run in which one source reports the same identifier twice.

    Identifier plus origin must be unique across a reconciliation run.
    """
    seen: set[tuple[TransactionOrigin, str]] = set()
    result = []
    for txn in transactions:
        key = (txn.source, txn.id)
        if key in seen:
            raise ValidationError(
                f"Duplicate {txn.source.value} transaction id: {txn.id}", field="id"
            )
        seen.add(key)
        result.append(txn)
    return result
