"""
Reconciliation engine: decides which bank transactions the ledger already has.

Each bank transaction is looked up in a MatchingIndex built from the ledger
side, costing O(log m) per lookup plus a scan of its (small) bucket, instead
of comparing every bank transaction against every ledger transaction.
"""

from datetime import datetime
from typing import Optional, Sequence
import logging

from ..config import MAX_TOLERANCE_DAYS, ReconConfig
from ..models.adapters import (
    ensure_unique_ids,
    normalize_bank_transaction,
    normalize_ledger_transaction,
)
from ..models.transaction import (
    BankTransaction,
    LedgerTransaction,
    MatchedPair,
    ReconciliationStrategy,
    ReconciliationSummary,
    TransactionMatchResult,
)
from ..utils.exceptions import ConfigurationError
from .index import MatchingIndex

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_DAYS = 3


class ReconciliationEngine:
    """
    Classifies bank transactions as matched or missing from the ledger.

    A ledger transaction satisfies at most one bank transaction, so bank
    transactions are processed strictly in input order: an earlier bank
    transaction claiming a ledger entry makes it unavailable to later ones.
    """

    def __init__(
        self,
        tolerance_days: int = DEFAULT_TOLERANCE_DAYS,
        strategy: ReconciliationStrategy = ReconciliationStrategy.RANGE,
    ):
        """
        Initialize the reconciliation engine.

        Args:
            tolerance_days: Maximum days between matching bank and ledger dates
            strategy: STRICT ignores the tolerance and requires the same day
        """
        if not 0 <= tolerance_days <= MAX_TOLERANCE_DAYS:
            raise ConfigurationError(
                f"tolerance_days must be between 0 and {MAX_TOLERANCE_DAYS}, got {tolerance_days}"
            )
        self.strategy = strategy
        self.tolerance_days = 0 if strategy == ReconciliationStrategy.STRICT else tolerance_days

    @classmethod
    def from_config(
        cls,
        config: ReconConfig,
        strategy: Optional[ReconciliationStrategy] = None,
    ) -> "ReconciliationEngine":
        return cls(
            tolerance_days=config.matching.tolerance_days,
            strategy=strategy or config.matching.strategy,
        )

    def reconcile(
        self,
        bank_transactions: Sequence[BankTransaction],
        ledger_transactions: Sequence[LedgerTransaction],
    ) -> TransactionMatchResult:
        """
        Match bank transactions against ledger transactions.

        Args:
            bank_transactions: Bank feed transactions, in the order to report them
            ledger_transactions: Transactions already recorded in the ledger

        Returns:
            Matched and missing bank transactions, each in input order

        Raises:
            ValidationError: If either side repeats a transaction id
        """
        start_time = datetime.now()
        logger.info(
            f"Starting reconciliation: {len(bank_transactions)} bank txns, "
            f"{len(ledger_transactions)} ledger txns, tolerance {self.tolerance_days} day(s)"
        )

        normalized_bank = ensure_unique_ids(
            normalize_bank_transaction(t) for t in bank_transactions
        )
        normalized_ledger = ensure_unique_ids(
            normalize_ledger_transaction(t) for t in ledger_transactions
        )
        ledger_by_id = {t.id: t for t in ledger_transactions}

        index = MatchingIndex.build(normalized_ledger)

        matched: list[BankTransaction] = []
        missing: list[BankTransaction] = []
        pairs: list[MatchedPair] = []

        for bank_txn, normalized in zip(bank_transactions, normalized_bank):
            candidate = index.closest_within(normalized, self.tolerance_days)
            if candidate is None:
                missing.append(bank_txn)
                continue

            index.claim(candidate)
            matched.append(bank_txn)
            pairs.append(
                MatchedPair(
                    bank_transaction=bank_txn,
                    ledger_transaction=ledger_by_id[candidate.id],
                    date_variance_days=abs((candidate.date - normalized.date).days),
                )
            )
            logger.debug(f"Matched bank {bank_txn.id} -> ledger {candidate.id}")

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Reconciliation complete in {elapsed:.2f}s: {len(matched)} matched, "
            f"{len(missing)} missing from ledger, {len(index)} ledger txns unclaimed"
        )

        return TransactionMatchResult(
            matched=tuple(matched),
            missing_from_ledger=tuple(missing),
            pairs=tuple(pairs),
        )

    def generate_summary(
        self,
        match_result: TransactionMatchResult,
        total_ledger_transactions: int,
        account_id: Optional[str] = None,
        categorized_count: int = 0,
        processing_time: float = 0.0,
        config_file_used: Optional[str] = None,
        period: Optional[tuple] = None,
    ) -> ReconciliationSummary:
        """
        Generate a summary of the reconciliation results.

        Args:
            match_result: Output of ``reconcile``
            total_ledger_transactions: Number of ledger transactions considered
            account_id: Account reconciled, when the run covered a single account
            categorized_count: Missing transactions that received a named category
            processing_time: Time taken in seconds
            config_file_used: Path of the configuration file, if any
            period: Explicit (start, end) dates; derived from bank dates otherwise

        Returns:
            Reconciliation summary object
        """
        if period is None:
            all_dates = [
                t.date for t in match_result.matched + match_result.missing_from_ledger
            ]
            period = (min(all_dates), max(all_dates)) if all_dates else (None, None)

        return ReconciliationSummary(
            account_id=account_id,
            reconciliation_date=datetime.now(),
            period_start=period[0],
            period_end=period[1],
            strategy=self.strategy,
            tolerance_days=self.tolerance_days,
            total_bank_transactions=match_result.total_bank_transactions,
            total_ledger_transactions=total_ledger_transactions,
            matched_count=match_result.matched_count,
            missing_from_ledger_count=match_result.missing_count,
            categorized_count=categorized_count,
            processing_time_seconds=processing_time,
            config_file_used=config_file_used,
        )
