"""
Reconciliation orchestrator.

Loads inputs through the repository ports, runs the matching engine, infers
categories for what the ledger is missing and assembles the result. All I/O
happens here, before the engines are invoked.
"""

from datetime import datetime
from typing import Callable, Optional, Sequence
import logging
import time

from .config import ReconConfig
from .inference.engine import CategoryInferenceEngine
from .matching.engine import ReconciliationEngine
from .models.category import CategoryMapping
from .models.transaction import (
    BankTransaction,
    LedgerTransaction,
    ReconciliationRequest,
    ReconciliationResult,
    ReconciliationStrategy,
)
from .repositories import (
    BankTransactionRepository,
    CategoryMappingRepository,
    LedgerTransactionRepository,
)
from .utils.exceptions import LedgerApiError, ReconciliationError

logger = logging.getLogger(__name__)


def run_reconciliation(
    bank_transactions: Sequence[BankTransaction],
    ledger_transactions: Sequence[LedgerTransaction],
    mappings: Sequence[CategoryMapping],
    config: ReconConfig,
    strategy: Optional[ReconciliationStrategy] = None,
    account_id: Optional[str] = None,
    period: Optional[tuple] = None,
) -> ReconciliationResult:
    """
    Match, then categorize the bank transactions the ledger does not have.

    Every call builds its own engines and matching index, so nothing carries
    over between runs.
    """
    start_time = datetime.now()

    engine = ReconciliationEngine.from_config(config, strategy)
    match_result = engine.reconcile(bank_transactions, ledger_transactions)

    inference_engine = CategoryInferenceEngine.from_config(config)
    categorized = inference_engine.infer_all(match_result.missing_from_ledger, tuple(mappings))

    summary = engine.generate_summary(
        match_result,
        total_ledger_transactions=len(ledger_transactions),
        account_id=account_id,
        categorized_count=sum(1 for c in categorized if c.inference.has_match),
        processing_time=(datetime.now() - start_time).total_seconds(),
        config_file_used=config.config_file_path,
        period=period,
    )
    return ReconciliationResult(
        match_result=match_result,
        categorized=categorized,
        summary=summary,
    )


class ReconciliationService:
    """Runs one reconciliation per request against the configured ports."""

    def __init__(
        self,
        bank_repository: BankTransactionRepository,
        ledger_repository: LedgerTransactionRepository,
        mapping_repository: CategoryMappingRepository,
        config: Optional[ReconConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.bank_repository = bank_repository
        self.ledger_repository = ledger_repository
        self.mapping_repository = mapping_repository
        self.config = config or ReconConfig()
        self._sleep = sleep

    def reconcile(self, request: ReconciliationRequest) -> ReconciliationResult:
        """
        Reconcile one account over the requested period.

        Retryable ledger API failures (5xx, 429) are retried up to
        ``service.max_attempts`` times; every attempt reloads its inputs.

        Raises:
            LedgerApiError: When the ledger cannot be read
            ValidationError: When a loaded record is malformed; never retried
        """
        max_attempts = self.config.service.max_attempts
        backoff = self.config.service.retry_backoff_seconds

        attempt = 1
        while True:
            try:
                return self._run(request)
            except LedgerApiError as e:
                if not e.is_retryable or attempt >= max_attempts:
                    logger.error(
                        f"Ledger API failure for account {request.account_id} "
                        f"(status {e.status_code}, attempt {attempt}/{max_attempts}): {e}"
                    )
                    raise
                delay = backoff * attempt
                logger.warning(
                    f"Ledger API returned {e.status_code}; retrying in {delay:.1f}s "
                    f"(attempt {attempt + 1}/{max_attempts})"
                )
                self._sleep(delay)
                attempt += 1

    def _run(self, request: ReconciliationRequest) -> ReconciliationResult:
        logger.info(
            f"Reconciling account {request.account_id} "
            f"from {request.from_date} to {request.to_date}"
        )
        bank_transactions = list(
            self.bank_repository.find_by_account_and_date_range(
                request.account_id, request.from_date, request.to_date
            )
        )
        ledger_transactions = self._load_ledger(request)
        mappings = tuple(self.mapping_repository.find_all())

        return run_reconciliation(
            bank_transactions,
            ledger_transactions,
            mappings,
            self.config,
            strategy=request.strategy,
            account_id=request.account_id,
            period=(request.from_date, request.to_date),
        )

    def _load_ledger(self, request: ReconciliationRequest) -> list[LedgerTransaction]:
        try:
            return list(
                self.ledger_repository.find_by_account_and_date_range(
                    request.account_id, request.from_date, request.to_date
                )
            )
        except ReconciliationError:
            raise
        except Exception as e:
            raise LedgerApiError.from_cause(
                f"Failed to load ledger transactions for account {request.account_id}: {e}",
                e,
            ) from e
