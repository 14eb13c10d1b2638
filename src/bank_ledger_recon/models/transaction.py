"""Data models for bank and ledger transactions and reconciliation results."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, NamedTuple, Optional

from ..utils.exceptions import ValidationError
from .category import Category, CategoryInferenceResult


class TransactionOrigin(Enum):
    """Source system for the transaction."""

    BANK = "bank"
    LEDGER = "ledger"


class ClearedStatus(Enum):
    """Cleared state of a transaction in the budgeting ledger."""

    CLEARED = "cleared"
    UNCLEARED = "uncleared"
    RECONCILED = "reconciled"


class ReconciliationStrategy(Enum):
    """How far apart in days a bank and ledger transaction may be."""

    STRICT = "strict"  # same calendar day only
    RANGE = "range"  # within the configured tolerance window


def _require_text(value: Any, field_name: str, record: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{record}: {field_name} is required", field=field_name)
    return str(value).strip()


def _require_date(value: Any, field_name: str, record: str) -> date:
    # pandas NaT is a datetime that compares unequal to itself
    if value is None or value != value:
        raise ValidationError(f"{record}: {field_name} is required", field=field_name)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as e:
            raise ValidationError(
                f"{record}: invalid {field_name} {value!r}", field=field_name
            ) from e
    raise ValidationError(f"{record}: invalid {field_name} {value!r}", field=field_name)


def _require_amount(value: Any, field_name: str, record: str) -> Decimal:
    """Coerce to an exact Decimal; floats are refused because they are lossy."""
    if value is None:
        raise ValidationError(f"{record}: {field_name} is required", field=field_name)
    if isinstance(value, (bool, float)):
        raise ValidationError(
            f"{record}: {field_name} must be an exact decimal, got {type(value).__name__}",
            field=field_name,
        )
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(
            f"{record}: invalid {field_name} {value!r}", field=field_name
        ) from e
    if not amount.is_finite():
        raise ValidationError(f"{record}: {field_name} must be finite", field=field_name)
    if amount.is_zero() and amount.is_signed():
        raise ValidationError(
            f"{record}: {field_name} cannot be negative zero", field=field_name
        )
    return amount


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class BankTransaction:
    """
    Transaction as reported by the bank feed.

    Immutable once constructed; missing or malformed required fields raise
    ValidationError here, before the record reaches matching or inference.
    """

    id: str
    account_id: str
    date: date
    amount: Decimal
    description: str
    merchant_name: Optional[str] = None
    memo: Optional[str] = None
    transaction_type: Optional[str] = None
    reference: Optional[str] = None
    inferred_category: Category = field(default_factory=Category.unknown)

    def __post_init__(self) -> None:
        record = f"Bank transaction {self.id!r}"
        object.__setattr__(self, "id", _require_text(self.id, "id", record))
        object.__setattr__(
            self, "account_id", _require_text(self.account_id, "account_id", record)
        )
        object.__setattr__(self, "date", _require_date(self.date, "date", record))
        object.__setattr__(self, "amount", _require_amount(self.amount, "amount", record))
        if self.description is None:
            raise ValidationError(f"{record}: description is required", field="description")
        object.__setattr__(self, "description", str(self.description).strip())
        object.__setattr__(self, "merchant_name", _optional_text(self.merchant_name))
        object.__setattr__(self, "memo", _optional_text(self.memo))
        if self.inferred_category is None:
            object.__setattr__(self, "inferred_category", Category.unknown())

    @property
    def display_name(self) -> str:
        """Merchant name if present, otherwise the raw description."""
        return self.merchant_name or self.description

    @property
    def is_debit(self) -> bool:
        return self.amount < 0 or (self.transaction_type or "").upper() == "DEBIT"

    @property
    def has_category_inferred(self) -> bool:
        return not self.inferred_category.is_unknown

    def with_inferred_category(self, category: Category) -> "BankTransaction":
        return replace(self, inferred_category=category)


@dataclass(frozen=True)
class LedgerTransaction:
    """Transaction already recorded in the budgeting ledger."""

    id: str
    account_id: str
    date: date
    amount: Decimal
    payee_name: Optional[str] = None
    category: Category = field(default_factory=Category.unknown)
    cleared_status: ClearedStatus = ClearedStatus.UNCLEARED
    approved: bool = True

    def __post_init__(self) -> None:
        record = f"Ledger transaction {self.id!r}"
        object.__setattr__(self, "id", _require_text(self.id, "id", record))
        object.__setattr__(
            self, "account_id", _require_text(self.account_id, "account_id", record)
        )
        object.__setattr__(self, "date", _require_date(self.date, "date", record))
        object.__setattr__(self, "amount", _require_amount(self.amount, "amount", record))
        object.__setattr__(self, "payee_name", _optional_text(self.payee_name))
        if self.category is None:
            object.__setattr__(self, "category", Category.unknown())

    @property
    def display_name(self) -> str:
        return self.payee_name or "Unknown Payee"

    @property
    def is_reconciled(self) -> bool:
        return self.cleared_status == ClearedStatus.RECONCILED


class MatchCandidateKey(NamedTuple):
    """Bucketing key: transactions only match within one account and exact amount."""

    account_id: str
    amount: Decimal


@dataclass(frozen=True)
class NormalizedTransaction:
    """
    Common view of a bank or ledger transaction.

    This is the only shape the matching index, the reconciliation engine and
    the category inference engine work with. ``source`` tags which adapter
    produced it.
    """

    id: str
    account_id: str
    date: date
    amount: Decimal
    display_name: str
    category: Category
    source: TransactionOrigin
    reconciliation_context: str

    @property
    def candidate_key(self) -> MatchCandidateKey:
        return MatchCandidateKey(self.account_id, self.amount)

    def can_potentially_match(self, other: "NormalizedTransaction") -> bool:
        """Fast pre-filter: same account, same amount, different sources."""
        return (
            self.account_id == other.account_id
            and self.amount == other.amount
            and self.source != other.source
        )


@dataclass(frozen=True)
class MatchedPair:
    """A bank transaction and the ledger transaction that satisfied it."""

    bank_transaction: BankTransaction
    ledger_transaction: LedgerTransaction
    date_variance_days: int

    @property
    def is_exact_date(self) -> bool:
        return self.date_variance_days == 0


@dataclass(frozen=True)
class TransactionMatchResult:
    """
    Partition of the bank transactions of one run into matched and missing.

    Both sequences keep the original bank-transaction order.
    """

    matched: tuple[BankTransaction, ...] = ()
    missing_from_ledger: tuple[BankTransaction, ...] = ()
    pairs: tuple[MatchedPair, ...] = ()

    @property
    def matched_count(self) -> int:
        return len(self.matched)

    @property
    def missing_count(self) -> int:
        return len(self.missing_from_ledger)

    @property
    def total_bank_transactions(self) -> int:
        return self.matched_count + self.missing_count


@dataclass(frozen=True)
class ReconciliationRequest:
    """Account and inclusive date range to reconcile."""

    account_id: str
    from_date: date
    to_date: date
    strategy: Optional[ReconciliationStrategy] = None

    def __post_init__(self) -> None:
        record = "Reconciliation request"
        object.__setattr__(
            self, "account_id", _require_text(self.account_id, "account_id", record)
        )
        object.__setattr__(
            self, "from_date", _require_date(self.from_date, "from_date", record)
        )
        object.__setattr__(self, "to_date", _require_date(self.to_date, "to_date", record))
        if self.from_date > self.to_date:
            raise ValidationError(
                f"From date {self.from_date} cannot be after to date {self.to_date}",
                field="from_date",
            )

    @classmethod
    def for_last_days(
        cls,
        account_id: str,
        days: int = 30,
        strategy: Optional[ReconciliationStrategy] = None,
        today: Optional[date] = None,
    ) -> "ReconciliationRequest":
        to_date = today or date.today()
        return cls(account_id, to_date - timedelta(days=days), to_date, strategy)

    @classmethod
    def for_current_month(
        cls,
        account_id: str,
        strategy: Optional[ReconciliationStrategy] = None,
        today: Optional[date] = None,
    ) -> "ReconciliationRequest":
        to_date = today or date.today()
        return cls(account_id, to_date.replace(day=1), to_date, strategy)

    @property
    def day_count(self) -> int:
        """Number of days in the period, counting both ends."""
        return (self.to_date - self.from_date).days + 1

    def contains(self, value: date) -> bool:
        return self.from_date <= value <= self.to_date


@dataclass
class ReconciliationSummary:
    """Summary of one reconciliation run."""

    account_id: Optional[str]
    reconciliation_date: datetime
    period_start: Optional[date]
    period_end: Optional[date]
    strategy: ReconciliationStrategy
    tolerance_days: int

    total_bank_transactions: int
    total_ledger_transactions: int
    matched_count: int
    missing_from_ledger_count: int
    categorized_count: int = 0

    processing_time_seconds: float = 0.0
    config_file_used: Optional[str] = None

    def __post_init__(self) -> None:
        for name in (
            "total_bank_transactions",
            "total_ledger_transactions",
            "matched_count",
            "missing_from_ledger_count",
            "categorized_count",
        ):
            if getattr(self, name) < 0:
                raise ValidationError(f"{name} cannot be negative", field=name)

    @property
    def reconciliation_percentage(self) -> float:
        """Percentage of bank transactions found in the ledger."""
        if self.total_bank_transactions == 0:
            return 100.0
        return self.matched_count / self.total_bank_transactions * 100.0

    @property
    def is_complete(self) -> bool:
        return self.missing_from_ledger_count == 0


@dataclass(frozen=True)
class CategorizedTransaction:
    """A missing bank transaction annotated with its inferred category."""

    transaction: BankTransaction
    inference: CategoryInferenceResult

    @property
    def category(self) -> Category:
        return self.inference.category


@dataclass(frozen=True)
class ReconciliationResult:
    """Everything the orchestrator hands back for one run."""

    match_result: TransactionMatchResult
    categorized: tuple[CategorizedTransaction, ...]
    summary: ReconciliationSummary

    @property
    def matched(self) -> tuple[BankTransaction, ...]:
        return self.match_result.matched

    @property
    def missing_from_ledger(self) -> tuple[BankTransaction, ...]:
        return self.match_result.missing_from_ledger

    @property
    def is_fully_reconciled(self) -> bool:
        return not self.match_result.missing_from_ledger

    def inference_for(self, transaction_id: str) -> Optional[CategoryInferenceResult]:
        for item in self.categorized:
            if item.transaction.id == transaction_id:
                return item.inference
        return None
