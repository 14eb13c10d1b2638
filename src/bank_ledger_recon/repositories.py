"""
Ports through which the reconciliation service loads its inputs.

Real implementations (bank feeds, the ledger's remote API, a mapping store)
live outside this package. The in-memory versions serve the CLI, which reads
everything from files up front, and the tests.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable, Sequence

from .models.category import CategoryMapping
from .models.transaction import BankTransaction, LedgerTransaction


class BankTransactionRepository(ABC):
    """Source of bank feed transactions."""

    @abstractmethod
    def find_by_account_and_date_range(
        self, account_id: str, from_date: date, to_date: date
    ) -> Sequence[BankTransaction]:
        """Transactions of one account dated within [from_date, to_date]."""
        pass


class LedgerTransactionRepository(ABC):
    """Source of transactions already recorded in the budgeting ledger."""

    @abstractmethod
    def find_by_account_and_date_range(
        self, account_id: str, from_date: date, to_date: date
    ) -> Sequence[LedgerTransaction]:
        """
        Transactions of one account dated within [from_date, to_date].

        Implementations backed by a remote API raise LedgerApiError on failure.
        """
        pass


class CategoryMappingRepository(ABC):
    """Source of the learned category mapping catalog."""

    @abstractmethod
    def find_all(self) -> Sequence[CategoryMapping]:
        """All mappings, in a stable order."""
        pass


class InMemoryBankTransactionRepository(BankTransactionRepository):
    def __init__(self, transactions: Iterable[BankTransaction]):
        self._transactions = tuple(transactions)

    def find_by_account_and_date_range(
        self, account_id: str, from_date: date, to_date: date
    ) -> Sequence[BankTransaction]:
        return [
            t
            for t in self._transactions
            if t.account_id == account_id and from_date <= t.date <= to_date
        ]


class InMemoryLedgerTransactionRepository(LedgerTransactionRepository):
    def __init__(self, transactions: Iterable[LedgerTransaction]):
        self._transactions = tuple(transactions)

    def find_by_account_and_date_range(
        self, account_id: str, from_date: date, to_date: date
    ) -> Sequence[LedgerTransaction]:
        return [
            t
            for t in self._transactions
            if t.account_id == account_id and from_date <= t.date <= to_date
        ]


class InMemoryCategoryMappingRepository(CategoryMappingRepository):
    def __init__(self, mappings: Iterable[CategoryMapping] = ()):
        self._mappings = tuple(mappings)

    def find_all(self) -> Sequence[CategoryMapping]:
        return self._mappings
