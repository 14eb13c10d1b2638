"""Shared builders for bank and ledger transactions.

Tests mostly care about one or two fields of a transaction, so the factory
fixtures fill everything else with valid defaults.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Callable

import pytest

from bank_ledger_recon.models import BankTransaction, LedgerTransaction


@pytest.fixture
def make_bank() -> Callable[..., BankTransaction]:
    def _make(
        id: str = "b1",
        account_id: str = "A",
        date: Any = date(2024, 1, 15),
        amount: Any = "-20.00",
        description: str = "CARD PURCHASE",
        **kwargs: Any,
    ) -> BankTransaction:
        return BankTransaction(
            id=id,
            account_id=account_id,
            date=date,
            amount=Decimal(amount) if isinstance(amount, str) else amount,
            description=description,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_ledger() -> Callable[..., LedgerTransaction]:
    def _make(
        id: str = "l1",
        account_id: str = "A",
        date: Any = date(2024, 1, 15),
        amount: Any = "-20.00",
        **kwargs: Any,
    ) -> LedgerTransaction:
        return LedgerTransaction(
            id=id,
            account_id=account_id,
            date=date,
            amount=Decimal(amount) if isinstance(amount, str) else amount,
            **kwargs,
        )

    return _make
