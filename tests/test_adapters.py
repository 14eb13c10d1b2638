from decimal import Decimal

import pytest

from bank_ledger_recon.models import (
    Category,
    MatchCandidateKey,
    TransactionOrigin,
    normalize_bank_transaction,
    normalize_ledger_transaction,
)
from bank_ledger_recon.models.adapters import (
    bank_reconciliation_context,
    ensure_unique_ids,
    ledger_reconciliation_context,
)
from bank_ledger_recon.utils.exceptions import ValidationError


def test_bank_adapter_exposes_normalized_fields(make_bank):
    txn = make_bank(
        id="b1",
        amount="-4.50",
        description="STARBUCKS #123",
        merchant_name="Starbucks",
    )
    normalized = normalize_bank_transaction(txn)

    assert normalized.id == "b1"
    assert normalized.account_id == "A"
    assert normalized.amount == Decimal("-4.50")
    assert normalized.display_name == "Starbucks"
    assert normalized.source == TransactionOrigin.BANK
    assert normalized.category.is_unknown
    assert normalized.candidate_key == MatchCandidateKey("A", Decimal("-4.50"))


def test_bank_context_without_memo_has_no_empty_segment(make_bank):
    txn = make_bank(description="STARBUCKS #123", merchant_name="Starbucks")
    assert bank_reconciliation_context(txn) == "STARBUCKS #123 | Starbucks"


def test_bank_context_orders_description_memo_merchant(make_bank):
    txn = make_bank(description="POS 4471", memo="latte", merchant_name="Starbucks")
    assert bank_reconciliation_context(txn) == "POS 4471 | latte | Starbucks"


def test_bank_context_description_only(make_bank):
    assert bank_reconciliation_context(make_bank(description="ATM")) == "ATM"


def test_bank_context_appends_known_category_for_audit_only(make_bank):
    txn = make_bank(description="ATM", inferred_category=Category.inferred("Cash"))
    assert bank_reconciliation_context(txn) == "ATM | Cash"
    assert bank_reconciliation_context(txn, include_category=False) == "ATM"


def test_ledger_adapter(make_ledger):
    txn = make_ledger(payee_name="Starbucks", category=Category.ledger("c-1", "Dining"))
    normalized = normalize_ledger_transaction(txn)

    assert normalized.source == TransactionOrigin.LEDGER
    assert normalized.display_name == "Starbucks"
    assert normalized.category.name == "Dining"
    assert normalized.reconciliation_context == "Starbucks | Dining"


def test_ledger_context_omits_absent_segments(make_ledger):
    assert ledger_reconciliation_context(make_ledger()) == ""
    assert ledger_reconciliation_context(make_ledger(payee_name="Shell")) == "Shell"


def test_can_potentially_match_requires_different_sources(make_bank, make_ledger):
    bank = normalize_bank_transaction(make_bank())
    ledger = normalize_ledger_transaction(make_ledger())
    other_account = normalize_ledger_transaction(make_ledger(account_id="B"))

    assert bank.can_potentially_match(ledger)
    assert not bank.can_potentially_match(bank)
    assert not bank.can_potentially_match(other_account)


def test_amount_key_ignores_trailing_zeros(make_bank, make_ledger):
    bank = normalize_bank_transaction(make_bank(amount="-4.5"))
    ledger = normalize_ledger_transaction(make_ledger(amount="-4.50"))
    assert bank.candidate_key == ledger.candidate_key
    assert hash(bank.candidate_key) == hash(ledger.candidate_key)


def test_ensure_unique_ids_rejects_duplicates_within_a_source(make_bank):
    txns = [normalize_bank_transaction(make_bank(id="b1")) for _ in range(2)]
    with pytest.raises(ValidationError) as excinfo:
        ensure_unique_ids(txns)
    assert excinfo.value.field == "id"


def test_ensure_unique_ids_allows_same_id_across_sources(make_bank, make_ledger):
    txns = [
        normalize_bank_transaction(make_bank(id="x")),
        normalize_ledger_transaction(make_ledger(id="x")),
    ]
    assert len(ensure_unique_ids(txns)) == 2
