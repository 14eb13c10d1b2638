from datetime import date
from decimal import Decimal

import pytest

from bank_ledger_recon.config import ReconConfig
from bank_ledger_recon.models import ClearedStatus
from bank_ledger_recon.parsers import BankCsvParser, LedgerCsvParser, load_category_mappings
from bank_ledger_recon.parsers.common import parse_amount, parse_date
from bank_ledger_recon.utils.exceptions import BankParseError, LedgerParseError, MappingLoadError

BANK_HEADER = "Transaction ID,Account,Date,Amount,Description,Merchant,Memo,Type,Reference\n"
LEDGER_HEADER = "Transaction ID,Account,Date,Amount,Payee,Category,Cleared,Approved\n"


@pytest.fixture
def config():
    return ReconConfig()


def _write(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content)
    return path


# ---- Bank CSV ------------------------------------------------------------------


def test_parse_bank_file(tmp_path, config):
    path = _write(
        tmp_path,
        "bank.csv",
        BANK_HEADER
        + "b1,A,2024-01-15,-4.50,STARBUCKS #123,Starbucks,,debit,REF1\n"
        + 'b2,A,2024-01-16,"$1,200.00",PAYROLL,,January,,\n',
    )

    transactions = BankCsvParser(config).parse_file(path)

    assert [t.id for t in transactions] == ["b1", "b2"]
    first, second = transactions
    assert first.date == date(2024, 1, 15)
    assert first.amount == Decimal("-4.50")
    assert first.merchant_name == "Starbucks"
    assert first.memo is None
    assert first.reference == "REF1"
    assert second.amount == Decimal("1200.00")
    assert second.memo == "January"
    assert second.inferred_category.is_unknown


def test_bank_custom_columns_and_date_format(tmp_path):
    config = ReconConfig()
    config.input.bank.date_format = "%m/%d/%Y"
    config.input.bank.column_mappings.update({"id": "Ref", "description": "Details"})
    path = _write(
        tmp_path,
        "bank.csv",
        "Ref,Account,Date,Amount,Details\nx9,A,01/31/2024,(12.00),ATM WITHDRAWAL\n",
    )

    (txn,) = BankCsvParser(config).parse_file(path)

    assert txn.id == "x9"
    assert txn.date == date(2024, 1, 31)
    assert txn.amount == Decimal("-12.00")
    assert txn.description == "ATM WITHDRAWAL"


def test_bank_missing_columns(tmp_path, config):
    path = _write(tmp_path, "bank.csv", "Transaction ID,Date,Amount\nb1,2024-01-15,-1.00\n")

    with pytest.raises(BankParseError, match="Account"):
        BankCsvParser(config).parse_file(path)


def test_bank_bad_row_fails_whole_file(tmp_path, config):
    path = _write(
        tmp_path,
        "bank.csv",
        BANK_HEADER
        + "b1,A,2024-01-15,-4.50,COFFEE,,,,\n"
        + "b2,A,2024-01-16,,LUNCH,,,,\n",
    )

    with pytest.raises(BankParseError, match="Line 3") as excinfo:
        BankCsvParser(config).parse_file(path)

    assert excinfo.value.__cause__.field == "amount"


def test_bank_unparseable_amount(tmp_path, config):
    path = _write(tmp_path, "bank.csv", BANK_HEADER + "b1,A,2024-01-15,abc,COFFEE,,,,\n")

    with pytest.raises(BankParseError) as excinfo:
        BankCsvParser(config).parse_file(path)

    assert excinfo.value.__cause__.field == "amount"


def test_bank_missing_file(tmp_path, config):
    with pytest.raises(BankParseError):
        BankCsvParser(config).parse_file(tmp_path / "absent.csv")


# ---- Ledger CSV ----------------------------------------------------------------


def test_parse_ledger_file(tmp_path, config):
    path = _write(
        tmp_path,
        "ledger.csv",
        LEDGER_HEADER
        + "l1,A,2024-01-11,-20.00,Shell,Fuel,cleared,true\n"
        + "l2,A,2024-01-12,-5.00,,,,no\n",
    )

    first, second = LedgerCsvParser(config).parse_file(path)

    assert first.category.name == "Fuel"
    assert first.category.is_explicitly_assigned
    assert first.cleared_status == ClearedStatus.CLEARED
    assert first.approved
    assert second.category.is_unknown
    assert second.display_name == "Unknown Payee"
    assert second.cleared_status == ClearedStatus.UNCLEARED
    assert not second.approved


def test_ledger_invalid_cleared_status(tmp_path, config):
    path = _write(tmp_path, "ledger.csv", LEDGER_HEADER + "l1,A,2024-01-11,-20.00,,,pending,\n")

    with pytest.raises(LedgerParseError, match="Line 2") as excinfo:
        LedgerCsvParser(config).parse_file(path)

    assert excinfo.value.__cause__.field == "cleared_status"


def test_ledger_missing_columns(tmp_path, config):
    path = _write(tmp_path, "ledger.csv", "Transaction ID,Account\nl1,A\n")

    with pytest.raises(LedgerParseError, match="Missing required columns"):
        LedgerCsvParser(config).parse_file(path)


# ---- Amount parsing ------------------------------------------------------------


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("-4.50", Decimal("-4.50")),
        ("$1,234.56", Decimal("1234.56")),
        ("(99.10)", Decimal("-99.10")),
        (" 7 ", Decimal("7")),
    ],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


def test_parse_amount_rejects_text():
    assert parse_amount("n/a") is None
    assert parse_amount(None) is None


# ---- Mapping catalog -----------------------------------------------------------


def test_load_category_mappings(tmp_path):
    path = _write(
        tmp_path,
        "mappings.yaml",
        "mappings:\n"
        "  - category: Dining\n"
        "    patterns: [starbucks, 'Blue Bottle']\n"
        "    confidence: 0.9\n"
        "    occurrences: 12\n"
        "    id: dining-1\n"
        "  - category: Fuel\n"
        "    patterns: shell\n",
    )

    dining, fuel = load_category_mappings(path)

    assert dining.id == "dining-1"
    assert dining.patterns == ("starbucks", "blue bottle")
    assert dining.occurrence_count == 12
    assert fuel.patterns == ("shell",)
    assert fuel.confidence == 1.0


def test_load_category_mappings_accepts_bare_list(tmp_path):
    path = _write(tmp_path, "mappings.yaml", "- category: Rent\n  patterns: [rent]\n")
    (mapping,) = load_category_mappings(path)
    assert mapping.category.name == "Rent"


@pytest.mark.parametrize(
    "content",
    [
        "mappings:\n  - category: Dining\n    patterns: []\n",
        "mappings:\n  - patterns: [x]\n",
        "mappings:\n  - category: Dining\n    patterns: [x]\n    confidence: high\n",
        "mappings:\n  - just a string\n",
        "mappings: {category: Dining}\n",
    ],
)
def test_load_category_mappings_rejects_invalid_entries(tmp_path, content):
    path = _write(tmp_path, "mappings.yaml", content)
    with pytest.raises(MappingLoadError):
        load_category_mappings(path)


@pytest.mark.parametrize("raw_date", ["NaT", "nat"])
def test_bank_missing_timestamp_text_is_rejected(tmp_path, config, raw_date):
    path = _write(tmp_path, "bank.csv", BANK_HEADER + f"b1,A,{raw_date},-4.50,X,,,,\n")

    with pytest.raises(BankParseError, match="Line 2") as excinfo:
        BankCsvParser(config).parse_file(path)

    assert excinfo.value.__cause__.field == "date"


def test_parse_date_returns_none_for_missing_timestamp():
    assert parse_date("NaT", "%Y-%m-%d") is None


@pytest.mark.parametrize("category", ["2024", "true", "[Dining]"])
def test_load_category_mappings_requires_text_category(tmp_path, category):
    path = _write(
        tmp_path, "mappings.yaml", f"mappings:\n  - category: {category}\n    patterns: [x]\n"
    )
    with pytest.raises(MappingLoadError, match="category must be text"):
        load_category_mappings(path)


@pytest.mark.parametrize("occurrences", ["1.7", "true", "'1.5'"])
def test_load_category_mappings_rejects_fractional_occurrences(tmp_path, occurrences):
    path = _write(
        tmp_path,
        "mappings.yaml",
        f"mappings:\n  - category: Dining\n    patterns: [x]\n    occurrences: {occurrences}\n",
    )
    with pytest.raises(MappingLoadError):
        load_category_mappings(path)


def test_load_category_mappings_accepts_whole_float_occurrences(tmp_path):
    path = _write(
        tmp_path,
        "mappings.yaml",
        "mappings:\n  - category: Dining\n    patterns: [x]\n    occurrences: 4.0\n",
    )
    (mapping,) = load_category_mappings(path)
    assert mapping.occurrence_count == 4
