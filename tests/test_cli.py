import logging

import pytest
from click.testing import CliRunner

from bank_ledger_recon.cli import main
from bank_ledger_recon.utils.logging_config import PACKAGE_LOGGER


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def detach_cli_log_handlers():
    # the CLI binds handlers to the runner's captured streams
    yield
    logging.getLogger(PACKAGE_LOGGER).handlers = []


@pytest.fixture
def inputs(tmp_path):
    bank = tmp_path / "bank.csv"
    bank.write_text(
        "Transaction ID,Account,Date,Amount,Description,Merchant\n"
        "b1,A,2024-01-15,-4.50,STARBUCKS #123,Starbucks\n"
        "b2,A,2024-01-10,-20.00,SHELL OIL,\n"
    )
    ledger = tmp_path / "ledger.csv"
    ledger.write_text(
        "Transaction ID,Account,Date,Amount,Payee,Category\n"
        "l1,A,2024-01-11,-20.00,Shell,Fuel\n"
    )
    mappings = tmp_path / "mappings.yaml"
    mappings.write_text(
        "mappings:\n  - category: Dining\n    patterns: [starbucks]\n    confidence: 0.9\n"
    )
    return bank, ledger, mappings


def test_reconcile_dry_run(runner, inputs, tmp_path):
    bank, ledger, mappings = inputs

    result = runner.invoke(main, ["reconcile", str(bank), str(ledger), "-m", str(mappings), "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Dry run" in result.output
    assert "Dining" in result.output
    assert not list(tmp_path.glob("*.xlsx"))


def test_reconcile_writes_report(runner, inputs, tmp_path):
    bank, ledger, _ = inputs
    output = tmp_path / "report.xlsx"

    result = runner.invoke(main, ["reconcile", str(bank), str(ledger), "-o", str(output)])

    assert result.exit_code == 0, result.output
    assert output.exists()


def test_reconcile_reports_parse_errors(runner, inputs, tmp_path):
    _, ledger, _ = inputs
    broken = tmp_path / "broken.csv"
    broken.write_text("Transaction ID,Date\nb1,2024-01-15\n")

    result = runner.invoke(main, ["reconcile", str(broken), str(ledger), "--dry-run"])

    assert result.exit_code == 1
    assert "Missing required columns" in result.output


def test_parse_bank(runner, inputs):
    bank, _, _ = inputs

    result = runner.invoke(main, ["parse-bank", str(bank)])

    assert result.exit_code == 0, result.output
    assert "Total transactions: 2" in result.output


def test_parse_ledger(runner, inputs):
    _, ledger, _ = inputs

    result = runner.invoke(main, ["parse-ledger", str(ledger)])

    assert result.exit_code == 0, result.output
    assert "Fuel" in result.output


def test_init_config(runner, tmp_path):
    output = tmp_path / "config.yaml"

    result = runner.invoke(main, ["init-config", "-o", str(output)])

    assert result.exit_code == 0, result.output
    assert "tolerance_days: 3" in output.read_text()
