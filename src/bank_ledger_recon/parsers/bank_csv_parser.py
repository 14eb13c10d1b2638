"""
Bank transaction CSV parser.
Parses bank feed exports into BankTransaction records.
"""

from pathlib import Path
from typing import Optional
import logging

import pandas as pd

from ..config import ReconConfig
from ..models.transaction import BankTransaction
from ..utils.exceptions import BankParseError, ValidationError
from .common import cell, parse_amount, parse_date, read_csv

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("id", "account_id", "date", "amount", "description")


class BankCsvParser:
    """
    Parser for bank transaction CSV exports.

    Any malformed row fails the whole file: a partial bank feed would make
    every missing row look like a transaction absent from the ledger.
    """

    def __init__(self, config: ReconConfig):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config
        self.bank_config = config.input.bank
        self.column_mappings = self.bank_config.column_mappings

    def parse_file(self, file_path: Path) -> list[BankTransaction]:
        """
        Parse a bank CSV file.

        Args:
            file_path: Path to the CSV file

        Returns:
            Bank transactions in file order

        Raises:
            BankParseError: If the file cannot be read or a row is invalid
        """
        logger.info(f"Parsing bank CSV file: {file_path}")

        try:
            df = read_csv(file_path, self.bank_config.encoding, self.bank_config.delimiter)
        except (OSError, ValueError, pd.errors.ParserError) as e:
            logger.error(f"Failed to read CSV file: {e}")
            raise BankParseError(f"Failed to read CSV file: {e}") from e

        self._check_columns(df)
        transactions = self._process_dataframe(df)
        logger.info(f"Extracted {len(transactions)} transactions from bank CSV")

        return transactions

    def _check_columns(self, df: pd.DataFrame) -> None:
        missing = [
            self.column_mappings.get(name, name)
            for name in REQUIRED_FIELDS
            if self.column_mappings.get(name, name) not in df.columns
        ]
        if missing:
            raise BankParseError(f"Missing required columns: {', '.join(missing)}")

    def _process_dataframe(self, df: pd.DataFrame) -> list[BankTransaction]:
        transactions: list[BankTransaction] = []

        for idx, row in df.iterrows():
            # +2: header line plus 1-based numbering
            line = int(idx) + 2
            try:
                transactions.append(self._normalize_row(row))
            except ValidationError as e:
                logger.error(f"Line {line}: {e}")
                raise BankParseError(f"Line {line}: {e}") from e

        return transactions

    def _normalize_row(self, row: pd.Series) -> BankTransaction:
        def value(name: str) -> Optional[str]:
            return cell(row, self.column_mappings.get(name))

        raw_date = value("date")
        txn_date = parse_date(raw_date, self.bank_config.date_format)
        if raw_date is not None and txn_date is None:
            raise ValidationError(f"invalid date {raw_date!r}", field="date")

        raw_amount = value("amount")
        amount = parse_amount(raw_amount)
        if raw_amount is not None and amount is None:
            raise ValidationError(f"invalid amount {raw_amount!r}", field="amount")

        return BankTransaction(
            id=value("id"),
            account_id=value("account_id"),
            date=txn_date,
            amount=amount,
            description=value("description") or "",
            merchant_name=value("merchant_name"),
            memo=value("memo"),
            transaction_type=value("transaction_type"),
            reference=value("reference"),
        )
