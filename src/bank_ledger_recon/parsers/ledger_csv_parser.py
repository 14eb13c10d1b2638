"""
Budgeting ledger CSV parser.
Parses ledger exports into LedgerTransaction records.
"""

from pathlib import Path
from typing import Optional
import logging

import pandas as pd

from ..config import ReconConfig
from ..models.category import Category
from ..models.transaction import ClearedStatus, LedgerTransaction
from ..utils.exceptions import LedgerParseError, ValidationError
from .common import cell, parse_amount, parse_date, read_csv

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("id", "account_id", "date", "amount")
FALSE_VALUES = {"false", "no", "n", "0"}


class LedgerCsvParser:
    """Parser for budgeting ledger CSV exports."""

    def __init__(self, config: ReconConfig):
        self.config = config
        self.ledger_config = config.input.ledger
        self.column_mappings = self.ledger_config.column_mappings

    def parse_file(self, file_path: Path) -> list[LedgerTransaction]:
        """
        Parse a ledger CSV file.

        Raises:
            LedgerParseError: If the file cannot be read or a row is invalid
        """
        logger.info(f"Parsing ledger CSV file: {file_path}")

        try:
            df = read_csv(file_path, self.ledger_config.encoding, self.ledger_config.delimiter)
        except (OSError, ValueError, pd.errors.ParserError) as e:
            logger.error(f"Failed to read CSV file: {e}")
            raise LedgerParseError(f"Failed to read CSV file: {e}") from e

        missing = [
            self.column_mappings.get(name, name)
            for name in REQUIRED_FIELDS
            if self.column_mappings.get(name, name) not in df.columns
        ]
        if missing:
            raise LedgerParseError(f"Missing required columns: {', '.join(missing)}")

        transactions: list[LedgerTransaction] = []
        for idx, row in df.iterrows():
            line = int(idx) + 2
            try:
                transactions.append(self._normalize_row(row))
            except ValidationError as e:
                logger.error(f"Line {line}: {e}")
                raise LedgerParseError(f"Line {line}: {e}") from e

        logger.info(f"Extracted {len(transactions)} transactions from ledger CSV")
        return transactions

    def _normalize_row(self, row: pd.Series) -> LedgerTransaction:
        def value(name: str) -> Optional[str]:
            return cell(row, self.column_mappings.get(name))

        raw_date = value("date")
        txn_date = parse_date(raw_date, self.ledger_config.date_format)
        if raw_date is not None and txn_date is None:
            raise ValidationError(f"invalid date {raw_date!r}", field="date")

        raw_amount = value("amount")
        amount = parse_amount(raw_amount)
        if raw_amount is not None and amount is None:
            raise ValidationError(f"invalid amount {raw_amount!r}", field="amount")

        category_name = value("category")
        category = (
            Category.ledger(category_name, category_name) if category_name else Category.unknown()
        )

        return LedgerTransaction(
            id=value("id"),
            account_id=value("account_id"),
            date=txn_date,
            amount=amount,
            payee_name=value("payee_name"),
            category=category,
            cleared_status=self._parse_cleared(value("cleared_status")),
            approved=(value("approved") or "true").lower() not in FALSE_VALUES,
        )

    @staticmethod
    def _parse_cleared(raw: Optional[str]) -> ClearedStatus:
        if raw is None:
            return ClearedStatus.UNCLEARED
        try:
            return ClearedStatus(raw.lower())
        except ValueError as e:
            raise ValidationError(f"invalid cleared status {raw!r}", field="cleared_status") from e
