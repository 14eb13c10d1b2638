"""Parsers for bank and ledger CSV exports and category mapping catalogs."""

from .bank_csv_parser import BankCsvParser
from .ledger_csv_parser import LedgerCsvParser
from .mapping_loader import load_category_mappings

__all__ = ["BankCsvParser", "LedgerCsvParser", "load_category_mappings"]
