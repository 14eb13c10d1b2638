"""Helpers shared by the CSV parsers."""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

import pandas as pd


def read_csv(file_path: Path, encoding: str, delimiter: str) -> pd.DataFrame:
    """
    Read every column as text.

    Amounts stay strings until they become Decimal, so no value passes
    through a float.
    """
    return pd.read_csv(
        file_path,
        encoding=encoding,
        delimiter=delimiter,
        dtype=str,
        keep_default_na=False,
    )


def cell(row: pd.Series, column: Optional[str]) -> Optional[str]:
    """Stripped cell text, or None when the column is absent or the cell empty."""
    if not column or column not in row.index:
        return None
    value = row[column]
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def parse_date(value: Optional[str], date_format: str) -> Optional[date]:
    if value is None:
        return None
    try:
        return datetime.strptime(value, date_format).date()
    except ValueError:
        # Try pandas parser as fallback
        try:
            parsed = pd.to_datetime(value)
        except (ValueError, TypeError):
            return None
        # "NaT" and friends parse to a missing timestamp
        if pd.isna(parsed):
            return None
        return parsed.date()


def parse_amount(value: Optional[str]) -> Optional[Decimal]:
    """Parse "$1,234.50", "-4.50" or accounting-style "(4.50)" into a Decimal."""
    if value is None:
        return None
    text = value.replace("$", "").replace(",", "").strip()
    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1].strip()
    try:
        amount = Decimal(text)
    except (InvalidOperation, ValueError):
        return None
    return -amount if negative else amount
