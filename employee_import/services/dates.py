from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from typing import Any

import pandas as pd

"""Date normalization for spreadsheet cells.

Spreadsheet dates arrive in several shapes depending on how the cell was
formatted and how the workbook was produced:

- real date/datetime cells (openpyxl converts them, pandas returns Timestamp)
- serial day numbers (cell formatted as a number)
- ``dd-mm-yyyy`` text
- any other text pandas can parse (ISO strings etc.)

Serial numbers use the 1899-12-30 epoch, which keeps spreadsheet serials
after 1900-02-28 aligned with their displayed dates.
"""

__all__ = [
    "InvalidDateError",
    "SERIAL_EPOCH",
    "normalize_date",
    "format_date",
]

SERIAL_EPOCH = date(1899, 12, 30)

_DMY_PATTERN = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")

# pandas が実行時刻に解決する相対キーワード
_RELATIVE_KEYWORDS = frozenset({"now", "today", "tomorrow", "yesterday"})


class InvalidDateError(ValueError):
    """Raised when a cell value cannot be converted to a calendar date."""


def _from_serial(value: float) -> date:
    try:
        return SERIAL_EPOCH + timedelta(days=math.floor(value))
    except OverflowError as e:
        raise InvalidDateError(f"Invalid date serial: {value}") from e


def _from_dmy(text: str, match: re.Match[str]) -> date:
    day, month, year = (int(g) for g in match.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidDateError(f"Invalid date: {text}") from e


def normalize_date(value: Any) -> date:
    """Convert a raw cell value to a calendar date.

    Raises:
        InvalidDateError: value is empty, negative, impossible or unparseable
    """
    # datetime (pd.Timestamp 含む) は date のサブクラスなので先に判定
    if isinstance(value, datetime):
        if pd.isna(value):
            raise InvalidDateError(f"Unable to convert date: {value!r}")
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if math.isfinite(value) and value >= 0:
            return _from_serial(value)
        raise InvalidDateError(f"Unable to convert date: {value!r} (type: {type(value).__name__})")
    if isinstance(value, str):
        text = value.strip()
        match = _DMY_PATTERN.match(text)
        if match:
            return _from_dmy(text, match)
        if text.lower() in _RELATIVE_KEYWORDS:
            raise InvalidDateError(f"Unable to convert date: {value} (type: str)")
        if text:
            try:
                parsed = pd.to_datetime(text)
            except (ValueError, TypeError, OverflowError) as e:
                raise InvalidDateError(f"Unable to convert date: {value} (type: str)") from e
            if not pd.isna(parsed):
                return parsed.date()
    raise InvalidDateError(f"Unable to convert date: {value!r} (type: {type(value).__name__})")


def format_date(value: date) -> str:
    """Format a date as zero-padded ``dd-mm-yyyy`` for display and audit."""
    return f"{value.day:02d}-{value.month:02d}-{value.year:04d}"
