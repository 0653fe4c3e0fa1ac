from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""RowData model for the employee bulk import.

RowData represents a single spreadsheet row as read from the workbook, before
any validation. Values stay untyped (column name -> raw cell value) until the
row validator turns them into a ValidatedRow.
"""

__all__ = [
    "RowData",
]


@dataclass(frozen=True)
class RowData:
    """Raw representation of a single data row of the uploaded sheet.

    The row_number is the spreadsheet row ordinal: the header occupies row 1,
    so the first data row is row 2.
    """
    row_number: int  # Spreadsheet row ordinal (header = 1, first data row = 2)
    values: dict[str, Any]  # Column name -> raw cell value

    def get(self, column: str, default: Any = None) -> Any:
        return self.values.get(column, default)

    @property
    def employee_code(self) -> str:
        """Employee code as typed in the sheet, or "Unknown" when absent."""
        raw = self.values.get("employee_id")
        if raw is None:
            return "Unknown"
        if isinstance(raw, float) and raw.is_integer():
            raw = int(raw)
        text = str(raw).strip()
        return text or "Unknown"
