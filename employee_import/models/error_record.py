from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

One record per failed row. row=-1 is used for file-level errors where no
spreadsheet row can be named (e.g. an unreadable workbook).
"""

__all__ = [
    "ErrorRecord",
    "error_type_for",
]

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def error_type_for(exc: BaseException) -> str:
    """Derive an UPPER_SNAKE error type from the exception class name.

    MissingFieldError -> MISSING_FIELD, ValueError -> VALUE.
    """
    name = type(exc).__name__
    if name.endswith("Error") and name != "Error":
        name = name[: -len("Error")]
    return _CAMEL_BOUNDARY.sub("_", name).upper()


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Uploaded workbook name
        row: Spreadsheet row ordinal. -1 for file-level errors
        employee_id: Employee code of the row, "Unknown" if absent
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Error message reported to the operator
    """
    timestamp: str  # ISO8601 UTC
    file: str
    row: int  # 行番号。不明な場合 -1 許容
    employee_id: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, row: int, employee_id: str, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            employee_id=employee_id,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
