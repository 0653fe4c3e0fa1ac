from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

"""Processing result models for the employee bulk import.

RowOutcome records what happened to one spreadsheet row, BatchResult
aggregates the outcomes of one import invocation. Neither is persisted; the
BatchResult is rendered as JSON / SUMMARY line for the caller.
"""

__all__ = [
    "RowStatus",
    "RowOutcome",
    "BatchResult",
    "OutcomeAccumulator",
]


class RowStatus(Enum):
    """Final status of a single row (no intermediate states are reported)."""
    SUCCESS = "Success"
    FAILED = "Failed"


@dataclass(frozen=True)
class RowOutcome:
    """Per-row result.

    On success the generated identifiers, the generated password and the
    normalized dates are set. On failure only error / error_type are set.
    """
    row: int  # Spreadsheet row ordinal (first data row = 2)
    employee_id: str  # 入力値そのまま、欠落時は "Unknown"
    status: RowStatus
    individual_id: int | None = None
    user_id: int | None = None
    job_details_id: int | None = None
    generated_password: str | None = None
    processed_dates: dict[str, str] | None = None
    error: str | None = None
    error_type: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is RowStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        """JSON shape returned to operators (camelCase keys kept for API compatibility)."""
        if self.succeeded:
            return {
                "row": self.row,
                "employee_id": self.employee_id,
                "status": self.status.value,
                "userId": self.user_id,
                "individualId": self.individual_id,
                "jobDetailsId": self.job_details_id,
                "generatedPassword": self.generated_password,
                "processedDates": dict(self.processed_dates or {}),
            }
        return {
            "row": self.row,
            "employee_id": self.employee_id,
            "status": self.status.value,
            "error": self.error,
        }


@dataclass(frozen=True)
class BatchResult:
    """Aggregated result of one import invocation.

    total == succeeded + failed always holds; outcomes keep input order.
    """
    total: int
    succeeded: int
    failed: int
    outcomes: list[RowOutcome] = field(default_factory=list)
    start_time: datetime | None = None
    end_time: datetime | None = None
    elapsed_seconds: float = 0.0
    throughput_rows_per_sec: float = 0.0

    @property
    def results(self) -> list[RowOutcome]:
        return [o for o in self.outcomes if o.succeeded]

    @property
    def errors(self) -> list[RowOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "success": self.succeeded,
            "failed": self.failed,
            "results": [o.to_dict() for o in self.results],
            "errors": [o.to_dict() for o in self.errors],
        }


class OutcomeAccumulator:
    """Collects RowOutcome entries in input order and builds the BatchResult."""

    def __init__(self) -> None:
        self.outcomes: list[RowOutcome] = []
        self.succeeded = 0
        self.failed = 0

    def add(self, outcome: RowOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.succeeded:
            self.succeeded += 1
        else:
            self.failed += 1

    def __len__(self) -> int:
        return len(self.outcomes)

    def build(self, start_time: datetime, end_time: datetime) -> BatchResult:
        elapsed = (end_time - start_time).total_seconds()
        throughput = self.succeeded / elapsed if elapsed > 0 else 0.0
        return BatchResult(
            total=len(self.outcomes),
            succeeded=self.succeeded,
            failed=self.failed,
            outcomes=list(self.outcomes),
            start_time=start_time,
            end_time=end_time,
            elapsed_seconds=elapsed,
            throughput_rows_per_sec=throughput,
        )
