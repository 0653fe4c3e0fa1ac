from __future__ import annotations

import logging
from dataclasses import dataclass

from ..models.employee import ValidatedRow
from .store import EmployeeStore, StorageError

"""Entity writer: the per-row write sequence.

individual_data -> users -> job_details, strictly in that order. Each step
depends on the id generated by the identity insert of the same row. A
failure at any step stops the remaining steps for that row only. Steps that
already succeeded are NOT undone: an identity record whose account insert
failed stays in storage (known limitation, later rows with the same
employee code will hit the duplicate check).
"""

__all__ = [
    "WriteResult",
    "EntityWriter",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteResult:
    individual_id: int
    user_id: int
    job_details_id: int


class EntityWriter:
    """Writes the identity / account / job-detail triple for one validated row."""

    def __init__(self, store: EmployeeStore) -> None:
        self.store = store

    def write(self, row: ValidatedRow, password: str) -> WriteResult:
        individual_id = self._step("individual_data", row, lambda: self.store.create_individual(row.to_individual()))
        user_id = self._step(
            "users",
            row,
            lambda: self.store.create_user(row.to_user_account(individual_id, password)),
            created_so_far=individual_id,
        )
        job_details_id = self._step(
            "job_details",
            row,
            lambda: self.store.create_job_details(row.to_job_details(individual_id)),
            created_so_far=individual_id,
        )
        return WriteResult(individual_id=individual_id, user_id=user_id, job_details_id=job_details_id)

    def _step(self, table: str, row: ValidatedRow, action, created_so_far: int | None = None) -> int:
        try:
            return action()
        except Exception as e:
            if created_so_far is not None:
                logger.warning(
                    f"row {row.row_number}: {table} insert failed, "
                    f"individual_data id={created_so_far} left without compensation"
                )
            if isinstance(e, StorageError):
                raise
            raise StorageError(f"{table}: {e}") from e
