from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..models.employee import IndividualRecord, JobDetailsRecord, UserAccountRecord

"""Storage collaborator interface used by the import pipeline.

The pipeline never talks to a connection directly; it receives an object
implementing EmployeeStore (PostgreSQL in live mode, dict-backed in dry-run
mode and tests). Lookups are read-only. Each create call is its own unit of
work: a failure never undoes an earlier successful create.
"""

__all__ = [
    "StorageError",
    "DuplicateEntityError",
    "EmployeeStore",
]


class StorageError(Exception):
    """Generic storage failure while writing or reading a record."""


class DuplicateEntityError(StorageError):
    """Unique constraint violation (employee code, email, one job detail per employee)."""


@runtime_checkable
class EmployeeStore(Protocol):
    """Lookups and creates needed to import one employee row."""

    def find_department_id(self, name: str) -> int | None: ...

    def find_role_id(self, name: str) -> int | None: ...

    def find_individual_id(self, employee_id: str) -> int | None: ...

    def create_individual(self, record: IndividualRecord) -> int: ...

    def create_user(self, record: UserAccountRecord) -> int: ...

    def create_job_details(self, record: JobDetailsRecord) -> int: ...
