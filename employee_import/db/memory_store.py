from __future__ import annotations

from dataclasses import asdict
from typing import Any

from ..models.employee import IndividualRecord, JobDetailsRecord, UserAccountRecord
from ..services.credentials import DEFAULT_ITERATIONS, hash_password
from .store import DuplicateEntityError

"""Dict-backed EmployeeStore for dry-run mode and tests.

Enforces the same uniqueness rules as the database schema so that duplicate
rows fail the same way in a dry run as they would against PostgreSQL.
"""

__all__ = [
    "MemoryEmployeeStore",
]


class MemoryEmployeeStore:
    """In-memory EmployeeStore; ids are generated sequentially from 1."""

    def __init__(
        self,
        departments: list[str] | None = None,
        roles: list[str] | None = None,
        hash_iterations: int = DEFAULT_ITERATIONS,
    ) -> None:
        self.departments: dict[str, int] = {name: i for i, name in enumerate(departments or [], start=1)}
        self.roles: dict[str, int] = {name: i for i, name in enumerate(roles or [], start=1)}
        self.hash_iterations = hash_iterations
        self.individuals: dict[int, dict[str, Any]] = {}
        self.users: dict[int, dict[str, Any]] = {}
        self.job_details: dict[int, dict[str, Any]] = {}

    # lookups -----------------------------------------------------------

    def find_department_id(self, name: str) -> int | None:
        return self.departments.get(name)

    def find_role_id(self, name: str) -> int | None:
        return self.roles.get(name)

    def find_individual_id(self, employee_id: str) -> int | None:
        for pk, row in self.individuals.items():
            if row["employee_id"] == employee_id:
                return pk
        return None

    # creates -----------------------------------------------------------

    def create_individual(self, record: IndividualRecord) -> int:
        for row in self.individuals.values():
            if row["employee_id"] == record.employee_id:
                raise DuplicateEntityError(f"Duplicate entry '{record.employee_id}' for key 'employee_id'")
            if row["email"] == record.email:
                raise DuplicateEntityError(f"Duplicate entry '{record.email}' for key 'email'")
        pk = len(self.individuals) + 1
        self.individuals[pk] = asdict(record)
        return pk

    def create_user(self, record: UserAccountRecord) -> int:
        for row in self.users.values():
            if row["employee_id"] == record.employee_id:
                raise DuplicateEntityError(f"Duplicate entry '{record.employee_id}' for key 'users.employee_id'")
            if row["email"] == record.email:
                raise DuplicateEntityError(f"Duplicate entry '{record.email}' for key 'users.email'")
            if row["individual_data_id"] == record.individual_data_id:
                raise DuplicateEntityError(
                    f"Duplicate entry '{record.individual_data_id}' for key 'users.individual_data_id'"
                )
        pk = len(self.users) + 1
        self.users[pk] = {
            "employee_id": record.employee_id,
            "individual_data_id": record.individual_data_id,
            "email": record.email,
            "password_hash": hash_password(record.password, self.hash_iterations),
            "role_id": record.role_id,
            "is_active": record.is_active,
        }
        return pk

    def create_job_details(self, record: JobDetailsRecord) -> int:
        for row in self.job_details.values():
            if row["individual_data_id"] == record.individual_data_id:
                raise DuplicateEntityError(
                    f"Duplicate entry '{record.individual_data_id}' for key 'job_details.individual_data_id'"
                )
        pk = len(self.job_details) + 1
        self.job_details[pk] = asdict(record)
        return pk
