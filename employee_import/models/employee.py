from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

"""Employee domain models written by the import pipeline.

Three records are created per spreadsheet row, in this order:

- IndividualRecord  -> individual_data (identity)
- UserAccountRecord -> users (credentials, one-to-one with identity)
- JobDetailsRecord  -> job_details (job metadata, one-to-one with identity)

ValidatedRow is the typed form of a spreadsheet row once the row validator
has checked required fields, normalized dates and resolved references.
"""

__all__ = [
    "EmployeeStatus",
    "IndividualRecord",
    "UserAccountRecord",
    "JobDetailsRecord",
    "ValidatedRow",
]


class EmployeeStatus(Enum):
    """Lifecycle status of an identity record.

    Terminated is the soft-delete state; records are never removed.
    """
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    TERMINATED = "Terminated"
    ON_LEAVE = "On Leave"


@dataclass(frozen=True)
class IndividualRecord:
    employee_id: str
    employee_name: str
    employee_type: str
    email: str
    time_type: str
    default_weekly_hours: float
    scheduled_weekly_hours: float | None
    joining_date: date
    hire_date: date
    job_profile_progression_model_designation: str | None
    department_id: int
    manager_id: int | None
    status: str = EmployeeStatus.ACTIVE.value


@dataclass(frozen=True)
class UserAccountRecord:
    """Account row. password is plaintext; the store hashes it before persisting."""
    employee_id: str
    email: str
    password: str
    role_id: int
    individual_data_id: int
    is_active: bool = True

    def __repr__(self) -> str:
        # 平文パスワードをログへ出さない
        return (
            f"UserAccountRecord(employee_id={self.employee_id!r}, email={self.email!r}, "
            f"role_id={self.role_id!r}, individual_data_id={self.individual_data_id!r})"
        )


@dataclass(frozen=True)
class JobDetailsRecord:
    individual_data_id: int
    job_profile: str
    job_family: str
    management_level: str
    location: str
    email: str
    time_type: str | None = None
    supervisory_organization: str | None = None
    job: str | None = None
    business_title: str | None = None
    phone: str | None = None
    work_address: str | None = None
    skills: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ValidatedRow:
    """Typed spreadsheet row after validation (references resolved)."""
    row_number: int
    employee_id: str
    employee_name: str
    email: str
    employee_type: str
    time_type: str
    joining_date: date
    hire_date: date
    department_id: int
    role_id: int
    manager_id: int | None
    default_weekly_hours: float
    scheduled_weekly_hours: float | None
    status: str
    job_profile: str
    job_family: str
    management_level: str
    location: str
    supervisory_organization: str | None = None
    job: str | None = None
    business_title: str | None = None
    phone: str | None = None
    work_address: str | None = None
    skills: list[str] = field(default_factory=list)

    def to_individual(self) -> IndividualRecord:
        return IndividualRecord(
            employee_id=self.employee_id,
            employee_name=self.employee_name,
            employee_type=self.employee_type,
            email=self.email,
            time_type=self.time_type,
            default_weekly_hours=self.default_weekly_hours,
            scheduled_weekly_hours=self.scheduled_weekly_hours,
            joining_date=self.joining_date,
            hire_date=self.hire_date,
            job_profile_progression_model_designation=self.job_profile,
            department_id=self.department_id,
            manager_id=self.manager_id,
            status=self.status,
        )

    def to_user_account(self, individual_data_id: int, password: str) -> UserAccountRecord:
        return UserAccountRecord(
            employee_id=self.employee_id,
            email=self.email,
            password=password,
            role_id=self.role_id,
            individual_data_id=individual_data_id,
        )

    def to_job_details(self, individual_data_id: int) -> JobDetailsRecord:
        return JobDetailsRecord(
            individual_data_id=individual_data_id,
            job_profile=self.job_profile,
            job_family=self.job_family,
            management_level=self.management_level,
            location=self.location,
            email=self.email,
            time_type=self.time_type,
            supervisory_organization=self.supervisory_organization,
            job=self.job,
            business_title=self.business_title,
            phone=self.phone,
            work_address=self.work_address,
            skills=list(self.skills),
        )
