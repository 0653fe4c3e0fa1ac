from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import date
from typing import Any

from jsonschema import Draft7Validator
from jsonschema.exceptions import best_match

from ..db.store import EmployeeStore
from ..models.config_models import ImportDefaults
from ..models.employee import ValidatedRow
from ..models.row_data import RowData
from .dates import normalize_date

"""Row validation: raw spreadsheet row -> ValidatedRow.

Order of checks for one row:

1. required columns present and non-blank (no lookups, no dates before this)
2. joining / hire dates normalized
3. department and role names resolved to ids (manager optional)
4. field constraints (enums, patterns, lengths) via JSON schema
5. skills normalized to a list and limited

Only rows that pass every step reach the entity writer.
"""

__all__ = [
    "MissingFieldError",
    "ReferenceNotFoundError",
    "SkillsLimitError",
    "FieldValidationError",
    "REQUIRED_FIELDS",
    "RowValidator",
    "normalize_skills",
]

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "employee_id",
    "email",
    "employee_type",
    "time_type",
    "joining_date",
    "hire_date",
    "department_name",
    "role_name",
    "job_profile",
    "job_family",
    "management_level",
    "location",
)

MAX_SKILLS = 50
MAX_SKILL_LENGTH = 100

EMPLOYEE_TYPES = ["Permanent", "Contract", "Temporary", "Intern"]
EMPLOYEE_TIME_TYPES = ["Full-time", "Part-time", "Contract", "Intern"]
JOB_TIME_TYPES = ["Full-time", "Part-time", "Contract", "Temporary", "Intern"]
MANAGEMENT_LEVELS = ["Entry", "Junior", "Mid", "Senior", "Lead", "Manager", "Director", "VP", "C-Level"]
STATUSES = ["Active", "Inactive", "Terminated", "On Leave"]
_STATUS_ALIASES = {"OnLeave": "On Leave"}

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
_PHONE_PATTERN = r"^[+]?[1-9][0-9]{0,15}$"


def _string(max_length: int, **extra: Any) -> dict[str, Any]:
    return {"type": "string", "maxLength": max_length, **extra}


def _optional(schema: dict[str, Any]) -> dict[str, Any]:
    return {"anyOf": [{"type": "null"}, schema]}


INDIVIDUAL_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "employee_id": _string(20),
        "employee_name": _string(255),
        "email": _string(100, pattern=_EMAIL_PATTERN),
        "employee_type": {"enum": EMPLOYEE_TYPES},
        "time_type": {"enum": EMPLOYEE_TIME_TYPES},
        "default_weekly_hours": {"type": "number", "minimum": 0, "maximum": 99.99},
        "scheduled_weekly_hours": _optional({"type": "number", "minimum": 0, "maximum": 99.99}),
        "status": {"enum": STATUSES},
        "manager_id": _optional(_string(20)),
    },
}

JOB_DETAILS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "supervisory_organization": _optional(_string(255)),
        "job": _optional(_string(255)),
        "business_title": _optional(_string(255)),
        "job_profile": _string(255),
        "job_family": _string(255),
        "management_level": {"enum": MANAGEMENT_LEVELS},
        "time_type": {"enum": JOB_TIME_TYPES},
        "location": _string(255),
        "phone": _optional(_string(20, pattern=_PHONE_PATTERN)),
        "email": _string(255, pattern=_EMAIL_PATTERN),
        "work_address": _optional(_string(500)),
    },
}

_INDIVIDUAL_VALIDATOR = Draft7Validator(INDIVIDUAL_SCHEMA)
_JOB_DETAILS_VALIDATOR = Draft7Validator(JOB_DETAILS_SCHEMA)


class MissingFieldError(ValueError):
    """Required column missing or blank in a row."""

    def __init__(self, row_number: int, fields: Sequence[str]) -> None:
        self.row_number = row_number
        self.fields = list(fields)
        super().__init__(f"Row {row_number}: missing required fields: {', '.join(self.fields)}")


class ReferenceNotFoundError(LookupError):
    """Department or role name did not resolve to an id."""

    def __init__(self, kind: str, value: str) -> None:
        self.kind = kind
        self.value = value
        super().__init__(f"{kind} '{value}' not found")


class SkillsLimitError(ValueError):
    """Skills list too long or a single skill too long."""


class FieldValidationError(ValueError):
    """A field value violates its enum / pattern / length constraint."""


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def _weekly_hours(value: Any, default: float) -> float:
    # 数値化できない / 0 の場合は既定値 (週 40 時間)
    try:
        hours = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(hours) or hours == 0:
        return default
    return hours


def _optional_hours(value: Any) -> float | None:
    if _text(value) is None:
        return None
    try:
        hours = float(value)
    except (TypeError, ValueError) as e:
        raise FieldValidationError(f"Invalid value for 'scheduled_weekly_hours': {value!r} is not a number") from e
    if not math.isfinite(hours):
        raise FieldValidationError(f"Invalid value for 'scheduled_weekly_hours': {value!r} is not a number")
    return hours


def normalize_skills(value: Any) -> list[str]:
    """Normalize a skills cell (comma separated text or a sequence) to a list.

    Raises:
        SkillsLimitError: more than 50 skills, or a skill longer than 100 chars
    """
    if value is None:
        return []
    if isinstance(value, str):
        parts: list[Any] = value.split(",")
    elif isinstance(value, Sequence):
        parts = list(value)
    else:
        parts = [value]
    skills = [s for s in (_text(p) for p in parts) if s]
    if len(skills) > MAX_SKILLS:
        raise SkillsLimitError(f"Skills array cannot have more than {MAX_SKILLS} items")
    for skill in skills:
        if len(skill) > MAX_SKILL_LENGTH:
            raise SkillsLimitError(f'Skill "{skill}" exceeds {MAX_SKILL_LENGTH} characters')
    return skills


def _check_schema(validator: Draft7Validator, document: dict[str, Any], label: str) -> None:
    error = best_match(validator.iter_errors(document))
    if error is None:
        return
    field = error.absolute_path[0] if error.absolute_path else label
    raise FieldValidationError(f"{label} validation error: '{field}' {error.message}")


class RowValidator:
    """Validate one RowData and resolve its references through the store."""

    def __init__(self, store: EmployeeStore, defaults: ImportDefaults | None = None) -> None:
        self.store = store
        self.defaults = defaults or ImportDefaults()

    def missing_fields(self, row: RowData) -> list[str]:
        return [f for f in REQUIRED_FIELDS if _text(row.get(f)) is None]

    def validate(self, row: RowData) -> ValidatedRow:
        missing = self.missing_fields(row)
        if missing:
            raise MissingFieldError(row.row_number, missing)

        joining_date: date = normalize_date(row.get("joining_date"))
        hire_date: date = normalize_date(row.get("hire_date"))

        department_name = _text(row.get("department_name"))
        department_id = self.store.find_department_id(department_name)
        if department_id is None:
            raise ReferenceNotFoundError("Department", department_name)

        role_name = _text(row.get("role_name"))
        role_id = self.store.find_role_id(role_name)
        if role_id is None:
            raise ReferenceNotFoundError("Role", role_name)

        manager_code = _text(row.get("manager_id"))
        manager_id = None
        if manager_code is not None:
            manager_id = self.store.find_individual_id(manager_code)
            if manager_id is None:
                logger.debug(f"row {row.row_number}: manager '{manager_code}' not found, left unset")

        status = _text(row.get("status")) or self.defaults.status
        status = _STATUS_ALIASES.get(status, status)

        individual = {
            "employee_id": _text(row.get("employee_id")),
            "employee_name": _text(row.get("employee_name")) or "",
            "email": _text(row.get("email")),
            "employee_type": _text(row.get("employee_type")),
            "time_type": _text(row.get("time_type")),
            "default_weekly_hours": _weekly_hours(row.get("default_weekly_hours"), self.defaults.default_weekly_hours),
            "scheduled_weekly_hours": _optional_hours(row.get("scheduled_weekly_hours")),
            "status": status,
            "manager_id": manager_code,
        }
        _check_schema(_INDIVIDUAL_VALIDATOR, individual, "Individual data")

        job = {
            "supervisory_organization": _text(row.get("supervisory_organization")),
            "job": _text(row.get("job")),
            "business_title": _text(row.get("business_title")),
            "job_profile": _text(row.get("job_profile")),
            "job_family": _text(row.get("job_family")),
            "management_level": _text(row.get("management_level")),
            "time_type": individual["time_type"],
            "location": _text(row.get("location")),
            "phone": _text(row.get("phone")),
            "email": individual["email"],
            "work_address": _text(row.get("work_address")),
        }
        _check_schema(_JOB_DETAILS_VALIDATOR, job, "Job details")

        skills = normalize_skills(row.get("skills"))

        return ValidatedRow(
            row_number=row.row_number,
            employee_id=individual["employee_id"],
            employee_name=individual["employee_name"],
            email=individual["email"],
            employee_type=individual["employee_type"],
            time_type=individual["time_type"],
            joining_date=joining_date,
            hire_date=hire_date,
            department_id=department_id,
            role_id=role_id,
            manager_id=manager_id,
            default_weekly_hours=individual["default_weekly_hours"],
            scheduled_weekly_hours=individual["scheduled_weekly_hours"],
            status=status,
            job_profile=job["job_profile"],
            job_family=job["job_family"],
            management_level=job["management_level"],
            location=job["location"],
            supervisory_organization=job["supervisory_organization"],
            job=job["job"],
            business_title=job["business_title"],
            phone=job["phone"],
            work_address=job["work_address"],
            skills=skills,
        )
