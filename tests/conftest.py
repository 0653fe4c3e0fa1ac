# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from employee_import.db.memory_store import MemoryEmployeeStore
from employee_import.logging.init import reset_logging

EMPLOYEE_COLUMNS = [
    "employee_id", "email", "employee_name", "employee_type", "time_type",
    "joining_date", "hire_date", "department_name", "role_name", "manager_id",
    "job_profile", "job_family", "management_level", "location",
    "supervisory_organization", "job", "business_title", "phone",
    "work_address", "skills", "default_weekly_hours", "scheduled_weekly_hours",
    "status",
]


def employee_values(code: str = "E100", **overrides: Any) -> dict[str, Any]:
    """A valid spreadsheet row (column -> raw value)."""
    values: dict[str, Any] = {
        "employee_id": code,
        "email": f"{code.lower()}@example.com",
        "employee_name": f"Employee {code}",
        "employee_type": "Permanent",
        "time_type": "Full-time",
        "joining_date": "01-06-2023",
        "hire_date": "15-05-2023",
        "department_name": "Engineering",
        "role_name": "Employee",
        "manager_id": None,
        "job_profile": "Software Engineer",
        "job_family": "Engineering",
        "management_level": "Mid",
        "location": "Pune",
        "supervisory_organization": None,
        "job": None,
        "business_title": None,
        "phone": None,
        "work_address": None,
        "skills": "Python, SQL",
        "default_weekly_hours": None,
        "scheduled_weekly_hours": None,
        "status": None,
    }
    values.update(overrides)
    return values


def write_workbook(path: Path, rows: list[dict[str, Any]], columns: list[str] | None = None) -> Path:
    """Write rows to the first sheet of an .xlsx file with a header row."""
    cols = columns or EMPLOYEE_COLUMNS
    data = [cols] + [[r.get(c) for c in cols] for r in rows]
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(data).to_excel(writer, sheet_name="Employees", header=False, index=False)
    return path


@pytest.fixture(autouse=True)
def _clean_logging():
    # StreamHandler は生成時の sys.stdout を保持するため毎テスト作り直す
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("DISABLE_DB_CONNECT", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
defaults:
  default_weekly_hours: 40.0
  status: Active
password_hash_iterations: 1000
null_sentinels: ["NULL", "N/A"]
error_log_dir: ./logs
reference_data:
  departments: [Engineering, Finance]
  roles: [Employee, Manager]
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def memory_store() -> MemoryEmployeeStore:
    return MemoryEmployeeStore(
        departments=["Engineering", "Finance"],
        roles=["Employee", "Manager"],
        hash_iterations=1000,
    )


@pytest.fixture()
def employee_row():
    """Factory fixture: employee_row("E100", job_profile=None) -> raw values dict."""
    return employee_values


@pytest.fixture()
def make_workbook(temp_workdir: Path):
    """Factory fixture writing an employee workbook under data/."""
    def _make(rows: list[dict[str, Any]], name: str = "employees.xlsx", columns: list[str] | None = None) -> Path:
        return write_workbook(temp_workdir / "data" / name, rows, columns)
    return _make
