from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Any

import psycopg2
import psycopg2.errors
from psycopg2.extras import Json

from ..models.employee import IndividualRecord, JobDetailsRecord, UserAccountRecord
from ..services.credentials import DEFAULT_ITERATIONS, hash_password
from .store import DuplicateEntityError, StorageError

"""PostgreSQL EmployeeStore backed by a psycopg2 connection.

Every create runs in its own transaction: INSERT ... RETURNING id, then
COMMIT. On failure the transaction is rolled back and the error is mapped to
DuplicateEntityError (unique violation) or StorageError. Earlier creates of
the same spreadsheet row stay committed; there is no compensating delete.
"""

__all__ = [
    "PostgresEmployeeStore",
    "insert_returning_id",
]

logger = logging.getLogger(__name__)

INDIVIDUAL_COLUMNS = (
    "employee_id",
    "employee_name",
    "employee_type",
    "email",
    "time_type",
    "default_weekly_hours",
    "scheduled_weekly_hours",
    "joining_date",
    "hire_date",
    "job_profile_progression_model_designation",
    "department_id",
    "manager_id",
    "status",
)

USER_COLUMNS = (
    "employee_id",
    "individual_data_id",
    "email",
    "password_hash",
    "role_id",
    "is_active",
)

JOB_DETAILS_COLUMNS = (
    "individual_data_id",
    "supervisory_organization",
    "job",
    "business_title",
    "job_profile",
    "job_family",
    "management_level",
    "time_type",
    "location",
    "phone",
    "email",
    "work_address",
    "skills",
)


def insert_returning_id(cursor: Any, table: str, columns: Sequence[str], values: Sequence[Any]) -> int:
    """Run a single-row INSERT and return the generated primary key.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: 対象テーブル名 (固定値のみ渡す想定)
    columns: 挿入列
    values: columns と同順の値
    """
    cols_sql = ",".join(f'"{c}"' for c in columns)
    placeholders = ",".join(["%s"] * len(columns))
    cursor.execute(
        f"INSERT INTO {table} ({cols_sql}) VALUES ({placeholders}) RETURNING id",
        tuple(values),
    )
    row = cursor.fetchone()
    if row is None:
        raise StorageError(f"INSERT INTO {table} returned no id")
    return int(row[0])


class PostgresEmployeeStore:
    """EmployeeStore implementation on a psycopg2 connection (autocommit off)."""

    def __init__(self, connection: Any, hash_iterations: int = DEFAULT_ITERATIONS) -> None:
        self.connection = connection
        self.hash_iterations = hash_iterations

    def _fetch_id(self, sql: str, param: Any) -> int | None:
        try:
            with self.connection.cursor() as cur:
                cur.execute(sql, (param,))
                row = cur.fetchone()
            self.connection.commit()
        except psycopg2.Error as e:
            self.connection.rollback()
            raise StorageError(str(e).strip()) from e
        return int(row[0]) if row else None

    def _insert(self, table: str, columns: Sequence[str], values: Sequence[Any]) -> int:
        start = time.perf_counter()
        try:
            with self.connection.cursor() as cur:
                pk = insert_returning_id(cur, table, columns, values)
            self.connection.commit()
        except psycopg2.errors.UniqueViolation as e:
            self.connection.rollback()
            diag = getattr(e, "diag", None)
            detail = (
                getattr(diag, "message_detail", None)
                or getattr(diag, "message_primary", None)
                or str(e)
            )
            raise DuplicateEntityError(f"Duplicate entry in {table}: {detail.strip()}") from e
        except StorageError:
            self.connection.rollback()
            raise
        except psycopg2.Error as e:
            self.connection.rollback()
            raise StorageError(f"{table}: {str(e).strip()}") from e
        logger.debug(f"insert {table} id={pk} elapsed={time.perf_counter() - start:.4f}s")
        return pk

    def find_department_id(self, name: str) -> int | None:
        return self._fetch_id("SELECT id FROM departments WHERE name = %s", name)

    def find_role_id(self, name: str) -> int | None:
        return self._fetch_id("SELECT id FROM roles WHERE name = %s", name)

    def find_individual_id(self, employee_id: str) -> int | None:
        return self._fetch_id("SELECT id FROM individual_data WHERE employee_id = %s", employee_id)

    def create_individual(self, record: IndividualRecord) -> int:
        values = [getattr(record, c) for c in INDIVIDUAL_COLUMNS]
        return self._insert("individual_data", INDIVIDUAL_COLUMNS, values)

    def create_user(self, record: UserAccountRecord) -> int:
        values = [
            record.employee_id,
            record.individual_data_id,
            record.email,
            hash_password(record.password, self.hash_iterations),
            record.role_id,
            record.is_active,
        ]
        return self._insert("users", USER_COLUMNS, values)

    def create_job_details(self, record: JobDetailsRecord) -> int:
        values = [
            Json(record.skills) if c == "skills" else getattr(record, c)
            for c in JOB_DETAILS_COLUMNS
        ]
        return self._insert("job_details", JOB_DETAILS_COLUMNS, values)
