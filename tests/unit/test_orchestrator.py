from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from employee_import.db.memory_store import MemoryEmployeeStore
from employee_import.db.store import StorageError
from employee_import.excel.reader import MalformedFileError
from employee_import.logging.error_log import ErrorLogBuffer
from employee_import.logging.init import setup_logging
from employee_import.models.config_models import ImportConfig, ReferenceData
from employee_import.models.processing_result import RowStatus
from employee_import.models.row_data import RowData
from employee_import.services.orchestrator import import_workbook, process_rows


def _rows(*values: dict) -> list[RowData]:
    return [RowData(row_number=i, values=v) for i, v in enumerate(values, start=2)]


def test_process_rows_all_success(memory_store, employee_row):
    result = process_rows(_rows(employee_row("E1"), employee_row("E2")), memory_store)
    assert (result.total, result.succeeded, result.failed) == (2, 2, 0)
    first = result.outcomes[0]
    assert first.status is RowStatus.SUCCESS
    assert first.row == 2
    assert first.generated_password == "E1@2023-06-01"
    assert first.processed_dates == {"joining_date": "01-06-2023", "hire_date": "15-05-2023"}
    assert first.individual_id == memory_store.find_individual_id("E1")


def test_failed_row_does_not_stop_the_batch(memory_store, employee_row):
    rows = _rows(
        employee_row("E1"),
        employee_row("E2", department_name="Marketing"),
        employee_row("E3"),
    )
    result = process_rows(rows, memory_store)
    assert result.total == result.succeeded + result.failed == 3
    assert [o.status for o in result.outcomes] == [RowStatus.SUCCESS, RowStatus.FAILED, RowStatus.SUCCESS]
    failed = result.errors[0]
    assert failed.row == 3
    assert failed.employee_id == "E2"
    assert failed.error == "Department 'Marketing' not found"
    assert failed.error_type == "REFERENCE_NOT_FOUND"
    assert failed.generated_password is None
    # 失敗行は何も書き込まない
    assert memory_store.find_individual_id("E2") is None


def test_outcomes_keep_input_order(memory_store, employee_row):
    rows = _rows(*(employee_row(f"E{i}") for i in range(5)))
    result = process_rows(iter(rows), memory_store)
    assert [o.row for o in result.outcomes] == [2, 3, 4, 5, 6]


def test_duplicate_code_within_batch_fails_second_row(memory_store, employee_row):
    rows = _rows(employee_row("E1"), employee_row("E1", email="again@example.com"), employee_row("E2"))
    result = process_rows(rows, memory_store)
    assert (result.total, result.succeeded, result.failed) == (3, 2, 1)
    assert [o.row for o in result.results] == [2, 4]
    assert memory_store.find_individual_id("E2") is not None
    assert result.errors[0].row == 3
    assert "Duplicate entry" in result.errors[0].error
    assert result.errors[0].error_type == "DUPLICATE_ENTITY"


def test_missing_code_is_reported_as_unknown(memory_store, employee_row):
    result = process_rows(_rows(employee_row("E1", employee_id=None)), memory_store)
    assert result.errors[0].employee_id == "Unknown"
    assert "missing required fields: employee_id" in result.errors[0].error


def test_account_failure_leaves_orphan_identity(employee_row):
    store = MemoryEmployeeStore(departments=["Engineering"], roles=["Employee"], hash_iterations=1000)
    with patch.object(store, "create_user", side_effect=StorageError("users: unavailable")):
        result = process_rows(_rows(employee_row("E1")), store)
    assert result.failed == 1
    assert result.errors[0].error == "users: unavailable"
    assert store.find_individual_id("E1") == 1
    assert store.users == {}


def test_manager_resolves_to_earlier_row(memory_store, employee_row):
    rows = _rows(employee_row("M1"), employee_row("E1", manager_id="M1"))
    process_rows(rows, memory_store)
    manager_pk = memory_store.find_individual_id("M1")
    employee_pk = memory_store.find_individual_id("E1")
    assert memory_store.individuals[employee_pk]["manager_id"] == manager_pk


def test_failed_rows_are_appended_to_error_log(tmp_path: Path, memory_store, employee_row):
    buffer = ErrorLogBuffer(tmp_path)
    rows = _rows(employee_row("E1"), employee_row("E2", joining_date="not a date"))
    process_rows(rows, memory_store, error_log=buffer, file_name="staff.xlsx")
    assert len(buffer) == 1
    path = buffer.flush()
    record = json.loads(path.read_text(encoding="utf-8").splitlines()[0])
    assert record["file"] == "staff.xlsx"
    assert record["row"] == 3
    assert record["employee_id"] == "E2"
    assert record["error_type"] == "INVALID_DATE"


def test_empty_batch(memory_store):
    result = process_rows([], memory_store)
    assert (result.total, result.succeeded, result.failed) == (0, 0, 0)
    assert result.throughput_rows_per_sec >= 0


def test_import_workbook_reads_and_flushes(temp_workdir: Path, make_workbook, employee_row):
    path = make_workbook([employee_row("E1"), employee_row("E2", role_name="Ghost")])
    config = ImportConfig(
        error_log_dir=str(temp_workdir / "logs"),
        reference_data=ReferenceData(departments=["Engineering"], roles=["Employee"]),
    )
    store = MemoryEmployeeStore(["Engineering"], ["Employee"], hash_iterations=1000)
    result = import_workbook(path, store, config)
    assert (result.total, result.succeeded, result.failed) == (2, 1, 1)
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    record = json.loads(logs[0].read_text(encoding="utf-8").strip())
    assert record["file"] == "employees.xlsx"
    assert record["row"] == 3


def test_import_workbook_malformed_file_is_fatal(temp_workdir: Path, memory_store):
    bogus = temp_workdir / "data" / "broken.xlsx"
    bogus.write_bytes(b"not a zip archive")
    buffer = ErrorLogBuffer(temp_workdir / "logs")
    with pytest.raises(MalformedFileError):
        import_workbook(bogus, memory_store, error_log=buffer)
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    record = json.loads(logs[0].read_text(encoding="utf-8").strip())
    assert record["row"] == -1
    assert record["employee_id"] == "Unknown"
    assert record["error_type"] == "MALFORMED_FILE"
    assert memory_store.individuals == {}


def test_import_workbook_accepts_bytes(temp_workdir: Path, make_workbook, memory_store, employee_row):
    path = make_workbook([employee_row("E1")])
    result = import_workbook(path.read_bytes(), memory_store, ImportConfig(error_log_dir=str(temp_workdir / "logs")))
    assert result.succeeded == 1
    assert list((temp_workdir / "logs").glob("errors-*.log")) == []


def test_failed_row_is_logged_at_debug_only(memory_store, employee_row, capsys):
    # 行エラーの出力は CLI 側 (ERROR) に一本化
    setup_logging()
    process_rows(_rows(employee_row("E1", role_name="Ghost")), memory_store)
    assert "Role 'Ghost' not found" not in capsys.readouterr().out

    setup_logging(debug=True)
    process_rows(_rows(employee_row("E2", role_name="Ghost")), memory_store)
    assert "DEBUG row 2 (E2) failed: Role 'Ghost' not found" in capsys.readouterr().out
