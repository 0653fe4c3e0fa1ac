from __future__ import annotations

import json

import pytest

from employee_import.db.store import DuplicateEntityError, StorageError
from employee_import.excel.reader import MalformedFileError
from employee_import.models.error_record import ErrorRecord, error_type_for
from employee_import.services.credentials import CredentialGenerationError
from employee_import.services.validator import MissingFieldError


def test_error_record_creation_and_json_line():
    rec = ErrorRecord.create(
        file="staff.xlsx",
        row=4,
        employee_id="E3",
        error_type="MISSING_FIELD",
        message="Row 4: missing required fields: email",
    )
    data = json.loads(rec.to_json_line())
    assert data["file"] == "staff.xlsx"
    assert data["row"] == 4
    assert data["employee_id"] == "E3"
    assert data["timestamp"].endswith("Z")
    assert list(data.keys()) == ["timestamp", "file", "row", "employee_id", "error_type", "message"]


def test_error_record_file_level_row():
    rec = ErrorRecord.create("broken.xlsx", -1, "Unknown", "MALFORMED_FILE", "not a workbook")
    assert json.loads(rec.to_json_line())["row"] == -1


@pytest.mark.parametrize(
    "exc, expected",
    [
        (MissingFieldError(2, ["email"]), "MISSING_FIELD"),
        (DuplicateEntityError("dup"), "DUPLICATE_ENTITY"),
        (StorageError("x"), "STORAGE"),
        (MalformedFileError("x"), "MALFORMED_FILE"),
        (CredentialGenerationError("x"), "CREDENTIAL_GENERATION"),
        (ValueError("x"), "VALUE"),
        (KeyError("x"), "KEY"),
    ],
)
def test_error_type_for(exc, expected):
    assert error_type_for(exc) == expected
