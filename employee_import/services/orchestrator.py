from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..db.store import EmployeeStore
from ..db.writer import EntityWriter
from ..excel.reader import MalformedFileError, read_employee_rows
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.config_models import ImportConfig, ImportDefaults
from ..models.error_record import error_type_for
from ..models.processing_result import BatchResult, OutcomeAccumulator, RowOutcome, RowStatus
from ..models.row_data import RowData
from .credentials import generate_password
from .dates import format_date
from .progress import RowProgressTracker
from .validator import RowValidator

"""Batch orchestration for the employee bulk import.

Rows are processed one at a time, in sheet order. Each row runs
validate -> generate password -> write (identity, account, job detail) and
ends as exactly one RowOutcome. Any exception raised inside a row is turned
into a Failed outcome; the batch always continues with the next row. There is
no batch-wide transaction and no retry.

Only workbook-level problems (MalformedFileError) abort the batch, before any
row is attempted.
"""

__all__ = [
    "process_row",
    "process_rows",
    "import_workbook",
]

logger = logging.getLogger(__name__)


def process_row(row: RowData, validator: RowValidator, writer: EntityWriter) -> RowOutcome:
    """Run the full pipeline for a single row. Exceptions propagate to the caller."""
    validated = validator.validate(row)
    password = generate_password(validated.employee_id, validated.joining_date)
    written = writer.write(validated, password)
    return RowOutcome(
        row=row.row_number,
        employee_id=row.employee_code,
        status=RowStatus.SUCCESS,
        individual_id=written.individual_id,
        user_id=written.user_id,
        job_details_id=written.job_details_id,
        generated_password=password,
        processed_dates={
            "joining_date": format_date(validated.joining_date),
            "hire_date": format_date(validated.hire_date),
        },
    )


def process_rows(
    rows: Iterable[RowData],
    store: EmployeeStore,
    *,
    defaults: ImportDefaults | None = None,
    error_log: ErrorLogBuffer | None = None,
    file_name: str = "<upload>",
) -> BatchResult:
    """Process rows strictly in order and aggregate their outcomes.

    Args:
        rows: RowData in sheet order (may be a lazy iterator)
        store: Storage collaborator used for lookups and creates
        defaults: Values for empty optional cells
        error_log: Buffer receiving one ErrorRecord per failed row
        file_name: Workbook name recorded in error log entries

    Returns:
        BatchResult with total == succeeded + failed
    """
    start_time = datetime.now(UTC)
    validator = RowValidator(store, defaults)
    writer = EntityWriter(store)
    accumulator = OutcomeAccumulator()

    with RowProgressTracker() as progress:
        for row in rows:
            try:
                outcome = process_row(row, validator, writer)
                logger.debug(f"row {row.row_number}: imported {outcome.employee_id}")
            except Exception as e:
                outcome = RowOutcome(
                    row=row.row_number,
                    employee_id=row.employee_code,
                    status=RowStatus.FAILED,
                    error=str(e),
                    error_type=error_type_for(e),
                )
                logger.debug(f"row {row.row_number} ({outcome.employee_id}) failed: {e}")
                if error_log is not None:
                    error_log.append(
                        ErrorRecord.create(
                            file=file_name,
                            row=row.row_number,
                            employee_id=outcome.employee_id,
                            error_type=outcome.error_type,
                            message=outcome.error,
                        )
                    )
            accumulator.add(outcome)
            progress.advance(succeeded=accumulator.succeeded, failed=accumulator.failed)

    return accumulator.build(start_time, datetime.now(UTC))


def import_workbook(
    source: Path | str | bytes,
    store: EmployeeStore,
    config: ImportConfig | None = None,
    *,
    file_name: str | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> BatchResult:
    """Read an uploaded workbook and import every data row.

    Raises:
        MalformedFileError: the payload is not a readable workbook (no row is attempted)
    """
    config = config or ImportConfig()
    if file_name is None:
        file_name = Path(source).name if isinstance(source, (str, Path)) else "<upload>"
    if error_log is None:
        error_log = ErrorLogBuffer(config.error_log_dir)

    try:
        try:
            rows = read_employee_rows(source, config.null_sentinels)
        except MalformedFileError as e:
            error_log.append(
                ErrorRecord.create(
                    file=file_name,
                    row=-1,
                    employee_id="Unknown",
                    error_type=error_type_for(e),
                    message=str(e),
                )
            )
            raise
        logger.info(f"importing employees from {file_name}")
        return process_rows(
            rows,
            store,
            defaults=config.defaults,
            error_log=error_log,
            file_name=file_name,
        )
    finally:
        try:
            written = error_log.flush()
        except OSError as flush_error:
            logger.warning(f"failed to write error log: {flush_error}")
        else:
            if written is not None:
                logger.info(f"error log written: {written}")
