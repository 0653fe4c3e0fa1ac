"""Domain models for the employee bulk import.

Raw spreadsheet rows, validated employee records, per-row outcomes and the
configuration dataclasses.
"""

from .config_models import DatabaseConfig, ImportConfig, ImportDefaults, ReferenceData
from .employee import (
    EmployeeStatus,
    IndividualRecord,
    JobDetailsRecord,
    UserAccountRecord,
    ValidatedRow,
)
from .error_record import ErrorRecord
from .processing_result import BatchResult, OutcomeAccumulator, RowOutcome, RowStatus
from .row_data import RowData

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "ImportConfig",
    "ImportDefaults",
    "ReferenceData",
    # Employee records
    "EmployeeStatus",
    "IndividualRecord",
    "JobDetailsRecord",
    "UserAccountRecord",
    "ValidatedRow",
    # Processing models
    "RowData",
    "RowOutcome",
    "RowStatus",
    "BatchResult",
    "OutcomeAccumulator",
    "ErrorRecord",
]
