from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the employee bulk import.

Built by employee_import.config.loader from config/import.yml after schema
validation. Kept free of I/O so they can be constructed directly in tests.
"""

__all__ = [
    "DatabaseConfig",
    "ImportDefaults",
    "ReferenceData",
    "ImportConfig",
]

DEFAULT_WEEKLY_HOURS = 40.0
DEFAULT_STATUS = "Active"
DEFAULT_HASH_ITERATIONS = 100_000


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ImportDefaults:
    """Values applied when optional spreadsheet cells are empty."""
    default_weekly_hours: float = DEFAULT_WEEKLY_HOURS
    status: str = DEFAULT_STATUS


@dataclass(frozen=True)
class ReferenceData:
    """Lookup tables used to seed the in-memory store in dry-run mode."""
    departments: list[str] = field(default_factory=list)
    roles: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for the import process."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    defaults: ImportDefaults = field(default_factory=ImportDefaults)
    password_hash_iterations: int = DEFAULT_HASH_ITERATIONS
    null_sentinels: set[str] | None = None  # 文字列→NULL 変換対象 (大文字化済)
    error_log_dir: str = "./logs"
    reference_data: ReferenceData = field(default_factory=ReferenceData)
