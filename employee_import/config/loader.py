from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_HASH_ITERATIONS,
    DEFAULT_STATUS,
    DEFAULT_WEEKLY_HOURS,
    DatabaseConfig,
    ImportConfig,
    ImportDefaults,
    ReferenceData,
)

"""Config loader.

Responsibilities:
- Load YAML config (default: config/import.yml)
- Validate it against the bundled JSON schema (config_schema.json)
- Apply defaults for optional sections
"""

__all__ = [
    "ConfigError",
    "SCHEMA_PATH",
    "DEFAULT_CONFIG_PATH",
    "load_config",
]

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/import.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing / not valid JSON, or the config data
            fails schema validation (wrong types, unknown keys, ...)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    defaults_raw = data.get("defaults") or {}
    defaults = ImportDefaults(
        default_weekly_hours=float(defaults_raw.get("default_weekly_hours", DEFAULT_WEEKLY_HOURS)),
        status=defaults_raw.get("status", DEFAULT_STATUS),
    )
    ref_raw = data.get("reference_data") or {}
    reference = ReferenceData(
        departments=list(ref_raw.get("departments", [])),
        roles=list(ref_raw.get("roles", [])),
    )
    sentinels = data.get("null_sentinels")
    return ImportConfig(
        database=db,
        defaults=defaults,
        password_hash_iterations=data.get("password_hash_iterations", DEFAULT_HASH_ITERATIONS),
        null_sentinels={s.strip().upper() for s in sentinels} if sentinels else None,
        error_log_dir=data.get("error_log_dir", "./logs"),
        reference_data=reference,
    )
