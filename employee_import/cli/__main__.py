from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from employee_import.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from employee_import.db.memory_store import MemoryEmployeeStore
from employee_import.excel.reader import MalformedFileError
from employee_import.logging.init import log_summary, setup_logging
from employee_import.models.config_models import ImportConfig
from employee_import.models.processing_result import BatchResult
from employee_import.services.orchestrator import import_workbook
from employee_import.services.summary import render_summary_line

"""CLI entrypoint: import one employee workbook.

Flow:
- Load .env, then the YAML config
- Open a PostgreSQL connection (or an in-memory store in dry-run mode)
- Import every data row of the first worksheet
- Print the SUMMARY line, optionally write the BatchResult JSON
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


@contextmanager
def _db_connection(cfg: ImportConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Context manager providing a psycopg2 connection.

    接続情報の解決優先順位:
        1. DATABASE_URL / PGDSN (DSN 全体)
        2. 個別 PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
        3. config の database セクション (不足分のフォールバック)
    """
    import psycopg2

    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if not dsn:
        host = os.getenv("PGHOST", db_cfg.host or "localhost")
        port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
        user = os.getenv("PGUSER", db_cfg.user or "postgres")
        password = os.getenv("PGPASSWORD", db_cfg.password or "")
        database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
        dsn = f"host={host} port={port} user={user} dbname={database}"
        if password:
            dsn += f" password={password}"

    conn = psycopg2.connect(dsn)
    conn.autocommit = False  # store が insert 毎に COMMIT / ROLLBACK
    try:
        yield conn
    finally:
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env; values override already-set environment variables."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Bulk import employees from an Excel workbook")
    p.add_argument("workbook", type=Path, help="Path to the .xlsx file (first sheet, header in row 1)")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path")
    p.add_argument("--json", dest="json_out", help="Write the batch result as JSON to this path ('-' for stdout)")
    p.add_argument("--dry-run", action="store_true", help="Use an in-memory store seeded from reference_data")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _write_json(result: BatchResult, target: str) -> None:
    payload = json.dumps(result.to_dict(), ensure_ascii=False, indent=2)
    if target == "-":
        print(payload)
    else:
        Path(target).write_text(payload + "\n", encoding="utf-8")


def _exit_code(result: BatchResult) -> int:
    if result.failed > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # NOTE: 空リスト [] はそのまま使う (None のときのみ sys.argv を読む)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    workbook: Path = args.workbook
    if not workbook.is_file():
        logger.error(f"workbook not found: {workbook}")
        return EXIT_FATAL

    dry_run = args.dry_run or os.getenv("DISABLE_DB_CONNECT") == "1"
    try:
        if dry_run:
            logger.info("dry-run: using in-memory store, nothing is persisted")
            store = MemoryEmployeeStore(
                departments=cfg.reference_data.departments,
                roles=cfg.reference_data.roles,
                hash_iterations=cfg.password_hash_iterations,
            )
            result = import_workbook(workbook, store, cfg)
        else:
            from employee_import.db.pg_store import PostgresEmployeeStore

            try:
                with _db_connection(cfg) as conn:
                    store = PostgresEmployeeStore(conn, hash_iterations=cfg.password_hash_iterations)
                    result = import_workbook(workbook, store, cfg)
            except MalformedFileError:
                raise
            except Exception as db_e:
                logger.error(f"database: {db_e}")
                return EXIT_FATAL
    except MalformedFileError as e:
        logger.error(f"workbook: {e}")
        return EXIT_FATAL

    logger.info(f"mode={'dry-run' if dry_run else 'live'} rows={result.total}")
    for outcome in result.errors:
        logger.error(f"row {outcome.row} ({outcome.employee_id}): {outcome.error}")

    # log_summary が "SUMMARY " を付与するので本文のみ渡す
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if args.json_out:
        _write_json(result, args.json_out)

    return _exit_code(result)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
