"""
Database backend factory.

DuckDB is the default (a local file, or ``:memory:`` for tests and dry runs);
Postgres is used when the dashboard database is the target.
"""

import re
from pathlib import Path
from typing import Any

import ibis

from campaign_sync.exceptions import ConfigurationError, StoreError
from campaign_sync.utils.logging import get_logger

logger = get_logger("campaign_sync.store.connection")


def connect_backend(database_config: dict[str, Any] | None, project_dir: Path | None = None) -> ibis.BaseBackend:
    """
    Open an ibis backend from the ``database`` config section.

    Args:
        database_config: ``{type: duckdb, path: ...}`` or
            ``{type: postgres, host, port, user, password, database}``
        project_dir: Base directory for relative DuckDB paths
    """
    database_config = database_config or {}
    db_type = database_config.get("type", "duckdb")

    if db_type == "duckdb":
        return _connect_duckdb(str(database_config.get("path", ":memory:")), project_dir)

    if db_type == "postgres":
        try:
            return ibis.postgres.connect(
                host=database_config.get("host", "localhost"),
                port=int(database_config.get("port", 5432)),
                user=database_config.get("user"),
                password=database_config.get("password"),
                database=database_config.get("database"),
            )
        except Exception as e:
            raise StoreError(
                f"Cannot connect to Postgres database '{database_config.get('database')}' "
                f"at {database_config.get('host', 'localhost')}: {e}"
            ) from e

    raise ConfigurationError(f"Unsupported database type: {db_type}", details={"type": db_type})


def _connect_duckdb(path: str, project_dir: Path | None) -> ibis.BaseBackend:
    if path == ":memory:":
        return ibis.duckdb.connect()

    db_path = Path(path)
    if project_dir is not None and not db_path.is_absolute():
        db_path = project_dir / db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        return ibis.duckdb.connect(str(db_path))
    except Exception as e:
        error_str = str(e)
        if "lock" in error_str.lower() or "conflicting" in error_str.lower():
            pid_match = re.search(r"PID\s+(\d+)", error_str)
            pid_info = f" (PID: {pid_match.group(1)})" if pid_match else ""
            raise StoreError(
                f"Cannot connect to DuckDB database '{db_path}': File is locked by another process{pid_info}.\n"
                f"Please close any other processes accessing this database."
            ) from e
        raise StoreError(f"Cannot connect to DuckDB database '{db_path}': {error_str}") from e
