"""
SQL text helpers for ibis backends.
"""

from datetime import datetime
from typing import Any

import ibis


def escape_sql_string(value: str) -> str:
    """Escape single quotes for SQL strings."""
    return value.replace("'", "''")


def sql_value(value: Any) -> str:
    """Convert Python value to SQL literal."""
    if value is None:
        return "NULL"
    # bool before int: isinstance(True, int) is True
    elif isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    elif isinstance(value, (int, float)):
        return str(value)
    elif isinstance(value, datetime):
        return f"TIMESTAMP '{value.isoformat()}'"
    else:
        return f"'{escape_sql_string(str(value))}'"


def sql_list(values: list[Any]) -> str:
    """Comma-separated literal list for an IN (...) clause."""
    return ", ".join(sql_value(v) for v in values)


def execute(backend: ibis.BaseBackend, query: str) -> None:
    """Run a statement for its side effects."""
    backend.raw_sql(query)


def fetch_all(backend: ibis.BaseBackend, query: str) -> list[tuple]:
    """
    Run a query and return its rows as tuples.

    DuckDB's raw_sql returns the DB-API connection and Postgres returns a
    cursor; both expose fetchall().
    """
    result = backend.raw_sql(query)
    return list(result.fetchall())
