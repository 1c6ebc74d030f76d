from __future__ import annotations

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection, Engine


logger = logging.getLogger(__name__)

# Columns added after the first release. create_all() never alters an
# existing table, so older databases get them here.
LATE_COLUMNS: dict[str, list[tuple[str, str]]] = {
    "users": [("last_login", "last_login TIMESTAMP")],
    "companies": [
        ("vision", "vision TEXT"),
        ("mission", "mission TEXT"),
        ("logo", "logo VARCHAR(1000)"),
        ("updated_at", "updated_at TIMESTAMP"),
    ],
    "jobs": [
        ("benefits", "benefits TEXT"),
        ("deadline", "deadline DATE"),
        ("updated_at", "updated_at TIMESTAMP"),
    ],
    "applications": [("updated_at", "updated_at TIMESTAMP")],
    "profiles": [("profile_picture", "profile_picture VARCHAR(1000)")],
}


def _existing_columns(conn: Connection, table_name: str) -> set[str] | None:
    inspector = inspect(conn)
    if not inspector.has_table(table_name):
        return None
    return {column["name"] for column in inspector.get_columns(table_name)}


def _add_column_if_missing(conn: Connection, table_name: str, column_name: str, column_sql: str) -> bool:
    columns = _existing_columns(conn, table_name)
    if columns is None or column_name in columns:
        return False
    conn.execute(text(f"ALTER TABLE {table_name} ADD COLUMN {column_sql}"))
    logger.info("Added column %s.%s", table_name, column_name)
    return True


def run_runtime_migrations(engine: Engine) -> list[str]:
    added: list[str] = []
    with engine.begin() as conn:
        for table_name, columns in LATE_COLUMNS.items():
            for column_name, column_sql in columns:
                if _add_column_if_missing(conn, table_name, column_name, column_sql):
                    added.append(f"{table_name}.{column_name}")
    return added
