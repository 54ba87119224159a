"""
Codemode Database Connection

One small wrapper over sqlite3 (local) and psycopg (production), picked
from the URL:

- ``postgresql://`` or ``postgres://`` → PostgreSQL
- anything else (file path, ``file:`` URL, ``:memory:``) → SQLite

Statements are written for SQLite; for PostgreSQL ``?`` placeholders
become ``%s`` and ``INTEGER PRIMARY KEY AUTOINCREMENT`` becomes
``SERIAL PRIMARY KEY``.
"""

from __future__ import annotations

import re
import sqlite3
from typing import Any

from codemode.exceptions import MemoryStoreError

_AUTOINCREMENT = re.compile(r"INTEGER\s+PRIMARY\s+KEY\s+AUTOINCREMENT", re.IGNORECASE)


def to_postgres(sql: str) -> str:
    return _AUTOINCREMENT.sub("SERIAL PRIMARY KEY", sql).replace("?", "%s")


class DbConnection:
    """Runs statements against either backend; rows come back as dicts."""

    def __init__(self, conn: Any, *, is_postgres: bool = False) -> None:
        self._conn = conn
        self.is_postgres = is_postgres

    def _cursor(self, sql: str, params: tuple) -> Any:
        if self.is_postgres:
            cur = self._conn.cursor()
            cur.execute(to_postgres(sql), params or None)
            return cur
        return self._conn.execute(sql, params)

    def execute(self, sql: str, params: tuple = ()) -> None:
        """Run one write statement and commit it."""
        self._cursor(sql, params)
        self._conn.commit()

    def query(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        return [dict(row) for row in self._cursor(sql, params).fetchall()]

    def create_schema(self, ddl: str) -> None:
        """Run semicolon-separated DDL statements and commit."""
        for statement in ddl.split(";"):
            if statement.strip():
                self._cursor(statement, ())
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()


def connect(db_url: str) -> DbConnection:
    """Open ``db_url``.

    Raises:
        MemoryStoreError: if the database cannot be opened.
    """
    if db_url.startswith(("postgresql://", "postgres://")):
        import psycopg
        from psycopg.rows import dict_row

        try:
            conn = psycopg.connect(db_url, row_factory=dict_row)
        except psycopg.Error as e:
            raise MemoryStoreError(f"Cannot connect to PostgreSQL: {e}") from e
        return DbConnection(conn, is_postgres=True)

    try:
        conn = sqlite3.connect(db_url, check_same_thread=False, uri=db_url.startswith("file:"))
    except sqlite3.Error as e:
        raise MemoryStoreError(f"Cannot open SQLite database {db_url}: {e}") from e
    conn.row_factory = sqlite3.Row
    return DbConnection(conn)
