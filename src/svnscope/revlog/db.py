"""SQLite store for the revision log index.

This module provides:
- Database: engine + single long-lived connection (one writer per invocation)
- Parameterized fetch helpers (column, row, value, all rows) and writes
- transaction(): all-or-nothing block used once per processed revision

List/tuple parameter values are bound as expanding parameters, so
``WHERE id IN :ids`` accepts a Python sequence.
"""

from __future__ import annotations

from collections.abc import Generator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import bindparam, event, text
from sqlmodel import SQLModel, create_engine

# Register table models on SQLModel.metadata
from svnscope.revlog import models as _models  # noqa: F401

if TYPE_CHECKING:
    from sqlalchemy import Connection, CursorResult, Engine, TextClause

logger = structlog.get_logger()

Params = Mapping[str, Any] | None


class Database:
    """SQLite connection manager for one repository's index file."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self.engine = self._create_engine()
        self._conn: Connection | None = None
        self._in_transaction = False

    def _create_engine(self) -> Engine:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(f"sqlite:///{self.db_path}")
        event.listen(engine, "connect", _configure_pragmas)
        return engine

    @property
    def connection(self) -> Connection:
        if self._conn is None:
            self._conn = self.engine.connect()
        return self._conn

    def create_all(self) -> None:
        """Create all tables from SQLModel metadata."""
        SQLModel.metadata.create_all(self.engine)

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        """All-or-nothing block. A nested block joins the outer one.

        Commits on successful exit, rolls back on exception.
        """
        if self._in_transaction:
            yield
            return

        conn = self.connection
        if conn.in_transaction():
            conn.commit()

        self._in_transaction = True
        try:
            yield
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            self._in_transaction = False

    def fetch_col(self, sql: str, params: Params = None) -> list[Any]:
        """First column of every row."""
        result = self._execute(sql, params)
        values = [row[0] for row in result]
        self._autocommit()
        return values

    def fetch_one(self, sql: str, params: Params = None) -> dict[str, Any] | None:
        """First row as a dict, or None."""
        result = self._execute(sql, params)
        row = result.mappings().first()
        self._autocommit()
        return dict(row) if row is not None else None

    def fetch_value(self, sql: str, params: Params = None) -> Any:
        """First column of the first row, or None."""
        result = self._execute(sql, params)
        value = result.scalar()
        self._autocommit()
        return value

    def fetch_all(self, sql: str, params: Params = None) -> list[dict[str, Any]]:
        result = self._execute(sql, params)
        rows = [dict(row) for row in result.mappings()]
        self._autocommit()
        return rows

    def perform(self, sql: str, params: Params = None) -> int:
        """Run a write statement, returning affected row count."""
        result = self._execute(sql, params)
        count = int(result.rowcount)
        self._autocommit()
        return count

    def insert(self, sql: str, params: Params = None) -> int:
        """Run an INSERT, returning the new row id."""
        result = self._execute(sql, params)
        row_id = result.lastrowid
        self._autocommit()
        return int(row_id)

    def close(self) -> None:
        if self._conn is not None:
            if self._conn.in_transaction():
                self._conn.commit()
            self._conn.close()
            self._conn = None
        self.engine.dispose()

    def _execute(self, sql: str, params: Params) -> CursorResult[Any]:
        bound = {
            name: list(value) if isinstance(value, tuple | set | frozenset) else value
            for name, value in (params or {}).items()
        }
        return self.connection.execute(_statement(sql, params), bound)

    def _autocommit(self) -> None:
        if not self._in_transaction and self.connection.in_transaction():
            self.connection.commit()


def _statement(sql: str, params: Params) -> TextClause:
    stmt = text(sql)
    for name, value in (params or {}).items():
        if isinstance(value, list | tuple | set | frozenset):
            stmt = stmt.bindparams(bindparam(name, expanding=True))
    return stmt


def _configure_pragmas(dbapi_conn: Any, _connection_record: Any) -> None:
    """Configure SQLite for a single local writer."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=30000")  # 30 second wait
    cursor.execute("PRAGMA synchronous=NORMAL")  # Safe with WAL
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA cache_size=-64000")  # 64MB cache
    cursor.close()
