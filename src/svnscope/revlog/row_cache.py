"""Read-through cache of recently resolved index rows.

Lives for one indexing run. Rows are keyed by (table, key) where key is
whatever identifies the row to its caller (path hash, project path,
"project_id:ref"). Tables registered with cache_table() also remember
misses, so a row known to be absent is not queried again until someone
stores it.

The cache only saves queries; the store stays the source of truth.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from svnscope.revlog.db import Database, Params

Row = dict[str, Any]

_MISS = object()


class RowCache:
    """Per-run (table, key) -> row cache backed by fetch-on-miss queries."""

    def __init__(self, db: Database) -> None:
        self._db = db
        self._tables: set[str] = set()
        self._rows: dict[str, dict[str, Any]] = {}

    def cache_table(self, table: str) -> None:
        """Mark a table as hot so its misses are remembered too."""
        self._tables.add(table)
        self._rows.setdefault(table, {})

    def get_from_cache(
        self,
        table: str,
        key: str,
        sql: str | None = None,
        params: Params = None,
    ) -> Row | None:
        """Return the cached row, or run ``sql`` and cache the outcome.

        Returns None when the row does not exist (or is unknown and no
        fallback query was given).
        """
        bucket = self._rows.setdefault(table, {})
        cached = bucket.get(key, _MISS)
        if cached is not _MISS:
            return dict(cached) if cached is not None else None

        if sql is None:
            return None

        row = self._db.fetch_one(sql, params)
        if row is not None or table in self._tables:
            bucket[key] = row
        return dict(row) if row is not None else None

    def set_into_cache(self, table: str, key: str, row: Row) -> None:
        self._rows.setdefault(table, {})[key] = dict(row)

    def update_cached(self, table: str, key: str, fields: Row) -> bool:
        """Merge fields into an already cached row. Returns False when not cached."""
        cached = self._rows.get(table, {}).get(key)
        if cached is None:
            return False
        cached.update(fields)
        return True

    def clear(self) -> None:
        """Drop cached rows, keeping the hot-table registrations."""
        self._rows = {table: {} for table in self._tables}

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._rows.values())
