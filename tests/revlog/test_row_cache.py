"""Tests for the per-run row cache."""

from __future__ import annotations

from unittest.mock import MagicMock

from svnscope.revlog.row_cache import RowCache

SQL = "SELECT id FROM projects WHERE path = :path"


class TestRowCache:
    def test_fetches_once_then_serves_cached(self) -> None:
        db = MagicMock()
        db.fetch_one.return_value = {"id": 1}
        cache = RowCache(db)

        first = cache.get_from_cache("projects", "/a/", SQL, {"path": "/a/"})
        second = cache.get_from_cache("projects", "/a/", SQL, {"path": "/a/"})

        assert first == second == {"id": 1}
        db.fetch_one.assert_called_once_with(SQL, {"path": "/a/"})

    def test_miss_cached_only_for_hot_tables(self) -> None:
        db = MagicMock()
        db.fetch_one.return_value = None
        cache = RowCache(db)
        cache.cache_table("projects")

        cache.get_from_cache("projects", "/a/", SQL, {"path": "/a/"})
        cache.get_from_cache("projects", "/a/", SQL, {"path": "/a/"})
        cache.get_from_cache("other", "/a/", SQL, {"path": "/a/"})
        cache.get_from_cache("other", "/a/", SQL, {"path": "/a/"})

        assert db.fetch_one.call_count == 3

    def test_without_sql_unknown_is_none(self) -> None:
        db = MagicMock()
        cache = RowCache(db)

        assert cache.get_from_cache("projects", "/a/") is None
        db.fetch_one.assert_not_called()

    def test_set_overrides_cached_miss(self) -> None:
        db = MagicMock()
        db.fetch_one.return_value = None
        cache = RowCache(db)
        cache.cache_table("projects")
        cache.get_from_cache("projects", "/a/", SQL, {"path": "/a/"})

        cache.set_into_cache("projects", "/a/", {"id": 9})

        assert cache.get_from_cache("projects", "/a/", SQL, {"path": "/a/"}) == {"id": 9}

    def test_returned_rows_are_copies(self) -> None:
        cache = RowCache(MagicMock())
        cache.set_into_cache("paths", "h", {"id": 1, "revision_last_seen": 5})

        row = cache.get_from_cache("paths", "h")
        row["revision_last_seen"] = 99

        assert cache.get_from_cache("paths", "h") == {"id": 1, "revision_last_seen": 5}

    def test_update_cached(self) -> None:
        cache = RowCache(MagicMock())
        cache.set_into_cache("paths", "h", {"id": 1, "revision_last_seen": 5})

        assert cache.update_cached("paths", "h", {"revision_last_seen": 7}) is True
        assert cache.update_cached("paths", "missing", {"revision_last_seen": 7}) is False
        assert cache.get_from_cache("paths", "h") == {"id": 1, "revision_last_seen": 7}

    def test_clear_keeps_hot_tables(self) -> None:
        db = MagicMock()
        db.fetch_one.return_value = None
        cache = RowCache(db)
        cache.cache_table("projects")
        cache.set_into_cache("projects", "/a/", {"id": 1})

        cache.clear()
        cache.get_from_cache("projects", "/b/", SQL, {"path": "/b/"})
        cache.get_from_cache("projects", "/b/", SQL, {"path": "/b/"})

        assert cache.get_from_cache("projects", "/a/") is None
        assert db.fetch_one.call_count == 1
        assert len(cache) == 1
