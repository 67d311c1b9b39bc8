"""Write side of the revision log index.

All inserts are append-only; path rows are only ever updated in place
(project assignment, lifecycle revisions). Commit and association rows that
already exist are left alone, so applying a revision again adds nothing.
Callers own transactions.
"""

from __future__ import annotations

import hashlib
import posixpath
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from svnscope.revlog.db import Database
    from svnscope.revlog.row_cache import RowCache

PATH_ROW_SQL = """
    SELECT id, project_path, ref_name, revision_added, revision_deleted, revision_last_seen
    FROM paths
    WHERE path_hash = :path_hash
"""

_TOUCH_COLUMNS = frozenset({"revision_added", "revision_deleted", "revision_last_seen"})


def path_checksum(path: str) -> str:
    """Stable identity of a normalized path ("dir/" and "dir" differ)."""
    return hashlib.sha1(path.encode("utf-8")).hexdigest()


def path_nesting_level(path: str) -> int:
    """Depth below the repository root: "/a" and "/a/" are 0, "/a/b" is 1."""
    return max(path.rstrip("/").count("/") - 1, 0)


def path_touch_fields(action: str, revision: int, path_data: dict[str, Any]) -> dict[str, Any]:
    """Lifecycle columns that change when ``action`` hits an existing path."""
    fields: dict[str, Any] = {}

    if action == "D":
        fields["revision_deleted"] = revision
        return fields

    if path_data["revision_deleted"]:
        fields["revision_deleted"] = None
    if action == "A" and path_data["revision_added"] > revision:
        fields["revision_added"] = revision
    if path_data["revision_last_seen"] < revision:
        fields["revision_last_seen"] = revision

    return fields


class RepositoryFiller:
    """Idempotent writers for paths, projects, refs, commits and their links."""

    def __init__(self, db: Database, row_cache: RowCache) -> None:
        self._db = db
        self._row_cache = row_cache

    def add_path(self, path: str, ref: str, project_path: str, revision: int) -> int:
        return self._db.insert(
            """
            INSERT INTO paths (
                path, path_nesting_level, path_hash, ref_name, project_path,
                revision_added, revision_last_seen
            )
            VALUES (:path, :nesting, :path_hash, :ref, :project_path, :revision, :revision)
            """,
            {
                "path": path,
                "nesting": path_nesting_level(path),
                "path_hash": path_checksum(path),
                "ref": ref,
                "project_path": project_path,
                "revision": revision,
            },
        )

    def touch_path(
        self, path: str, revision: int, fields: dict[str, Any]
    ) -> dict[str, dict[str, Any]]:
        """Apply lifecycle fields to a path and bump last-seen on its parents.

        Returns {path_hash: changed fields} for every row that was updated.
        """
        if not fields:
            raise ValueError("Touch fields can't be empty.")
        unknown = set(fields) - _TOUCH_COLUMNS
        if unknown:
            raise ValueError(f"Can't touch path columns: {', '.join(sorted(unknown))}")

        path_hash = path_checksum(path)
        touched = self._propagate_revision_last_seen(path, revision)
        touched[path_hash] = dict(fields)

        assignments = ", ".join(f"{column} = :{column}" for column in fields)
        self._db.perform(
            f"UPDATE paths SET {assignments} WHERE path_hash = :path_hash",
            {**fields, "path_hash": path_hash},
        )
        return touched

    def _propagate_revision_last_seen(
        self, path: str, revision: int
    ) -> dict[str, dict[str, Any]]:
        touched: dict[str, dict[str, Any]] = {}
        parent = path.rstrip("/")

        while True:
            parent = posixpath.dirname(parent)
            if parent in ("", "/"):
                break

            parent_hash = path_checksum(parent + "/")
            row = self._row_cache.get_from_cache(
                "paths", parent_hash, PATH_ROW_SQL, {"path_hash": parent_hash}
            )
            # Parents of very old paths may predate the indexed range
            if row is None or row["revision_last_seen"] >= revision:
                continue

            self._db.perform(
                "UPDATE paths SET revision_last_seen = :revision WHERE path_hash = :path_hash",
                {"revision": revision, "path_hash": parent_hash},
            )
            touched[parent_hash] = {"revision_last_seen": revision}

        return touched

    def move_paths_into_project(self, path_ids: list[int], project_path: str) -> None:
        self._db.perform(
            "UPDATE paths SET project_path = :project_path WHERE id IN :path_ids",
            {"project_path": project_path, "path_ids": path_ids},
        )

    def add_project(self, path: str) -> int:
        return self._db.insert("INSERT INTO projects (path) VALUES (:path)", {"path": path})

    def add_ref_to_project(self, ref: str, project_id: int) -> int:
        return self._db.insert(
            "INSERT INTO project_refs (project_id, name) VALUES (:project_id, :name)",
            {"project_id": project_id, "name": ref},
        )

    def add_commit(
        self, revision: int, author: str, date: datetime | None, message: str
    ) -> None:
        self._db.perform(
            """
            INSERT OR IGNORE INTO commits (revision, author, date, message)
            VALUES (:revision, :author, :date, :message)
            """,
            {
                "revision": revision,
                "author": author,
                "date": int(date.timestamp()) if date is not None else None,
                "message": message,
            },
        )

    def add_path_to_commit(
        self,
        revision: int,
        action: str,
        kind: str,
        path_id: int,
        copy_revision: int | None = None,
        copy_path_id: int | None = None,
    ) -> None:
        self._db.perform(
            """
            INSERT OR IGNORE INTO commit_paths (
                revision, path_id, action, kind, copy_revision, copy_path_id
            )
            VALUES (:revision, :path_id, :action, :kind, :copy_revision, :copy_path_id)
            """,
            {
                "revision": revision,
                "path_id": path_id,
                "action": action,
                "kind": kind,
                "copy_revision": copy_revision,
                "copy_path_id": copy_path_id,
            },
        )

    def add_commit_to_project(self, revision: int, project_id: int) -> None:
        self._db.perform(
            "INSERT OR IGNORE INTO commit_projects (revision, project_id) "
            "VALUES (:revision, :project_id)",
            {"revision": revision, "project_id": project_id},
        )

    def add_commit_to_ref(self, revision: int, ref_id: int) -> None:
        self._db.perform(
            "INSERT OR IGNORE INTO commit_refs (revision, ref_id) VALUES (:revision, :ref_id)",
            {"revision": revision, "ref_id": ref_id},
        )
