"""Ref (trunk, branch, tag) queries over what the paths plugin recorded.

The plugin owns no tables and has nothing to write per revision; it still
keeps a watermark so the revision log knows it has seen every revision.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from svnscope.revlog.errors import MissingRevisionsError
from svnscope.revlog.plugins.base import PluginBookkeeping, get_project_id

if TYPE_CHECKING:
    from svnscope.revlog.db import Database
    from svnscope.revlog.log_parser import LogEntry


class RefsPlugin:
    """The ``refs`` revision log plugin."""

    name = "refs"

    def __init__(self, db: Database) -> None:
        self._db = db
        self._bookkeeping = PluginBookkeeping(db, self.name, self.define_statistic_types())

    def get_revision_query_flags(self) -> frozenset[str]:
        return frozenset()

    def define_statistic_types(self) -> tuple[str, ...]:
        return ()

    def when_database_ready(self) -> None:
        pass

    def get_last_revision(self) -> int:
        return self._bookkeeping.get_last_revision()

    def get_statistics(self) -> dict[str, int]:
        return self._bookkeeping.get_statistics()

    def parse(self, entries: Iterable[LogEntry]) -> int:
        return self._bookkeeping.apply(entries, self.process_entry)

    def process_entry(self, entry: LogEntry) -> None:
        pass

    def find(self, criteria: Sequence[str], project_path: str) -> list[int]:
        """Revisions that touched any of the named refs of the project.

        Raises:
            ProjectNotFoundError: When the project is not indexed.
        """
        project_id = get_project_id(self._db, project_path)
        names = [name for name in criteria if name]
        if not names:
            return []

        return self._db.fetch_col(
            """
            SELECT DISTINCT cr.revision
            FROM commit_refs cr
            JOIN project_refs pr ON pr.id = cr.ref_id
            WHERE pr.project_id = :project_id AND pr.name IN :names
            ORDER BY cr.revision
            """,
            {"project_id": project_id, "names": names},
        )

    def get_all_refs(self, project_path: str) -> list[str]:
        project_id = get_project_id(self._db, project_path)
        return self._db.fetch_col(
            "SELECT name FROM project_refs WHERE project_id = :project_id ORDER BY name",
            {"project_id": project_id},
        )

    def get_revisions_data(self, revisions: Sequence[int]) -> dict[int, list[str]]:
        """Ref names per revision.

        Raises:
            MissingRevisionsError: When a requested revision touched no ref.
        """
        rows = self._db.fetch_all(
            """
            SELECT cr.revision, pr.name
            FROM commit_refs cr
            JOIN project_refs pr ON pr.id = cr.ref_id
            WHERE cr.revision IN :revisions
            ORDER BY cr.revision, pr.name
            """,
            {"revisions": list(revisions)},
        )

        data: dict[int, list[str]] = {}
        for row in rows:
            data.setdefault(row["revision"], []).append(row["name"])

        missing = [revision for revision in revisions if revision not in data]
        if missing:
            raise MissingRevisionsError(self.name, missing)
        return data
