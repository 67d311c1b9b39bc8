"""Plugin contract and the bookkeeping every plugin composes.

A plugin turns log entries into rows of the tables it owns and answers
find() queries over them. Each plugin keeps its own watermark (the last
revision it fully processed) in ``plugin_data``; a revision's writes and
the watermark update commit together or not at all.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING, Any, Protocol

from svnscope.revlog.errors import ProjectNotFoundError

if TYPE_CHECKING:
    from svnscope.revlog.db import Database
    from svnscope.revlog.log_parser import LogEntry

FLAG_VERBOSE = "verbose"


class RevisionLogPlugin(Protocol):
    """What the revision log needs from a plugin."""

    name: str

    def get_revision_query_flags(self) -> frozenset[str]: ...

    def define_statistic_types(self) -> tuple[str, ...]: ...

    def when_database_ready(self) -> None: ...

    def parse(self, entries: Iterable[LogEntry]) -> int: ...

    def process_entry(self, entry: LogEntry) -> None: ...

    def find(self, criteria: Sequence[str], project_path: str) -> list[int]: ...

    def get_revisions_data(self, revisions: Sequence[int]) -> dict[int, Any]: ...

    def get_last_revision(self) -> int: ...

    def get_statistics(self) -> dict[str, int]: ...


class PluginBookkeeping:
    """Watermark, statistics and the per-revision transaction loop of one plugin."""

    def __init__(self, db: Database, name: str, statistic_types: Iterable[str]) -> None:
        self._db = db
        self.name = name
        self._statistics = dict.fromkeys(statistic_types, 0)
        self._last_revision: int | None = None

    def get_last_revision(self) -> int:
        if self._last_revision is None:
            value = self._db.fetch_value(
                "SELECT last_revision FROM plugin_data WHERE name = :name",
                {"name": self.name},
            )
            self._last_revision = int(value) if value is not None else 0
        return self._last_revision

    def set_last_revision(self, revision: int) -> None:
        """Move the watermark forward. Lower or equal revisions are ignored."""
        if revision <= self.get_last_revision():
            return
        self._store_last_revision(revision)
        self._last_revision = revision

    def _store_last_revision(self, revision: int) -> None:
        self._db.perform(
            """
            INSERT INTO plugin_data (name, last_revision) VALUES (:name, :revision)
            ON CONFLICT(name) DO UPDATE SET last_revision = excluded.last_revision
            """,
            {"name": self.name, "revision": revision},
        )

    def record_statistic(self, statistic_type: str, count: int = 1) -> None:
        if statistic_type not in self._statistics:
            raise ValueError(
                f'The "{statistic_type}" statistic type is unknown to "{self.name}" plugin.'
            )
        self._statistics[statistic_type] += count

    def get_statistics(self) -> dict[str, int]:
        return dict(self._statistics)

    def apply(
        self, entries: Iterable[LogEntry], process_entry: Callable[[LogEntry], None]
    ) -> int:
        """Process entries above the watermark, one transaction per revision.

        Returns the number of revisions processed. A failure rolls back the
        failing revision only; earlier revisions stay committed.
        """
        last_revision = self.get_last_revision()
        processed = 0

        for entry in entries:
            if entry.revision <= last_revision:
                continue

            with self._db.transaction():
                process_entry(entry)
                self._store_last_revision(entry.revision)

            last_revision = self._last_revision = entry.revision
            processed += 1

        return processed


def get_project_id(db: Database, project_path: str) -> int:
    """Id of an indexed project.

    Raises:
        ProjectNotFoundError: When no project has that path.
    """
    project_id = db.fetch_value(
        "SELECT id FROM projects WHERE path = :path", {"path": project_path}
    )
    if project_id is None:
        raise ProjectNotFoundError(project_path)
    return int(project_id)


def split_criterion(criterion: str) -> tuple[str, str]:
    """Split "field:value"; a criterion without a field is ("", criterion)."""
    field, sep, value = criterion.partition(":")
    if not sep:
        return "", criterion
    return field, value
