"""Commit author, date and message per revision."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

from svnscope.revlog.errors import MissingRevisionsError, UnsupportedCriterionError
from svnscope.revlog.plugins.base import PluginBookkeeping, split_criterion

if TYPE_CHECKING:
    from svnscope.revlog.db import Database
    from svnscope.revlog.filler import RepositoryFiller
    from svnscope.revlog.log_parser import LogEntry

STATISTIC_COMMIT_ADDED = "commit_added"


class SummaryPlugin:
    """The ``summary`` revision log plugin.

    Searches are repository-wide; the project path is accepted for a
    uniform plugin interface only.
    """

    name = "summary"

    def __init__(self, db: Database, filler: RepositoryFiller) -> None:
        self._db = db
        self._filler = filler
        self._bookkeeping = PluginBookkeeping(db, self.name, self.define_statistic_types())

    def get_revision_query_flags(self) -> frozenset[str]:
        return frozenset()

    def define_statistic_types(self) -> tuple[str, ...]:
        return (STATISTIC_COMMIT_ADDED,)

    def when_database_ready(self) -> None:
        pass

    def get_last_revision(self) -> int:
        return self._bookkeeping.get_last_revision()

    def get_statistics(self) -> dict[str, int]:
        return self._bookkeeping.get_statistics()

    def parse(self, entries: Iterable[LogEntry]) -> int:
        return self._bookkeeping.apply(entries, self.process_entry)

    def process_entry(self, entry: LogEntry) -> None:
        self._filler.add_commit(entry.revision, entry.author, entry.date, entry.message)
        self._bookkeeping.record_statistic(STATISTIC_COMMIT_ADDED)

    def find(self, criteria: Sequence[str], project_path: str = "") -> list[int]:
        """Revisions whose author matches any "author:<pattern>" criterion (LIKE)."""
        found: set[int] = set()
        for criterion in criteria:
            field_name, value = split_criterion(criterion)
            if field_name != "author":
                raise UnsupportedCriterionError(field_name, self.name)
            found.update(
                self._db.fetch_col(
                    "SELECT revision FROM commits WHERE author LIKE :author",
                    {"author": value},
                )
            )
        return sorted(found)

    def get_revisions_data(self, revisions: Sequence[int]) -> dict[int, dict[str, Any]]:
        """Author, date (unix timestamp) and message per revision.

        Raises:
            MissingRevisionsError: When any requested revision is not recorded.
        """
        rows = self._db.fetch_all(
            "SELECT revision, author, date, message FROM commits WHERE revision IN :revisions",
            {"revisions": list(revisions)},
        )
        data = {row.pop("revision"): row for row in rows}

        missing = [revision for revision in revisions if revision not in data]
        if missing:
            raise MissingRevisionsError(self.name, missing)
        return data
