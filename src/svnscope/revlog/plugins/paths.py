"""Indexes changed paths and derives projects and refs from them.

For every revision the plugin records each changed path, attaches paths
to the project and ref they live on (detected from the path layout), and
links the revision to every project and ref it touched. A project that
appears after some of its paths were already indexed adopts those paths
and their revisions retroactively.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from svnscope.revlog.errors import (
    MalformedLogEntryError,
    MissingRevisionsError,
    UnsupportedCriterionError,
)
from svnscope.revlog.filler import PATH_ROW_SQL, path_checksum, path_touch_fields
from svnscope.revlog.plugins.base import (
    FLAG_VERBOSE,
    PluginBookkeeping,
    get_project_id,
    split_criterion,
)

if TYPE_CHECKING:
    from svnscope.revlog.collision import PathCollisionDetector
    from svnscope.revlog.db import Database
    from svnscope.revlog.filler import RepositoryFiller
    from svnscope.revlog.log_parser import LogEntry, PathRecord
    from svnscope.revlog.row_cache import RowCache

logger = structlog.get_logger()

RefResolver = Callable[[str], str | None]

STATISTIC_PATH_ADDED = "path_added"
STATISTIC_PATH_FOUND = "path_found"
STATISTIC_PROJECT_ADDED = "project_added"
STATISTIC_PROJECT_FOUND = "project_found"
STATISTIC_PROJECT_COLLISION_FOUND = "project_collision_found"
STATISTIC_REF_ADDED = "ref_added"
STATISTIC_REF_FOUND = "ref_found"
STATISTIC_COMMIT_ADDED_TO_PROJECT = "commit_added_to_project"
STATISTIC_COMMIT_ADDED_TO_REF = "commit_added_to_ref"
STATISTIC_EMPTY_COMMIT = "empty_commit"

VALID_KINDS = frozenset({"file", "dir"})
VALID_ACTIONS = frozenset({"A", "M", "D", "R"})

_PROJECT_ROW_SQL = "SELECT id FROM projects WHERE path = :path"
_REF_ROW_SQL = "SELECT id FROM project_refs WHERE project_id = :project_id AND name = :name"


@dataclass
class _RevisionScope:
    """Projects and refs one revision touched (dicts keep first-seen order)."""

    new_projects: dict[int, str] = field(default_factory=dict)
    existing_projects: dict[int, str] = field(default_factory=dict)
    refs: dict[int, None] = field(default_factory=dict)


class PathsPlugin:
    """The ``paths`` revision log plugin."""

    name = "paths"

    def __init__(
        self,
        db: Database,
        filler: RepositoryFiller,
        row_cache: RowCache,
        collision_detector: PathCollisionDetector,
        ref_resolver: RefResolver,
    ) -> None:
        self._db = db
        self._filler = filler
        self._row_cache = row_cache
        self._collision_detector = collision_detector
        self._ref_resolver = ref_resolver
        self._bookkeeping = PluginBookkeeping(db, self.name, self.define_statistic_types())

        for table in ("paths", "projects", "project_refs"):
            row_cache.cache_table(table)

    def get_revision_query_flags(self) -> frozenset[str]:
        return frozenset({FLAG_VERBOSE})

    def define_statistic_types(self) -> tuple[str, ...]:
        return (
            STATISTIC_PATH_ADDED,
            STATISTIC_PATH_FOUND,
            STATISTIC_PROJECT_ADDED,
            STATISTIC_PROJECT_FOUND,
            STATISTIC_PROJECT_COLLISION_FOUND,
            STATISTIC_REF_ADDED,
            STATISTIC_REF_FOUND,
            STATISTIC_COMMIT_ADDED_TO_PROJECT,
            STATISTIC_COMMIT_ADDED_TO_REF,
            STATISTIC_EMPTY_COMMIT,
        )

    def when_database_ready(self) -> None:
        self._collision_detector.add_paths(self._db.fetch_col("SELECT path FROM projects"))

    def get_last_revision(self) -> int:
        return self._bookkeeping.get_last_revision()

    def get_statistics(self) -> dict[str, int]:
        return self._bookkeeping.get_statistics()

    def parse(self, entries: Iterable[LogEntry]) -> int:
        try:
            return self._bookkeeping.apply(entries, self.process_entry)
        except Exception:
            # Rows and roots of the rolled-back revision must not survive it
            self._row_cache.clear()
            self._collision_detector.clear()
            self.when_database_ready()
            raise

    def process_entry(self, entry: LogEntry) -> None:
        revision = entry.revision

        if not entry.paths:
            self._bookkeeping.record_statistic(STATISTIC_EMPTY_COMMIT)
            return

        scope = _RevisionScope()

        # Parents sort before their children, so they are resolved first
        for record in sorted(entry.paths, key=lambda r: r.path):
            self._validate(record, revision)
            path = _adapt_path(record.path, record.kind)

            copy_revision = copy_path_id = None
            if record.copy_from_path and record.copy_from_revision is not None:
                copy_revision = record.copy_from_revision
                copy_path = _adapt_path(record.copy_from_path, record.kind)
                copy_path_id = self._resolve_path(
                    scope, copy_path, copy_revision, action="", is_usage=False
                )

            path_id = self._resolve_path(scope, path, revision, action=record.action)
            self._filler.add_path_to_commit(
                revision, record.action, record.kind, path_id, copy_revision, copy_path_id
            )

        for project_id in scope.existing_projects:
            self._filler.add_commit_to_project(revision, project_id)
            self._bookkeeping.record_statistic(STATISTIC_COMMIT_ADDED_TO_PROJECT)

        for project_id, project_path in scope.new_projects.items():
            adopted_revisions = self._add_missing_commits_to_project(project_id, project_path)
            if revision not in adopted_revisions:
                self._filler.add_commit_to_project(revision, project_id)
                self._bookkeeping.record_statistic(STATISTIC_COMMIT_ADDED_TO_PROJECT)

        for ref_id in scope.refs:
            self._filler.add_commit_to_ref(revision, ref_id)
            self._bookkeeping.record_statistic(STATISTIC_COMMIT_ADDED_TO_REF)

    def _validate(self, record: PathRecord, revision: int) -> None:
        if record.kind not in VALID_KINDS:
            raise MalformedLogEntryError(
                f'Path "{record.path}" in revision {revision} has unknown kind "{record.kind}".'
            )
        if record.action not in VALID_ACTIONS:
            raise MalformedLogEntryError(
                f'Path "{record.path}" in revision {revision} has unknown action "{record.action}".'
            )

    def _resolve_path(
        self,
        scope: _RevisionScope,
        path: str,
        revision: int,
        action: str,
        is_usage: bool = True,
    ) -> int:
        path_hash = path_checksum(path)
        row = self._row_cache.get_from_cache(
            "paths", path_hash, PATH_ROW_SQL, {"path_hash": path_hash}
        )

        if row is not None:
            if action:
                fields = path_touch_fields(action, revision, row)
                if fields:
                    touched = self._filler.touch_path(path, revision, fields)
                    for touched_hash, touched_fields in touched.items():
                        self._row_cache.update_cached("paths", touched_hash, touched_fields)

            if row["project_path"] and row["ref_name"]:
                project_id = self._resolve_project(scope, row["project_path"], is_usage)
                self._resolve_ref(scope, project_id, row["ref_name"], is_usage)

            self._bookkeeping.record_statistic(STATISTIC_PATH_FOUND)
            return int(row["id"])

        ref = self._ref_resolver(path) or ""
        project_path = _project_root(path, ref) if ref else ""

        if project_path and self._collision_detector.is_collision(project_path):
            project_path = ref = ""
            self._bookkeeping.record_statistic(STATISTIC_PROJECT_COLLISION_FOUND)

        path_id = self._filler.add_path(path, ref, project_path, revision)
        self._row_cache.set_into_cache(
            "paths",
            path_hash,
            {
                "id": path_id,
                "project_path": project_path,
                "ref_name": ref,
                "revision_added": revision,
                "revision_deleted": None,
                "revision_last_seen": revision,
            },
        )

        if project_path and ref:
            project_id = self._resolve_project(scope, project_path, is_usage)
            self._resolve_ref(scope, project_id, ref, is_usage)

        self._bookkeeping.record_statistic(STATISTIC_PATH_ADDED)
        return path_id

    def _resolve_project(self, scope: _RevisionScope, project_path: str, is_usage: bool) -> int:
        row = self._row_cache.get_from_cache(
            "projects", project_path, _PROJECT_ROW_SQL, {"path": project_path}
        )

        if row is not None:
            project_id = int(row["id"])
            if is_usage and project_id not in scope.new_projects:
                scope.existing_projects[project_id] = project_path
                self._bookkeeping.record_statistic(STATISTIC_PROJECT_FOUND)
            return project_id

        project_id = self._filler.add_project(project_path)
        self._row_cache.set_into_cache("projects", project_path, {"id": project_id})
        self._collision_detector.add_paths([project_path])

        if is_usage:
            scope.new_projects[project_id] = project_path
            self._bookkeeping.record_statistic(STATISTIC_PROJECT_ADDED)
        return project_id

    def _resolve_ref(
        self, scope: _RevisionScope, project_id: int, ref: str, is_usage: bool
    ) -> int:
        key = f"{project_id}:{ref}"
        row = self._row_cache.get_from_cache(
            "project_refs", key, _REF_ROW_SQL, {"project_id": project_id, "name": ref}
        )

        if row is not None:
            ref_id = int(row["id"])
            self._bookkeeping.record_statistic(STATISTIC_REF_FOUND)
        else:
            ref_id = self._filler.add_ref_to_project(ref, project_id)
            self._row_cache.set_into_cache("project_refs", key, {"id": ref_id})
            self._bookkeeping.record_statistic(STATISTIC_REF_ADDED)

        if is_usage:
            scope.refs[ref_id] = None
        return ref_id

    def _add_missing_commits_to_project(self, project_id: int, project_path: str) -> set[int]:
        """Move projectless paths under the project root into it.

        Returns the revisions (now linked to the project) that touched them.
        """
        path_ids = self._db.fetch_col(
            """
            SELECT id FROM paths
            WHERE project_path = '' AND substr(path, 1, length(:prefix)) = :prefix
            """,
            {"prefix": project_path},
        )
        if not path_ids:
            return set()

        self._filler.move_paths_into_project(path_ids, project_path)

        revisions = self._db.fetch_col(
            "SELECT DISTINCT revision FROM commit_paths WHERE path_id IN :path_ids ORDER BY revision",
            {"path_ids": path_ids},
        )
        for revision in revisions:
            self._filler.add_commit_to_project(revision, project_id)
            self._bookkeeping.record_statistic(STATISTIC_COMMIT_ADDED_TO_PROJECT)

        logger.debug(
            "project_backfill",
            project=project_path,
            paths=len(path_ids),
            revisions=len(revisions),
        )
        return set(revisions)

    def find(self, criteria: Sequence[str], project_path: str) -> list[int]:
        """Revisions of a project matching any of the criteria.

        A revision matches when any path it changed matches, whether or not
        that path lies under the project root.

        Criteria:
            "": every revision of the project
            "action:<pattern>", "kind:<pattern>": LIKE pattern on the change
            "/some/dir/": any path in that subtree
            "/some/file": that exact path

        Raises:
            ProjectNotFoundError: When the project is not indexed.
            UnsupportedCriterionError: On any other "field:value" criterion.
        """
        project_id = get_project_id(self._db, project_path)
        if not criteria:
            return []

        if criteria[0] == "":
            return self._db.fetch_col(
                "SELECT revision FROM commit_projects WHERE project_id = :project_id "
                "ORDER BY revision",
                {"project_id": project_id},
            )

        found: set[int] = set()
        for criterion in criteria:
            found.update(self._find_by_criterion(criterion, project_id))
        return sorted(found)

    def _find_by_criterion(self, criterion: str, project_id: int) -> list[int]:
        field_name, value = split_criterion(criterion)
        if field_name and not criterion.startswith("/"):
            if field_name not in ("action", "kind"):
                raise UnsupportedCriterionError(field_name, self.name)
            condition = f"cpa.{field_name} LIKE :value"
            params: dict[str, Any] = {"value": value}
        elif criterion.endswith("/"):
            condition = "substr(p.path, 1, length(:value)) = :value"
            params = {"value": criterion}
        else:
            condition = "p.path_hash = :value"
            params = {"value": path_checksum(criterion)}

        return self._db.fetch_col(
            f"""
            SELECT DISTINCT cpa.revision
            FROM commit_paths cpa
            JOIN paths p ON p.id = cpa.path_id
            JOIN commit_projects cpr
                ON cpr.revision = cpa.revision AND cpr.project_id = :project_id
            WHERE {condition}
            """,
            {**params, "project_id": project_id},
        )

    def get_revisions_data(self, revisions: Sequence[int]) -> dict[int, list[dict[str, Any]]]:
        """Changed paths per revision, in path order.

        Raises:
            MissingRevisionsError: When any requested revision has no paths.
        """
        rows = self._db.fetch_all(
            """
            SELECT cpa.revision, p.path, cpa.kind, cpa.action,
                   cp.path AS copy_path, cpa.copy_revision
            FROM commit_paths cpa
            JOIN paths p ON p.id = cpa.path_id
            LEFT JOIN paths cp ON cp.id = cpa.copy_path_id
            WHERE cpa.revision IN :revisions
            ORDER BY cpa.revision, p.path
            """,
            {"revisions": list(revisions)},
        )

        data: dict[int, list[dict[str, Any]]] = {}
        for row in rows:
            revision = row.pop("revision")
            data.setdefault(revision, []).append(row)

        missing = [revision for revision in revisions if revision not in data]
        if missing:
            raise MissingRevisionsError(self.name, missing)
        return data


def _adapt_path(path: str, kind: str) -> str:
    if kind == "dir" and not path.endswith("/"):
        return path + "/"
    return path


def _project_root(path: str, ref: str) -> str:
    """Path prefix in front of the ref, ending with "/"."""
    marker = "/" + ref
    position = path.find(marker)
    while position != -1:
        end = position + len(marker)
        if end == len(path) or path[end] == "/":
            return path[: position + 1]
        position = path.find(marker, position + 1)
    return ""
