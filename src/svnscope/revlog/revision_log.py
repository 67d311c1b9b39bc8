"""Revision log orchestration.

This module provides:
- RevisionLog: keeps a repository's local index current and answers queries
- RevisionLogFactory: opens one index database per repository root URL

Indexing pulls ``svn log --xml`` in fixed-size revision batches starting
right after the lowest plugin watermark, and hands each batch to every
registered plugin. Plugins skip revisions they already processed, so a
plugin added later catches up without reprocessing the others.
"""

from __future__ import annotations

import hashlib
import re
import time
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

import structlog

from svnscope.revlog.collision import PathCollisionDetector
from svnscope.revlog.db import Database
from svnscope.revlog.errors import DuplicatePluginError, UnknownPluginError
from svnscope.revlog.filler import RepositoryFiller
from svnscope.revlog.log_parser import LogEntry, parse_log
from svnscope.revlog.plugins.base import FLAG_VERBOSE
from svnscope.revlog.plugins.paths import PathsPlugin
from svnscope.revlog.plugins.refs import RefsPlugin
from svnscope.revlog.plugins.summary import SummaryPlugin
from svnscope.revlog.row_cache import RowCache

if TYPE_CHECKING:
    from svnscope.config.models import SvnScopeConfig
    from svnscope.repository.connector import Connector
    from svnscope.revlog.plugins.base import RevisionLogPlugin

logger = structlog.get_logger()

HISTORY_CACHE_DURATION = "10 years"


class RevisionLog:
    """Local, incrementally maintained index of one repository's history."""

    def __init__(
        self,
        repository_url: str,
        root_url: str,
        connector: Connector,
        db: Database,
        row_cache: RowCache,
        batch_size: int = 1000,
    ) -> None:
        self.repository_url = repository_url.rstrip("/")
        self.root_url = root_url.rstrip("/")
        self._connector = connector
        self._db = db
        self._row_cache = row_cache
        self._batch_size = batch_size
        self._plugins: dict[str, RevisionLogPlugin] = {}

        relative_path = self.repository_url[len(self.root_url) :] + "/"
        project_url = connector.get_project_url(self.repository_url)
        self.project_path = project_url[len(self.root_url) :] + "/"
        self.ref_name = connector.get_ref_by_path(relative_path) or ""

    def register_plugin(self, plugin: RevisionLogPlugin) -> None:
        if plugin.name in self._plugins:
            raise DuplicatePluginError(plugin.name)
        self._plugins[plugin.name] = plugin

    def get_plugin(self, name: str) -> RevisionLogPlugin:
        try:
            return self._plugins[name]
        except KeyError:
            raise UnknownPluginError(name) from None

    @property
    def plugins(self) -> list[RevisionLogPlugin]:
        return list(self._plugins.values())

    def when_database_ready(self) -> None:
        for plugin in self._plugins.values():
            plugin.when_database_ready()

    def get_last_revision(self) -> int:
        """Revision every plugin has processed up to."""
        if not self._plugins:
            return 0
        return min(plugin.get_last_revision() for plugin in self._plugins.values())

    def refresh(self) -> int:
        """Index revisions committed since the last run.

        Returns the number of revisions fetched from svn.
        """
        to_revision = self._connector.get_last_revision(self.root_url)
        from_revision = self.get_last_revision() + 1

        if from_revision > to_revision:
            logger.debug("revision_log_up_to_date", root_url=self.root_url, revision=to_revision)
            return 0

        logger.info(
            "revision_log_refresh",
            root_url=self.root_url,
            from_revision=from_revision,
            to_revision=to_revision,
        )

        fetched = 0
        batch_start = from_revision
        while batch_start <= to_revision:
            batch_end = min(batch_start + self._batch_size - 1, to_revision)
            entries = self._query_log(
                batch_start,
                batch_end,
                cache=batch_end - batch_start + 1 == self._batch_size,
            )
            self._process_batch(entries)
            fetched += len(entries)
            batch_start = batch_end + 1

        return fetched

    def _query_log(self, from_revision: int, to_revision: int, cache: bool) -> list[LogEntry]:
        flags: set[str] = set()
        for plugin in self._plugins.values():
            flags |= plugin.get_revision_query_flags()

        params = f"--xml -r {from_revision}:{to_revision}"
        if FLAG_VERBOSE in flags:
            params += " --verbose"
        params += " {" + self.root_url + "}"

        command = self._connector.get_command("log", params)
        if cache:
            command.set_cache_duration(HISTORY_CACHE_DURATION)
        return parse_log(command.run())

    def _process_batch(self, entries: list[LogEntry]) -> None:
        for plugin in self._plugins.values():
            start = time.monotonic()
            try:
                processed = plugin.parse(entries)
            except Exception:
                self._row_cache.clear()
                raise
            logger.debug(
                "plugin_batch_done",
                plugin=plugin.name,
                processed=processed,
                last_revision=plugin.get_last_revision(),
                runtime=round(time.monotonic() - start, 3),
                statistics=plugin.get_statistics(),
            )

        self._row_cache.clear()

    def find(self, plugin_name: str, criteria: str | Sequence[str]) -> list[int]:
        """Revisions of this log's project matching criteria, via one plugin."""
        if isinstance(criteria, str):
            criteria = [criteria]
        return self.get_plugin(plugin_name).find(list(criteria), self.project_path)

    def get_revisions_data(self, plugin_name: str, revisions: Sequence[int]) -> dict[int, Any]:
        return self.get_plugin(plugin_name).get_revisions_data(list(revisions))

    def get_statistics(self) -> dict[str, dict[str, int]]:
        return {name: plugin.get_statistics() for name, plugin in self._plugins.items()}

    def close(self) -> None:
        self._db.close()

    def __enter__(self) -> RevisionLog:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


class RevisionLogFactory:
    """Builds revision logs wired to their per-repository database."""

    def __init__(self, config: SvnScopeConfig, connector: Connector) -> None:
        self._config = config
        self._connector = connector

    def get_database_path(self, root_url: str) -> Path:
        netloc = urlsplit(root_url).netloc
        slug = re.sub(r"[^\w.-]+", "_", netloc) or "local"
        digest = hashlib.sha1(root_url.rstrip("/").encode("utf-8")).hexdigest()[:8]
        return self._config.database_path / f"{slug}_{digest}.sqlite"

    def get_revision_log(self, path_or_url: str) -> RevisionLog:
        """Open the revision log of a working copy or repository URL."""
        repository_url = self._connector.get_working_copy_url(path_or_url)
        root_url = self._connector.get_repository_root_url(repository_url)

        db = Database(self.get_database_path(root_url))
        db.create_all()
        row_cache = RowCache(db)
        filler = RepositoryFiller(db, row_cache)

        revision_log = RevisionLog(
            repository_url,
            root_url,
            self._connector,
            db,
            row_cache,
            batch_size=self._config.index.log_batch_size,
        )
        revision_log.register_plugin(
            PathsPlugin(
                db,
                filler,
                row_cache,
                PathCollisionDetector(),
                self._connector.get_ref_by_path,
            )
        )
        revision_log.register_plugin(SummaryPlugin(db, filler))
        revision_log.register_plugin(RefsPlugin(db))
        revision_log.when_database_ready()
        return revision_log
