"""Test fixtures for the revision log."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from svnscope.config.models import ConnectorConfig
from svnscope.repository.connector import Connector
from svnscope.revlog.collision import PathCollisionDetector
from svnscope.revlog.db import Database
from svnscope.revlog.filler import RepositoryFiller
from svnscope.revlog.plugins.paths import PathsPlugin
from svnscope.revlog.plugins.refs import RefsPlugin
from svnscope.revlog.plugins.summary import SummaryPlugin
from svnscope.revlog.row_cache import RowCache


@pytest.fixture
def db(tmp_path: Path) -> Generator[Database, None, None]:
    database = Database(tmp_path / "index.sqlite")
    database.create_all()
    yield database
    database.close()


@pytest.fixture
def row_cache(db: Database) -> RowCache:
    return RowCache(db)


@pytest.fixture
def filler(db: Database, row_cache: RowCache) -> RepositoryFiller:
    return RepositoryFiller(db, row_cache)


@pytest.fixture
def collision_detector() -> PathCollisionDetector:
    return PathCollisionDetector()


@pytest.fixture
def connector() -> Connector:
    return Connector(ConnectorConfig(), MagicMock())


@pytest.fixture
def paths_plugin(
    db: Database,
    filler: RepositoryFiller,
    row_cache: RowCache,
    collision_detector: PathCollisionDetector,
    connector: Connector,
) -> PathsPlugin:
    plugin = PathsPlugin(db, filler, row_cache, collision_detector, connector.get_ref_by_path)
    plugin.when_database_ready()
    return plugin


@pytest.fixture
def summary_plugin(db: Database, filler: RepositoryFiller) -> SummaryPlugin:
    return SummaryPlugin(db, filler)


@pytest.fixture
def refs_plugin(db: Database) -> RefsPlugin:
    return RefsPlugin(db)
