"""Tests for Command execution and result caching."""

from __future__ import annotations

from pathlib import Path

import pytest

from svnscope.cache.manager import CacheManager
from svnscope.repository.command import Command, mask_password
from svnscope.repository.errors import RepositoryCommandError


@pytest.fixture
def cache_manager(tmp_path: Path) -> CacheManager:
    return CacheManager(tmp_path / "cache")


class TestRun:
    def test_returns_stdout(self, fake_runner) -> None:
        fake_runner.expect("svn --non-interactive --version", "1.14.2")

        assert Command("svn --non-interactive --version", fake_runner).run() == "1.14.2"

    def test_error_raises_command_error(self, fake_runner) -> None:
        fake_runner.expect_error("svn --non-interactive log", 170000, "URL doesn't exist")

        with pytest.raises(RepositoryCommandError) as exc_info:
            Command("svn --non-interactive log", fake_runner).run()

        assert exc_info.value.code == 170000
        assert exc_info.value.command == "svn --non-interactive log"

    def test_error_hides_password(self, fake_runner) -> None:
        line = "svn --non-interactive --password 'secret' log"
        fake_runner.expect_error(line, 170001, "Authorization failed")

        with pytest.raises(RepositoryCommandError) as exc_info:
            Command(line, fake_runner).run()

        assert "secret" not in str(exc_info.value)


class TestCaching:
    def test_not_cached_by_default(self, fake_runner, cache_manager: CacheManager) -> None:
        fake_runner.expect("svn log", "out")

        Command("svn log", fake_runner, cache_manager).run()
        Command("svn log", fake_runner, cache_manager).run()

        assert fake_runner.calls == ["svn log", "svn log"]

    def test_duration_enables_cache(self, fake_runner, cache_manager: CacheManager) -> None:
        fake_runner.expect("svn log", "out")

        first = Command("svn log", fake_runner, cache_manager).set_cache_duration("1 hour").run()
        second = Command("svn log", fake_runner, cache_manager).set_cache_duration("1 hour").run()

        assert first == second == "out"
        assert fake_runner.calls == ["svn log"]

    def test_invalidator_change_reruns(self, fake_runner, cache_manager: CacheManager) -> None:
        fake_runner.expect("svn log", "old")
        fake_runner.expect("svn log", "new")

        Command("svn log", fake_runner, cache_manager).set_cache_invalidator("r1").run()
        result = Command("svn log", fake_runner, cache_manager).set_cache_invalidator("r2").run()

        assert result == "new"
        assert len(fake_runner.calls) == 2

    def test_overwrite_skips_lookup_and_refreshes(
        self, fake_runner, cache_manager: CacheManager
    ) -> None:
        fake_runner.expect("svn log", "old")
        fake_runner.expect("svn log", "new")
        Command("svn log", fake_runner, cache_manager).set_cache_duration(60).run()

        refreshed = Command("svn log", fake_runner, cache_manager).set_cache_overwrite(True).run()
        cached = Command("svn log", fake_runner, cache_manager).set_cache_duration(60).run()

        assert refreshed == "new"
        assert cached == "new"
        assert len(fake_runner.calls) == 2

    def test_failed_command_not_cached(self, fake_runner, cache_manager: CacheManager) -> None:
        fake_runner.expect_error("svn log", 1, "boom")

        with pytest.raises(RepositoryCommandError):
            Command("svn log", fake_runner, cache_manager).set_cache_duration(60).run()

        assert cache_manager.get_cache("command:svn log") is None

    def test_cache_name(self, fake_runner) -> None:
        assert Command("svn info", fake_runner).cache_name == "command:svn info"


class TestMaskPassword:
    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("svn --password 'p' log", "svn --password '*****' log"),
            ("svn --password plain log", "svn --password '*****' log"),
            ("svn --password 'it'\"'\"'s' log", "svn --password '*****' log"),
            ("svn log", "svn log"),
        ],
    )
    def test_mask(self, line: str, expected: str) -> None:
        assert mask_password(line) == expected
