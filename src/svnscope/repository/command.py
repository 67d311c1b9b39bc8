"""A single prepared svn invocation with optional result caching."""

from __future__ import annotations

import re
import time
from typing import TYPE_CHECKING

import structlog

from svnscope.repository.errors import RepositoryCommandError

if TYPE_CHECKING:
    from svnscope.cache.manager import CacheManager, Duration
    from svnscope.repository.process import ProcessRunner

logger = structlog.get_logger()

CACHE_NAMESPACE = "command"

_PASSWORD_ARG = re.compile(r"(--password\s+)('(?:[^']|'\"'\"')*'|\S+)")


def mask_password(command_line: str) -> str:
    return _PASSWORD_ARG.sub(r"\1'*****'", command_line)


class Command:
    """Runs a command line once per call, or serves it from the result cache.

    Caching is opt-in: nothing is read or written unless a duration, an
    invalidator or the overwrite flag was set.
    """

    def __init__(
        self,
        command_line: str,
        runner: ProcessRunner,
        cache_manager: CacheManager | None = None,
    ) -> None:
        self.command_line = command_line
        self._runner = runner
        self._cache_manager = cache_manager
        self._cache_duration: Duration = None
        self._cache_invalidator: str | None = None
        self._cache_overwrite = False
        self._cache_enabled = False

    def set_cache_duration(self, duration: Duration) -> Command:
        self._cache_duration = duration
        self._cache_enabled = True
        return self

    def set_cache_invalidator(self, invalidator: str) -> Command:
        self._cache_invalidator = invalidator
        self._cache_enabled = True
        return self

    def set_cache_overwrite(self, overwrite: bool) -> Command:
        """Skip the cache lookup and always refresh the stored result."""
        self._cache_overwrite = overwrite
        self._cache_enabled = True
        return self

    @property
    def cache_name(self) -> str:
        return f"{CACHE_NAMESPACE}:{self.command_line}"

    def run(self) -> str:
        """Return the command's stdout.

        Raises:
            RepositoryCommandError: When svn exits non-zero.
        """
        use_cache = self._cache_enabled and self._cache_manager is not None

        if use_cache and not self._cache_overwrite:
            cached = self._cache_manager.get_cache(self.cache_name, self._cache_invalidator)
            if cached is not None:
                return cached

        output = self._do_run()

        if use_cache:
            self._cache_manager.set_cache(
                self.cache_name,
                output,
                invalidator=self._cache_invalidator,
                duration=self._cache_duration,
            )
        return output

    def _do_run(self) -> str:
        start = time.monotonic()
        result = self._runner.run(self.command_line)
        runtime = time.monotonic() - start

        logger.debug(
            "svn_command",
            command=mask_password(self.command_line),
            runtime=round(runtime, 3),
            returncode=result.returncode,
        )

        if not result.success:
            raise RepositoryCommandError(mask_password(self.command_line), result.stderr)
        return result.stdout

    def __str__(self) -> str:
        return mask_password(self.command_line)
