"""Builds svn commands and answers repository questions from their output.

This module provides:
- Connector: command line construction (credentials, quoting)
- One-shot "svn upgrade" recovery for outdated working copies
- svn info helpers (working copy URL, root URL, last revision)
- Ref detection from repository paths
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from collections.abc import Callable
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

import questionary
import structlog
from rich.console import Console
from rich.markup import escape

from svnscope.repository.command import Command
from svnscope.repository.errors import (
    InvalidUrlError,
    RepositoryCommandError,
    WorkingCopyInfoError,
)

if TYPE_CHECKING:
    from svnscope.cache.manager import CacheManager
    from svnscope.config.models import ConnectorConfig
    from svnscope.repository.process import ProcessRunner

logger = structlog.get_logger()

Confirm = Callable[[str, bool], bool]

REF_PATTERN = re.compile(r"^.*?/(trunk|branches/[^/]+|tags/[^/]+|releases/[^/]+)(?=/|$)")

_PLACEHOLDER = re.compile(r"\{([^}]*)\}")


def quote_argument(value: str) -> str:
    """Single-quote a value for the command line, even when it looks safe."""
    return "'" + value.replace("'", "'\"'\"'") + "'"


def ask_confirmation(question: str, default: bool) -> bool:
    answer = questionary.confirm(question, default=default).ask()
    return bool(answer)


class Connector:
    """Entry point for everything that talks to the svn client."""

    def __init__(
        self,
        config: ConnectorConfig,
        runner: ProcessRunner,
        cache_manager: CacheManager | None = None,
        *,
        confirm: Confirm = ask_confirmation,
        console: Console | None = None,
    ) -> None:
        self._config = config
        self._runner = runner
        self._cache_manager = cache_manager
        self._confirm = confirm
        self._console = console or Console(stderr=True)

    def get_command(self, sub_command: str, params: str = "") -> Command:
        """Prepare an svn command.

        ``{value}`` tokens in params are replaced by quoted literals; the
        rest of params is passed as written.

        Raises:
            ValueError: When the sub-command contains whitespace.
        """
        if re.search(r"\s", sub_command):
            raise ValueError(f'The "{sub_command}" sub-command contains spaces.')

        parts = [self._config.binary, "--non-interactive"]
        if self._config.username:
            parts += ["--username", quote_argument(self._config.username)]
        if self._config.password:
            parts += ["--password", quote_argument(self._config.password)]
        if sub_command:
            parts.append(sub_command)
        if params:
            parts.append(_PLACEHOLDER.sub(lambda m: quote_argument(m.group(1)), params))

        return Command(" ".join(parts), self._runner, self._cache_manager)

    def run_with_upgrade(self, sub_command: str, params: str, target: str) -> str:
        """Run a command against a working copy, upgrading it once if svn asks to.

        Raises:
            RepositoryCommandError: Any other failure, a declined upgrade, or a
                failure of the upgrade or of the retried command.
        """
        try:
            return self.get_command(sub_command, params).run()
        except RepositoryCommandError as e:
            if not e.is_upgrade_required:
                raise

            logger.warning("wc_upgrade_required", target=target, code=e.code)
            self._console.print()
            self._console.print(f"[red]{escape(e.error_message)}[/red]")
            self._console.print()
            if not self._confirm('Run "svn upgrade"', False):
                raise

        self.get_command("upgrade", "{" + target + "}").run()
        return self.get_command(sub_command, params).run()

    def get_property(self, name: str, path_or_url: str, revision: int | None = None) -> str:
        params = f"{name} {{{path_or_url}}}"
        if revision is not None:
            params += f" --revision {revision}"
        return self.get_command("propget", params).run()

    def get_ref_by_path(self, path: str) -> str | None:
        """Ref ("trunk", "branches/x", "tags/y", "releases/z") a path lives on."""
        match = REF_PATTERN.match(path)
        return match.group(1) if match else None

    def get_project_url(self, repository_url: str) -> str:
        """URL with the ref part and anything below it removed."""
        match = REF_PATTERN.match(repository_url)
        if match is None:
            return repository_url.rstrip("/")
        return repository_url[: match.start(1)].rstrip("/")

    def get_path_from_url(self, url: str) -> str:
        """Path component of a repository URL.

        Raises:
            InvalidUrlError: When the value is not a URL or has no host.
        """
        if not self.is_url(url):
            raise InvalidUrlError(f'The "{url}" is not an URL.')
        parts = urlsplit(url)
        if not parts.netloc:
            raise InvalidUrlError(f'The URL "{url}" is malformed.')
        return parts.path

    def get_working_copy_url(self, path_or_url: str) -> str:
        if self.is_url(path_or_url):
            return path_or_url
        return self._get_info_entry(path_or_url).findtext("url", "")

    def get_repository_root_url(self, path_or_url: str) -> str:
        return self._get_info_entry(path_or_url).findtext("repository/root", "")

    def get_relative_path(self, path_or_url: str) -> str:
        """Path inside the repository ("/" for the repository root)."""
        url = self.get_working_copy_url(path_or_url)
        root_url = self.get_repository_root_url(url)
        return url[len(root_url) :] or "/"

    def get_last_revision(self, path_or_url: str) -> int:
        """Last changed revision. Cached for URLs."""
        entry = self._get_info_entry(path_or_url, cache=self.is_url(path_or_url))
        commit = entry.find("commit")
        if commit is None or not (commit.get("revision") or "").isdigit():
            raise WorkingCopyInfoError(path_or_url)
        return int(commit.get("revision", "0"))

    @staticmethod
    def is_url(value: str) -> bool:
        return "://" in value

    def _get_info_entry(self, path_or_url: str, cache: bool = False) -> ET.Element:
        params = "--xml {" + path_or_url + "}"
        if self.is_url(path_or_url):
            command = self.get_command("info", params)
            if cache:
                command.set_cache_duration(self._config.last_revision_cache_duration)
            output = command.run()
        else:
            output = self.run_with_upgrade("info", params, path_or_url)

        try:
            root = ET.fromstring(output)
        except ET.ParseError as e:
            raise WorkingCopyInfoError(path_or_url) from e

        if self.is_url(path_or_url):
            entry = root.find("entry")
        else:
            entry = next(
                (node for node in root.iter("entry") if node.get("path") == path_or_url),
                None,
            )
        if entry is None:
            raise WorkingCopyInfoError(path_or_url)
        return entry
