"""Repository (svn client) error types."""

from __future__ import annotations

import re

SVN_ERR_WC_UPGRADE_REQUIRED = 155036

_ERROR_LINE = re.compile(r"^svn: E(\d+): (.*)$")


class RepositoryError(Exception):
    """Base error for svn client interaction."""

    pass


class RepositoryCommandError(RepositoryError):
    """svn exited with an error.

    The numeric code is taken from the first "svn: E<code>: ..." line of the
    error output; 0 when the output carries no code.
    """

    def __init__(self, command: str, error_output: str) -> None:
        code = 0
        lines: list[str] = []
        for line in error_output.splitlines():
            if not line.strip():
                continue
            match = _ERROR_LINE.match(line)
            if match:
                if not code:
                    code = int(match.group(1))
                lines.append(match.group(2))
            else:
                lines.append(line)

        self.command = command
        self.code = code
        self.error_message = "\n".join(lines)
        super().__init__(f"Command:\n{command}\nError #{code}:\n{self.error_message}")

    @property
    def is_upgrade_required(self) -> bool:
        return self.code == SVN_ERR_WC_UPGRADE_REQUIRED


class InvalidUrlError(RepositoryError, ValueError):
    """Value is not a usable repository URL."""

    pass


class WorkingCopyInfoError(RepositoryError):
    """svn info output lacks the entry that was asked about."""

    def __init__(self, path_or_url: str) -> None:
        super().__init__(f'The directory "{path_or_url}" not found in "svn info" command results.')
        self.path_or_url = path_or_url
