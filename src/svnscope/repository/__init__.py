"""svn client access: command execution, upgrade recovery, info helpers."""

from svnscope.repository.command import Command
from svnscope.repository.connector import Connector, ask_confirmation
from svnscope.repository.errors import (
    SVN_ERR_WC_UPGRADE_REQUIRED,
    InvalidUrlError,
    RepositoryCommandError,
    RepositoryError,
    WorkingCopyInfoError,
)
from svnscope.repository.process import ProcessResult, ProcessRunner

__all__ = [
    "Command",
    "Connector",
    "ask_confirmation",
    "ProcessResult",
    "ProcessRunner",
    # Errors
    "SVN_ERR_WC_UPGRADE_REQUIRED",
    "InvalidUrlError",
    "RepositoryCommandError",
    "RepositoryError",
    "WorkingCopyInfoError",
]
