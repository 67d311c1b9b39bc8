"""Revision log: local index of a repository's history."""

from svnscope.revlog.errors import (
    DuplicatePluginError,
    MalformedLogEntryError,
    MissingRevisionsError,
    ProjectNotFoundError,
    RevisionLogError,
    UnknownPluginError,
    UnsupportedCriterionError,
)
from svnscope.revlog.log_parser import LogEntry, PathRecord, parse_log
from svnscope.revlog.revision_log import RevisionLog, RevisionLogFactory

__all__ = [
    "LogEntry",
    "PathRecord",
    "RevisionLog",
    "RevisionLogFactory",
    "parse_log",
    # Errors
    "DuplicatePluginError",
    "MalformedLogEntryError",
    "MissingRevisionsError",
    "ProjectNotFoundError",
    "RevisionLogError",
    "UnknownPluginError",
    "UnsupportedCriterionError",
]
