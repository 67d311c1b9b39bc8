"""Parsing of ``svn log --xml [--verbose]`` output into log entries."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import UTC, datetime

from svnscope.revlog.errors import MalformedLogEntryError

_SVN_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"
_NUMBER = re.compile(r"\d+", re.ASCII)


@dataclass(frozen=True, slots=True)
class PathRecord:
    """One changed path of a revision."""

    path: str
    kind: str
    action: str
    copy_from_path: str | None = None
    copy_from_revision: int | None = None


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One revision as reported by svn log."""

    revision: int
    author: str = ""
    date: datetime | None = None
    message: str = ""
    paths: tuple[PathRecord, ...] = ()


def _is_number(value: str) -> bool:
    return _NUMBER.fullmatch(value) is not None


def parse_svn_date(value: str) -> datetime:
    return datetime.strptime(value, _SVN_DATE_FORMAT).replace(tzinfo=UTC)


def parse_log(xml_text: str) -> list[LogEntry]:
    """Parse svn log XML into entries, in document order.

    Raises:
        MalformedLogEntryError: On invalid XML or a logentry without revision.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise MalformedLogEntryError(f"Unparsable svn log output: {e}") from e

    return [_parse_entry(node) for node in root.iter("logentry")]


def _parse_entry(node: ET.Element) -> LogEntry:
    raw_revision = node.get("revision")
    if raw_revision is None or not _is_number(raw_revision):
        raise MalformedLogEntryError(f"Log entry has invalid revision: {raw_revision!r}")
    revision = int(raw_revision)

    date_text = node.findtext("date")
    try:
        date = parse_svn_date(date_text) if date_text else None
    except ValueError as e:
        raise MalformedLogEntryError(f"Revision {revision} has invalid date: {date_text!r}") from e

    paths: list[PathRecord] = []
    for path_node in node.findall("paths/path"):
        copy_revision = path_node.get("copyfrom-rev")
        if copy_revision is not None and not _is_number(copy_revision):
            raise MalformedLogEntryError(
                f"Revision {revision} has invalid copy revision: {copy_revision!r}"
            )
        paths.append(
            PathRecord(
                path=path_node.text or "",
                kind=path_node.get("kind", ""),
                action=path_node.get("action", ""),
                copy_from_path=path_node.get("copyfrom-path"),
                copy_from_revision=int(copy_revision) if copy_revision is not None else None,
            )
        )

    return LogEntry(
        revision=revision,
        author=node.findtext("author") or "",
        date=date,
        message=node.findtext("msg") or "",
        paths=tuple(paths),
    )
