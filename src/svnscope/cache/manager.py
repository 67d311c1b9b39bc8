"""File-backed result cache with expiry and invalidator tags.

Every entry lives in its own JSON file under the cache directory, named
``<namespace>_<hash>.cache``. An entry is returned only while it is not
expired and, when the reader supplies an invalidator, only if it matches
the one stored at write time. Stale entries are deleted on read.
"""

from __future__ import annotations

import contextlib
import hashlib
import json
import os
import re
import tempfile
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

import structlog

logger = structlog.get_logger()

Duration = int | str | None

_DURATION_UNITS: dict[str, int] = {
    "second": 1,
    "minute": 60,
    "hour": 3600,
    "day": 86400,
    "week": 7 * 86400,
    "month": 30 * 86400,
    "year": 365 * 86400,
}

_DURATION_PART = re.compile(
    r"(\d+)\s*(second|minute|hour|day|week|month|year)s?",
    re.IGNORECASE,
)


def duration_to_seconds(duration: Duration) -> int | None:
    """Convert seconds or a relative duration ("10 minutes") into seconds.

    Returns None when no duration is given.

    Raises:
        ValueError: When the duration string cannot be parsed.
    """
    if duration is None:
        return None
    if isinstance(duration, bool):
        raise ValueError(f"Invalid cache duration: {duration!r}")
    if isinstance(duration, int):
        return duration

    text = duration.strip()
    if text.isdigit():
        return int(text)

    total = 0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if text[position : match.start()].strip(" ,") not in ("", "and"):
            break
        total += int(match.group(1)) * _DURATION_UNITS[match.group(2).lower()]
        position = match.end()

    if position == 0 or text[position:].strip():
        raise ValueError(f"Invalid cache duration: {duration!r}")
    return total


def split_cache_name(name: str) -> tuple[str, str]:
    """Split "namespace:name" into its parts."""
    namespace, sep, entry = name.partition(":")
    if not sep or not namespace or not entry:
        raise ValueError('The cache name must be in "namespace:name" format.')
    return namespace, entry


class CacheManager:
    """Namespaced key/value cache persisted as one file per entry."""

    def __init__(
        self,
        directory: Path,
        *,
        enabled: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.directory = directory
        self.enabled = enabled
        self._clock = clock

    def get_cache_path(self, name: str) -> Path:
        namespace, entry = split_cache_name(name)
        digest = hashlib.sha1(entry.encode("utf-8")).hexdigest()[:8]
        return self.directory / f"{namespace}_{digest}.cache"

    def set_cache(
        self,
        name: str,
        value: Any,
        invalidator: str | None = None,
        duration: Duration = None,
    ) -> None:
        """Store a JSON-serializable value.

        Args:
            name: Cache key in "namespace:name" format.
            value: Value to store.
            invalidator: Optional tag a later read must match.
            duration: Seconds or relative duration until expiry; None never expires.
        """
        path = self.get_cache_path(name)
        if not self.enabled:
            return

        seconds = duration_to_seconds(duration)
        payload = {
            "name": name,
            "invalidator": invalidator,
            "duration": seconds,
            "expiration": self._clock() + seconds if seconds is not None else None,
            "data": value,
        }
        try:
            encoded = json.dumps(payload)
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        except (OSError, TypeError, ValueError) as e:
            logger.warning("cache", file=str(path), result="write_failed", error=str(e))
            return

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(encoded)
            os.replace(tmp_name, path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            logger.warning("cache", file=str(path), result="write_failed", error=str(e))
            return
        logger.debug("cache", file=str(path), result="write")

    def get_cache(self, name: str, invalidator: str | None = None) -> Any | None:
        """Return the stored value, or None on miss, expiry or invalidator mismatch."""
        path = self.get_cache_path(name)
        if not self.enabled:
            return None

        entry = self._read(path)
        if entry is None or entry.get("name") != name:
            logger.debug("cache", file=str(path), result="miss")
            return None

        expiration = entry.get("expiration")
        stale = expiration is not None and expiration < self._clock()
        if invalidator is not None and entry.get("invalidator") != invalidator:
            stale = True

        if stale:
            _discard(path)
            logger.debug("cache", file=str(path), result="miss")
            return None

        logger.debug("cache", file=str(path), result="hit", invalidator=entry.get("invalidator"))
        return entry.get("data")

    def delete_cache(self, name: str) -> bool:
        path = self.get_cache_path(name)
        if not path.exists():
            return False
        path.unlink(missing_ok=True)
        return True

    def clear(self, namespace: str | None = None) -> int:
        """Delete all entries, or only those of one namespace. Returns count removed."""
        if not self.directory.is_dir():
            return 0
        pattern = f"{namespace}_*.cache" if namespace else "*.cache"
        removed = 0
        for path in self.directory.glob(pattern):
            path.unlink(missing_ok=True)
            removed += 1
        return removed

    def _read(self, path: Path) -> dict[str, Any] | None:
        try:
            with path.open(encoding="utf-8") as f:
                entry = json.load(f)
        except (FileNotFoundError, NotADirectoryError):
            return None
        except (OSError, ValueError):
            # Corrupt entries are dropped so they do not linger
            _discard(path)
            return None
        if not _is_valid_entry(entry):
            _discard(path)
            return None
        return entry


def _discard(path: Path) -> None:
    with contextlib.suppress(OSError):
        path.unlink(missing_ok=True)


def _is_valid_entry(entry: Any) -> bool:
    if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
        return False
    expiration = entry.get("expiration")
    if expiration is None:
        return True
    return isinstance(expiration, int | float) and not isinstance(expiration, bool)
