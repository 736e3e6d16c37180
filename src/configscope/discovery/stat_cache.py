"""Per-call memoizing cache over filesystem queries.

A ``StatCache`` lives for exactly one discovery call. Every probe, the
boundary walk and the case-sensitive matcher share it, so a path is stat'ed
at most once per call no matter how many scopes or candidates reach it.

Entries are never invalidated: a fresh discovery call builds a fresh cache,
so there is no staleness across calls. Population is idempotent (the same
path always classifies the same way within a call), which keeps
interleaved coroutines safe without locking.

Any ``OSError`` raised by the underlying ``FileSystem`` is recorded as
"absent". Permission problems and transient I/O failures therefore look
exactly like missing paths to the rest of the core.
"""

from __future__ import annotations

import enum
import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path

from configscope.discovery.filesystem import FileSystem, OSFileSystem

logger = logging.getLogger(__name__)


class PathKind(enum.Enum):
    """Classification of a path as seen by ``lstat`` + ``stat``."""

    ABSENT = "absent"
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK_FILE = "symlink-to-file"
    SYMLINK_DIRECTORY = "symlink-to-directory"
    DANGLING_SYMLINK = "dangling-symlink"
    OTHER = "other"

    @property
    def is_symlink(self) -> bool:
        return self in (
            PathKind.SYMLINK_FILE,
            PathKind.SYMLINK_DIRECTORY,
            PathKind.DANGLING_SYMLINK,
        )

    @property
    def is_file(self) -> bool:
        """True for regular files, directly or through a symlink."""
        return self in (PathKind.FILE, PathKind.SYMLINK_FILE)

    @property
    def is_dir(self) -> bool:
        """True for directories, directly or through a symlink."""
        return self in (PathKind.DIRECTORY, PathKind.SYMLINK_DIRECTORY)


@dataclass(frozen=True)
class CacheEntry:
    """Cached classification of one normalized absolute path.

    Attributes:
        kind: What the path is.
        device: Device identifier of the path's target (``st_dev``), used
            for mountpoint detection. ``None`` when the path is absent or
            its target cannot be stat'ed.
    """

    kind: PathKind
    device: int | None = None


_ABSENT = CacheEntry(PathKind.ABSENT)


def normalize(path: Path | str) -> str:
    """Normalize a path into the string form used as a cache key."""
    return os.path.normpath(os.fspath(path))


class StatCache:
    """Read-through cache for stat, listdir and realpath lookups.

    Args:
        filesystem: Backend to query. Defaults to the host filesystem.
    """

    def __init__(self, filesystem: FileSystem | None = None) -> None:
        self.filesystem: FileSystem = filesystem if filesystem is not None else OSFileSystem()
        self._entries: dict[str, CacheEntry] = {}
        self._listings: dict[str, tuple[str, ...]] = {}
        self._realpaths: dict[str, str | None] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, path: Path | str) -> CacheEntry:
        """Classify ``path``, consulting the backend only on first sight."""
        key = normalize(path)
        entry = self._entries.get(key)
        if entry is None:
            entry = self._classify(key)
            self._entries[key] = entry
        return entry

    def _classify(self, key: str) -> CacheEntry:
        try:
            lst = self.filesystem.lstat(key)
        except OSError:
            return _ABSENT

        if not stat.S_ISLNK(lst.st_mode):
            return CacheEntry(_kind_from_mode(lst.st_mode), lst.st_dev)

        try:
            target = self.filesystem.stat(key)
        except OSError:
            # Dangling target or a symlink loop.
            return CacheEntry(PathKind.DANGLING_SYMLINK)
        if stat.S_ISDIR(target.st_mode):
            return CacheEntry(PathKind.SYMLINK_DIRECTORY, target.st_dev)
        if stat.S_ISREG(target.st_mode):
            return CacheEntry(PathKind.SYMLINK_FILE, target.st_dev)
        return CacheEntry(PathKind.OTHER, target.st_dev)

    def listdir(self, path: Path | str) -> tuple[str, ...]:
        """Return the sorted entry names of a directory, or ``()`` on error."""
        key = normalize(path)
        names = self._listings.get(key)
        if names is None:
            try:
                names = tuple(sorted(self.filesystem.listdir(key)))
            except OSError:
                logger.debug("Cannot list %s", key)
                names = ()
            self._listings[key] = names
        return names

    def realpath(self, path: Path | str) -> Path | None:
        """Resolve ``path`` canonically. ``None`` on cycles or dangling links."""
        key = normalize(path)
        if key not in self._realpaths:
            try:
                self._realpaths[key] = normalize(self.filesystem.realpath(key))
            except OSError:
                logger.debug("Cannot resolve %s", key)
                self._realpaths[key] = None
        resolved = self._realpaths[key]
        return Path(resolved) if resolved is not None else None


def _kind_from_mode(mode: int) -> PathKind:
    if stat.S_ISREG(mode):
        return PathKind.FILE
    if stat.S_ISDIR(mode):
        return PathKind.DIRECTORY
    return PathKind.OTHER
