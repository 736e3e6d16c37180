"""Filesystem capability used by the discovery core.

The core never touches ``os`` directly. Everything it needs from the
filesystem goes through the four operations of ``FileSystem``, so tests can
run discovery against a simulated tree and callers can plug in alternative
backends (an archive, a remote mount shim).

All operations raise ``OSError`` (or a subclass) when the path cannot be
inspected. Callers treat that as "absent".
"""

from __future__ import annotations

import os
from typing import Protocol, runtime_checkable


@runtime_checkable
class FileSystem(Protocol):
    """Read-only filesystem operations the discovery core depends on."""

    def stat(self, path: str) -> os.stat_result:
        """Stat ``path``, following symlinks."""

    def lstat(self, path: str) -> os.stat_result:
        """Stat ``path`` without following a final symlink."""

    def listdir(self, path: str) -> list[str]:
        """Return the entry names of directory ``path``."""

    def realpath(self, path: str) -> str:
        """Return the canonical path, raising ``OSError`` on loops or dangling links."""


class OSFileSystem:
    """``FileSystem`` backed by the host operating system."""

    def stat(self, path: str) -> os.stat_result:
        return os.stat(path)

    def lstat(self, path: str) -> os.stat_result:
        return os.lstat(path)

    def listdir(self, path: str) -> list[str]:
        return os.listdir(path)

    def realpath(self, path: str) -> str:
        return os.path.realpath(path, strict=True)
