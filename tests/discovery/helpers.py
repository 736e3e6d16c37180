"""Shared test helpers: an in-memory filesystem and environment builders.

``FakeFileSystem`` implements the ``FileSystem`` capability over a dict of
POSIX paths. It supports directories, regular files, symlinks (absolute or
relative, including cycles), per-node device ids for mountpoint tests and
paths that raise ``PermissionError``. Every operation is counted so tests
can check what the stat cache saved.
"""

from __future__ import annotations

import errno
import os
import posixpath
import stat
from collections import Counter
from dataclasses import dataclass
from pathlib import Path

from configscope.environment import Environment

_MAX_HOPS = 40


@dataclass
class _Node:
    kind: str  # "dir", "file", "link"
    device: int = 1
    target: str = ""


class FakeFileSystem:
    """In-memory ``FileSystem`` for deterministic discovery tests."""

    def __init__(self) -> None:
        self.nodes: dict[str, _Node] = {"/": _Node("dir")}
        self.denied: set[str] = set()
        self.calls: Counter[str] = Counter()

    # -- building ---------------------------------------------------------

    def add_dir(self, path: str, device: int | None = None) -> str:
        path = posixpath.normpath(path)
        if path not in self.nodes:
            parent = self.add_dir(posixpath.dirname(path))
            dev = device if device is not None else self.nodes[parent].device
            self.nodes[path] = _Node("dir", dev)
        return path

    def add_file(self, path: str) -> str:
        path = posixpath.normpath(path)
        parent = self.add_dir(posixpath.dirname(path))
        self.nodes[path] = _Node("file", self.nodes[parent].device)
        return path

    def add_symlink(self, path: str, target: str) -> str:
        path = posixpath.normpath(path)
        parent = self.add_dir(posixpath.dirname(path))
        self.nodes[path] = _Node("link", self.nodes[parent].device, target)
        return path

    def deny(self, path: str) -> None:
        self.denied.add(posixpath.normpath(path))

    # -- FileSystem protocol ----------------------------------------------

    def stat(self, path: str) -> os.stat_result:
        self.calls["stat"] += 1
        return self._stat_result(self.nodes[self._walk(path, follow_final=True)])

    def lstat(self, path: str) -> os.stat_result:
        self.calls["lstat"] += 1
        return self._stat_result(self.nodes[self._walk(path, follow_final=False)])

    def listdir(self, path: str) -> list[str]:
        self.calls["listdir"] += 1
        real = self._walk(path, follow_final=True)
        if self.nodes[real].kind != "dir":
            raise NotADirectoryError(errno.ENOTDIR, "Not a directory", path)
        return [
            posixpath.basename(p) for p in self.nodes
            if p != "/" and posixpath.dirname(p) == real
        ]

    def realpath(self, path: str) -> str:
        self.calls["realpath"] += 1
        return self._walk(path, follow_final=True)

    # -- internals --------------------------------------------------------

    def _walk(self, path: str, *, follow_final: bool) -> str:
        parts = [p for p in str(path).split("/") if p]
        current = "/"
        hops = 0
        while parts:
            name = parts.pop(0)
            if name == ".":
                continue
            if name == "..":
                current = posixpath.dirname(current)
                continue
            candidate = posixpath.join(current, name)
            if candidate in self.denied:
                raise PermissionError(errno.EACCES, "Permission denied", candidate)
            node = self.nodes.get(candidate)
            if node is None:
                raise FileNotFoundError(errno.ENOENT, "No such file or directory", candidate)
            if node.kind == "link" and (parts or follow_final):
                hops += 1
                if hops > _MAX_HOPS:
                    raise OSError(errno.ELOOP, "Too many levels of symbolic links", candidate)
                if node.target.startswith("/"):
                    current = "/"
                parts = [p for p in node.target.split("/") if p] + parts
                continue
            if parts and node.kind == "file":
                raise NotADirectoryError(errno.ENOTDIR, "Not a directory", candidate)
            current = candidate
        return current

    @staticmethod
    def _stat_result(node: _Node) -> os.stat_result:
        mode = {
            "dir": stat.S_IFDIR | 0o755,
            "file": stat.S_IFREG | 0o644,
            "link": stat.S_IFLNK | 0o777,
        }[node.kind]
        return os.stat_result((mode, 0, node.device, 1, 0, 0, 0, 0, 0, 0))


def make_environment(
    cwd: str,
    variables: dict[str, str] | None = None,
    *,
    home: str | None = "/home/user",
    platform: str = "linux",
) -> Environment:
    """Build an ``Environment`` with a predictable home and no stray variables."""
    env_vars = dict(variables or {})
    if home is not None:
        env_vars.setdefault("HOME", home)
    return Environment(variables=env_vars, cwd=Path(cwd), platform=platform)


def build_repo(fs: FakeFileSystem) -> None:
    """Create the canonical fixture tree: ``/repo`` with ``.git`` and ``pkg``.

    ::

        /repo/.git/
        /repo/pkg/.myapp.yaml
        /home/user/
    """
    fs.add_dir("/repo/.git")
    fs.add_file("/repo/pkg/.myapp.yaml")
    fs.add_dir("/home/user")
