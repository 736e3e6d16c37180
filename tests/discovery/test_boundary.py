"""Tests for BoundaryDetector walks, marker order and failure policy."""

from __future__ import annotations

from pathlib import Path

from configscope.discovery.boundary import BoundaryDetector, BoundaryKind, is_filesystem_root
from configscope.discovery.stat_cache import StatCache
from configscope.options import MOUNTPOINT, Options

from tests.discovery.helpers import FakeFileSystem


def _detector(fs: FakeFileSystem, platform: str = "linux") -> BoundaryDetector:
    return BoundaryDetector(StatCache(fs), platform)


def _paths(*items: str) -> tuple[Path, ...]:
    return tuple(Path(p) for p in items)


class TestNamedMarkers:
    """``.git`` and user-supplied markers stop the walk."""

    def test_git_marker(self) -> None:
        """The nearest ``.git`` ancestor is the boundary."""
        fs = FakeFileSystem()
        fs.add_dir("/repo/.git")
        fs.add_dir("/repo/a/b")
        walk = _detector(fs).find_boundary(Path("/repo/a/b"), Options())
        assert walk.boundary_dir == Path("/repo")
        assert walk.visited == _paths("/repo/a/b", "/repo/a")
        assert walk.marker is not None and walk.marker.kind is BoundaryKind.MARKER

    def test_git_file_counts(self) -> None:
        """A ``.git`` file (worktree) is a marker too."""
        fs = FakeFileSystem()
        fs.add_file("/wt/.git")
        fs.add_dir("/wt/src")
        assert _detector(fs).find_boundary(Path("/wt/src"), Options()).boundary_dir == Path("/wt")

    def test_start_dir_is_boundary(self) -> None:
        """A marker in the start directory ends the walk immediately."""
        fs = FakeFileSystem()
        fs.add_dir("/repo/.git")
        walk = _detector(fs).find_boundary(Path("/repo"), Options())
        assert walk.boundary_dir == Path("/repo")
        assert walk.visited == ()

    def test_extra_boundary(self) -> None:
        """``boundaries`` adds marker names."""
        fs = FakeFileSystem()
        fs.add_dir("/repo/.git")
        fs.add_file("/repo/sub/pyproject.toml")
        fs.add_dir("/repo/sub/pkg")
        opts = Options(boundaries=("pyproject.toml",))
        walk = _detector(fs).find_boundary(Path("/repo/sub/pkg"), opts)
        assert walk.boundary_dir == Path("/repo/sub")

    def test_skipped_boundary_is_absent(self) -> None:
        """A skipped marker does not match; the walk carries on."""
        fs = FakeFileSystem()
        fs.add_dir("/outer/.hg")
        fs.add_dir("/outer/inner/.git")
        fs.add_dir("/outer/inner/src")
        opts = Options(boundaries=(".hg",), skip_boundaries=(".git",))
        walk = _detector(fs).find_boundary(Path("/outer/inner/src"), opts)
        assert walk.boundary_dir == Path("/outer")
        assert walk.visited == _paths("/outer/inner/src", "/outer/inner")


class TestRootTermination:
    """The filesystem root always ends the walk."""

    def test_no_boundary_reaches_root(self) -> None:
        """Without markers every ancestor up to ``/`` is visited."""
        fs = FakeFileSystem()
        fs.add_dir("/a/b/c")
        walk = _detector(fs).find_boundary(Path("/a/b/c"), Options())
        assert walk.boundary_dir is None
        assert walk.visited == _paths("/a/b/c", "/a/b", "/a", "/")

    def test_disable_boundaries(self) -> None:
        """With boundaries disabled the walk ignores ``.git`` and stops at root."""
        fs = FakeFileSystem()
        fs.add_dir("/repo/.git")
        fs.add_dir("/repo/src")
        walk = _detector(fs).find_boundary(Path("/repo/src"), Options(disable_boundaries=True))
        assert walk.boundary_dir is None
        assert walk.visited[-1] == Path("/")
        assert Path("/repo") in walk.visited

    def test_root_detection(self) -> None:
        """Only the root is its own parent."""
        assert is_filesystem_root(Path("/"))
        assert not is_filesystem_root(Path("/tmp"))


class TestMountpoints:
    """Device changes mark boundaries on Unix-like hosts."""

    def _mounted(self) -> FakeFileSystem:
        fs = FakeFileSystem()
        fs.add_dir("/mnt/data", device=2)
        fs.add_dir("/mnt/data/projects/x")
        return fs

    def test_mountpoint_is_boundary(self) -> None:
        """The mount root is where the walk stops."""
        walk = _detector(self._mounted()).find_boundary(Path("/mnt/data/projects/x"), Options())
        assert walk.boundary_dir == Path("/mnt/data")
        assert walk.marker is not None and walk.marker.kind is BoundaryKind.MOUNTPOINT

    def test_mountpoint_ignored_on_windows(self) -> None:
        """Windows never reports mountpoint boundaries."""
        walk = _detector(self._mounted(), "windows").find_boundary(Path("/mnt/data/projects/x"), Options())
        assert walk.boundary_dir is None

    def test_mountpoint_token_skips_detection(self) -> None:
        """The reserved skip token turns mountpoint detection off."""
        opts = Options(skip_boundaries=(MOUNTPOINT,))
        walk = _detector(self._mounted()).find_boundary(Path("/mnt/data/projects/x"), opts)
        assert walk.boundary_dir is None

    def test_named_marker_beats_mountpoint_in_same_dir(self) -> None:
        """Within one directory a named marker is tested before the mountpoint."""
        fs = self._mounted()
        fs.add_dir("/mnt/data/.git")
        walk = _detector(fs).find_boundary(Path("/mnt/data/projects/x"), Options())
        assert walk.marker is not None and walk.marker.kind is BoundaryKind.MARKER


class TestOverride:
    """The environment directory override and its precedence."""

    def test_override_ancestor_wins_over_nearer_git(self) -> None:
        """An ancestor override beats a ``.git`` closer to the start."""
        fs = FakeFileSystem()
        fs.add_dir("/top/mid/.git")
        fs.add_dir("/top/mid/leaf")
        walk = _detector(fs).find_boundary(Path("/top/mid/leaf"), Options(), Path("/top"))
        assert walk.boundary_dir == Path("/top")
        assert walk.visited == _paths("/top/mid/leaf", "/top/mid")
        assert walk.marker is not None and walk.marker.kind is BoundaryKind.OVERRIDE

    def test_override_and_git_in_same_dir(self) -> None:
        """When both sit in one directory the override is reported."""
        fs = FakeFileSystem()
        fs.add_dir("/repo/.git")
        fs.add_dir("/repo/src")
        walk = _detector(fs).find_boundary(Path("/repo/src"), Options(), Path("/repo"))
        assert walk.boundary_dir == Path("/repo")
        assert walk.marker is not None and walk.marker.kind is BoundaryKind.OVERRIDE

    def test_override_is_start_dir(self) -> None:
        """An override naming the start directory stops at once."""
        fs = FakeFileSystem()
        fs.add_dir("/work")
        walk = _detector(fs).find_boundary(Path("/work"), Options(), Path("/work"))
        assert walk.boundary_dir == Path("/work")
        assert walk.visited == ()

    def test_unrelated_override_ignored(self) -> None:
        """An override outside the start's ancestry does not change the walk."""
        fs = FakeFileSystem()
        fs.add_dir("/repo/.git")
        fs.add_dir("/repo/src")
        fs.add_dir("/elsewhere")
        walk = _detector(fs).find_boundary(Path("/repo/src"), Options(), Path("/elsewhere"))
        assert walk.boundary_dir == Path("/repo")
        assert walk.marker is not None and walk.marker.kind is BoundaryKind.MARKER

    def test_override_disabled(self) -> None:
        """disable_boundaries turns the override off as well."""
        fs = FakeFileSystem()
        fs.add_dir("/top/leaf")
        opts = Options(disable_boundaries=True)
        walk = _detector(fs).find_boundary(Path("/top/leaf"), opts, Path("/top"))
        assert walk.boundary_dir is None


class TestFailurePolicy:
    """Unreadable directories are skipped silently."""

    def test_denied_directory_does_not_stop_walk(self) -> None:
        """A directory whose marker cannot be stat'ed is treated as absent."""
        fs = FakeFileSystem()
        fs.add_dir("/repo/.git")
        fs.add_dir("/repo/locked/.git")
        fs.add_dir("/repo/locked/inner")
        fs.deny("/repo/locked/.git")
        walk = _detector(fs).find_boundary(Path("/repo/locked/inner"), Options())
        assert walk.boundary_dir == Path("/repo")
        assert Path("/repo/locked") in walk.visited
