"""Tests for ScopeProbe qualification, symlink policy and ordering."""

from __future__ import annotations

from pathlib import Path

from configscope.discovery.patterns import expand
from configscope.discovery.probe import ScopeProbe
from configscope.discovery.scopes import RootDescriptor, RootKind
from configscope.discovery.stat_cache import StatCache
from configscope.options import Options, SelectField, SymlinkBehavior

from tests.discovery.helpers import FakeFileSystem


def _probe(fs: FakeFileSystem, options: Options | None = None, **kwargs) -> ScopeProbe:
    options = options or Options()
    return ScopeProbe(StatCache(fs), expand("myapp", options), **kwargs)


def _root(path: str, behavior: SymlinkBehavior = SymlinkBehavior.FOLLOW, **kwargs) -> RootDescriptor:
    return RootDescriptor(scope="user", path=Path(path), symlink_behavior=behavior, **kwargs)


class TestQualification:
    """Only files qualify as config files, only directories as config dirs."""

    def test_file_and_dir_found_in_candidate_order(self) -> None:
        """Matches come back in expansion order."""
        fs = FakeFileSystem()
        fs.add_file("/r/.myapp.json")
        fs.add_file("/r/.myapp")
        fs.add_file("/r/myapp/config.yaml")
        result = _probe(fs).probe(_root("/r"))
        assert result.config_files == (
            Path("/r/.myapp"), Path("/r/.myapp.json"), Path("/r/myapp/config.yaml"),
        )
        assert result.config_dirs == (Path("/r/myapp"),)

    def test_directory_is_not_a_config_file(self) -> None:
        """A directory named like a config file is not reported as one."""
        fs = FakeFileSystem()
        fs.add_dir("/r/.myapp")
        result = _probe(fs).probe(_root("/r"))
        assert result.config_files == ()
        assert result.config_dirs == (Path("/r/.myapp"),)

    def test_missing_root_is_empty(self) -> None:
        """Probing a root that does not exist yields nothing."""
        assert _probe(FakeFileSystem()).probe(_root("/absent")).is_empty

    def test_boundaries_only_when_requested(self) -> None:
        """Marker entries are listed for roots that ask for them."""
        fs = FakeFileSystem()
        fs.add_dir("/r/.git")
        probe = _probe(fs, boundary_names=(".git",))
        assert probe.probe(_root("/r", with_boundaries=True)).boundaries == (Path("/r/.git"),)
        assert probe.probe(_root("/r")).boundaries == ()

    def test_select_limits_fields(self) -> None:
        """Unselected fields are not computed."""
        fs = FakeFileSystem()
        fs.add_file("/r/.myapp")
        fs.add_dir("/r/myapp")
        probe = _probe(fs, select=frozenset({SelectField.CONFIG_DIRS}))
        result = probe.probe(_root("/r"))
        assert result.config_files == ()
        assert result.config_dirs == (Path("/r/myapp"),)

    def test_file_override(self) -> None:
        """A file override qualifies only if it is a regular file."""
        fs = FakeFileSystem()
        fs.add_file("/c/app.json")
        fs.add_dir("/c/dir.json")
        probe = _probe(fs)
        ok = RootDescriptor("env", Path("/c/app.json"), RootKind.FILE_OVERRIDE)
        bad = RootDescriptor("env", Path("/c/dir.json"), RootKind.FILE_OVERRIDE)
        assert probe.probe(ok).config_files == (Path("/c/app.json"),)
        assert probe.probe(bad).is_empty


class TestSymlinkPolicy:
    """follow, as-is and skip."""

    def _linked(self) -> FakeFileSystem:
        fs = FakeFileSystem()
        fs.add_file("/dotfiles/myapp.yaml")
        fs.add_symlink("/r/.myapp.yaml", "/dotfiles/myapp.yaml")
        return fs

    def test_follow_reports_resolved_path(self) -> None:
        """follow reports the link target."""
        result = _probe(self._linked()).probe(_root("/r", SymlinkBehavior.FOLLOW))
        assert result.config_files == (Path("/dotfiles/myapp.yaml"),)

    def test_as_is_reports_link_path(self) -> None:
        """as-is reports the link itself."""
        result = _probe(self._linked()).probe(_root("/r", SymlinkBehavior.AS_IS))
        assert result.config_files == (Path("/r/.myapp.yaml"),)

    def test_skip_drops_links(self) -> None:
        """skip ignores symlinked candidates."""
        result = _probe(self._linked()).probe(_root("/r", SymlinkBehavior.SKIP))
        assert result.config_files == ()

    def test_cycle_dropped_under_follow(self) -> None:
        """A symlink cycle drops only that candidate."""
        fs = FakeFileSystem()
        fs.add_symlink("/r/.myapp", "/r/.myapp.yml")
        fs.add_symlink("/r/.myapp.yml", "/r/.myapp")
        fs.add_file("/r/.myapp.json")
        result = _probe(fs).probe(_root("/r", SymlinkBehavior.FOLLOW))
        assert result.config_files == (Path("/r/.myapp.json"),)

    def test_dangling_link_never_qualifies(self) -> None:
        """A dangling link is dropped under every policy."""
        fs = FakeFileSystem()
        fs.add_symlink("/r/.myapp", "/gone")
        for behavior in SymlinkBehavior:
            assert _probe(fs).probe(_root("/r", behavior)).config_files == ()

    def test_link_to_directory_not_a_file(self) -> None:
        """A link to a directory does not qualify as a config file."""
        fs = FakeFileSystem()
        fs.add_dir("/elsewhere")
        fs.add_symlink("/r/.myapp", "/elsewhere")
        result = _probe(fs).probe(_root("/r", SymlinkBehavior.AS_IS))
        assert result.config_files == ()
        assert result.config_dirs == (Path("/r/.myapp"),)

    def test_duplicates_keep_first(self) -> None:
        """Two candidates reaching one file are reported once."""
        fs = FakeFileSystem()
        fs.add_file("/r/.myapp.yaml")
        fs.add_symlink("/r/.myapp.yml", ".myapp.yaml")
        result = _probe(fs).probe(_root("/r", SymlinkBehavior.AS_IS))
        assert result.config_files == (Path("/r/.myapp.yaml"),)
