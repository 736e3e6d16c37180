"""Scope root resolution.

Maps each logical scope onto the directories (or override values) that get
probed for it on the host platform:

=========  ===============================================================
env        ``{APP}_CONFIG`` (a file) and ``{APP}_DIR`` (a directory)
project    the working directory and every directory the boundary walk
           climbed through
workspace  the boundary directory
user       the home directory, then the XDG config home equivalent
system     ``/etc`` and ``XDG_CONFIG_DIRS`` (Unix), ``ProgramData``
           (Windows)
registry   nothing here; the registry provider returns paths itself
=========  ===============================================================

``search_locations`` appends roots to ``workspace``, ``user`` and
``system``. ``skip_locations`` entries name either a whole scope or a
single root path; skipped roots are dropped before probing.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from pathlib import Path

from configscope.discovery.boundary import BoundaryWalk
from configscope.discovery.stat_cache import StatCache, normalize
from configscope.environment import Environment
from configscope.options import Options, Scope, SymlinkBehavior

logger = logging.getLogger(__name__)


class RootKind(enum.Enum):
    """What a root descriptor points at."""

    DIRECTORY = "directory"
    FILE_OVERRIDE = "file-override"
    DIR_OVERRIDE = "dir-override"


@dataclass(frozen=True)
class RootDescriptor:
    """One place to probe, with the policies to apply there.

    Attributes:
        scope: Owning scope name.
        path: Absolute root directory, or the override path itself.
        kind: Whether ``path`` is a root to probe candidates under or an
            override value to check directly.
        symlink_behavior: Symlink policy for matches under this root.
        case_sensitive: Case policy, ``None`` for native.
        with_boundaries: Report boundary marker entries found in the root.
    """

    scope: str
    path: Path
    kind: RootKind = RootKind.DIRECTORY
    symlink_behavior: SymlinkBehavior = SymlinkBehavior.FOLLOW
    case_sensitive: bool | None = None
    with_boundaries: bool = False


@dataclass(frozen=True)
class EnvOverrides:
    """Resolved environment override values; ``None`` means unset."""

    config_file: Path | None = None
    config_dir: Path | None = None


class ScopeResolver:
    """Resolves scope names to probe roots for one discovery call.

    Args:
        environment: Variables, working directory and platform.
        cache: Shared per-call stat cache.
    """

    def __init__(self, environment: Environment, cache: StatCache) -> None:
        self.environment = environment
        self.cache = cache

    # ------------------------------------------------------------------
    # Environment overrides
    # ------------------------------------------------------------------

    def env_overrides(self, app_name: str, options: Options) -> EnvOverrides:
        """Read and resolve ``{APP}_CONFIG`` / ``{APP}_DIR``.

        The directory override only counts when it names an existing
        directory; anything else is treated as unset. A disabled override is
        never read.
        """
        file_var, dir_var = options.env_names(app_name)
        env = self.environment
        config_file = env.resolve_path(env.get(file_var)) if file_var else None
        config_dir = env.resolve_path(env.get(dir_var)) if dir_var else None
        if config_dir is not None and not self.cache.lookup(config_dir).kind.is_dir:
            logger.debug("Ignoring %s=%s: not a directory", dir_var, config_dir)
            config_dir = None
        return EnvOverrides(config_file=config_file, config_dir=config_dir)

    # ------------------------------------------------------------------
    # Roots per scope
    # ------------------------------------------------------------------

    def resolve_roots(
        self,
        scope: str,
        app_name: str,
        options: Options,
        walk: BoundaryWalk | None = None,
    ) -> list[RootDescriptor]:
        """Return the ordered, deduplicated roots to probe for ``scope``.

        Args:
            scope: Built-in scope name.
            app_name: Application name, used for env variable names.
            options: Discovery options.
            walk: Boundary walk output, required for ``project`` and
                ``workspace``.
        """
        if scope in options.skip_locations:
            logger.debug("Scope %s skipped", scope)
            return []

        with_boundaries = False
        if scope == Scope.ENV.value:
            return self._env_roots(app_name, options)
        if scope == Scope.PROJECT.value:
            # A start directory that is itself the boundary is still probed as pwd.
            paths = list(walk.visited or filter(None, [walk.boundary_dir])) if walk is not None else []
            with_boundaries = True
        elif scope == Scope.WORKSPACE.value:
            paths = [walk.boundary_dir] if walk is not None and walk.boundary_dir is not None else []
            with_boundaries = True
        elif scope == Scope.USER.value:
            paths = self.user_dirs()
        elif scope == Scope.SYSTEM.value:
            paths = self.system_dirs()
        else:
            return []

        for extra in options.search_locations.get(scope, ()):
            resolved = self.environment.resolve_path(extra)
            if resolved is not None:
                paths.append(resolved)

        return [
            self._descriptor(scope, path, options, with_boundaries=with_boundaries)
            for path in self._filter(paths, options)
        ]

    def _env_roots(self, app_name: str, options: Options) -> list[RootDescriptor]:
        overrides = self.env_overrides(app_name, options)
        roots: list[RootDescriptor] = []
        if overrides.config_file is not None:
            roots.append(self._descriptor(
                Scope.ENV.value, overrides.config_file, options, kind=RootKind.FILE_OVERRIDE,
            ))
        if overrides.config_dir is not None:
            roots.append(self._descriptor(
                Scope.ENV.value, overrides.config_dir, options, kind=RootKind.DIR_OVERRIDE,
            ))
        return [r for r in roots if not self.is_skipped(r.path, options)]

    def _descriptor(
        self, scope: str, path: Path, options: Options, *,
        kind: RootKind = RootKind.DIRECTORY, with_boundaries: bool = False,
    ) -> RootDescriptor:
        return RootDescriptor(
            scope=scope,
            path=path,
            kind=kind,
            symlink_behavior=options.symlink_behavior,
            case_sensitive=options.case_sensitive,
            with_boundaries=with_boundaries,
        )

    def is_skipped(self, path: Path, options: Options) -> bool:
        """True if a ``skip_locations`` entry names ``path`` itself."""
        return normalize(path) in self._skipped_paths(options)

    def _skipped_paths(self, options: Options) -> set[str]:
        skipped: set[str] = set()
        scope_names = {s.value for s in Scope}
        for entry in options.skip_locations:
            if entry in scope_names:
                continue
            resolved = self.environment.resolve_path(entry)
            if resolved is not None:
                skipped.add(normalize(resolved))
        return skipped

    def _filter(self, paths: list[Path], options: Options) -> list[Path]:
        skipped = self._skipped_paths(options)
        seen: set[str] = set()
        kept: list[Path] = []
        for path in paths:
            key = normalize(path)
            if key in seen or key in skipped:
                continue
            seen.add(key)
            kept.append(Path(key))
        return kept

    # ------------------------------------------------------------------
    # Platform directories
    # ------------------------------------------------------------------

    def user_dirs(self) -> list[Path]:
        """Home directory followed by the XDG config home equivalent."""
        env = self.environment
        home = env.home_dir()
        dirs: list[Path] = [home] if home is not None else []

        xdg = env.resolve_path(env.get("XDG_CONFIG_HOME"))
        if xdg is not None:
            dirs.append(xdg)
        elif env.platform == "windows":
            appdata = [env.resolve_path(env.get(v)) for v in ("APPDATA", "LOCALAPPDATA")]
            dirs.extend(p for p in appdata if p is not None)
            if not any(appdata) and home is not None:
                dirs.append(home / "AppData" / "Roaming")
        elif home is not None:
            if env.platform == "macos":
                dirs.append(home / "Library" / "Application Support")
            else:
                dirs.append(home / ".config")
        return dirs

    def system_dirs(self) -> list[Path]:
        """System-wide configuration directories for the platform."""
        env = self.environment
        if env.platform == "windows":
            for name in ("ProgramData", "ALLUSERSPROFILE"):
                value = env.resolve_path(env.get(name))
                if value is not None:
                    return [value]
            return []

        dirs: list[Path] = [Path("/etc")]
        xdg_dirs = env.get("XDG_CONFIG_DIRS") or "/etc/xdg"
        for entry in xdg_dirs.split(":"):
            resolved = env.resolve_path(entry)
            if resolved is not None:
                dirs.append(resolved)
        if env.platform == "macos":
            dirs.append(Path("/Library/Application Support"))
        return dirs
