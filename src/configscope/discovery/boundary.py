"""Workspace boundary detection.

The boundary walk climbs from a start directory toward the filesystem root
and stops at the first directory that looks like the top of a workspace.
That directory becomes ``workspace.path``; every directory visited before it
(the start directory included) becomes a project-scope probe root.

Boundary kinds, in the order they are tested:

1. **Override** -- the environment directory override (``{APP}_DIR``). It is
   checked once, before the walk: if it names the start directory or one of
   its ancestors, that directory is the boundary and nothing between the
   start and it is tested. An override outside the start directory's
   ancestry does not affect the walk.
2. **Named marker** -- an entry such as ``.git`` present in the directory.
3. **Mountpoint** -- the directory sits on a different device than its
   parent. Unix-like hosts only; on Windows this test never fires and drive
   or UNC roots end the walk instead.

The filesystem root always ends the walk, even with ``disable_boundaries``,
but is not itself reported as a boundary. Directories that cannot be
stat'ed never match and the walk simply moves on to their parent.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from pathlib import Path

from configscope.discovery.stat_cache import PathKind, StatCache, normalize
from configscope.options import Options

logger = logging.getLogger(__name__)


class BoundaryKind(enum.Enum):
    """Why the walk stopped at a directory."""

    OVERRIDE = "override"
    MARKER = "marker"
    MOUNTPOINT = "mountpoint"


@dataclass(frozen=True)
class BoundaryMarker:
    """A stateless predicate over a directory.

    Attributes:
        kind: Which boundary test this is.
        name: Entry name for ``MARKER``, the override directory for
            ``OVERRIDE``, empty for ``MOUNTPOINT``.
    """

    kind: BoundaryKind
    name: str = ""

    def matches(self, directory: Path, cache: StatCache) -> bool:
        """Evaluate the predicate against ``directory``."""
        if self.kind is BoundaryKind.MARKER:
            kind = cache.lookup(directory / self.name).kind
            return kind not in (PathKind.ABSENT, PathKind.DANGLING_SYMLINK)
        if self.kind is BoundaryKind.OVERRIDE:
            return normalize(directory) == normalize(self.name)
        parent = directory.parent
        if parent == directory:
            return False
        here = cache.lookup(directory).device
        above = cache.lookup(parent).device
        return here is not None and above is not None and here != above


@dataclass(frozen=True)
class BoundaryWalk:
    """Outcome of a boundary walk.

    Attributes:
        boundary_dir: The workspace root, or ``None`` when the walk reached
            the filesystem root without a match.
        visited: Directories climbed through, starting with the start
            directory and excluding ``boundary_dir``.
        marker: The predicate that matched, if any.
    """

    boundary_dir: Path | None
    visited: tuple[Path, ...]
    marker: BoundaryMarker | None = None


def is_filesystem_root(path: Path) -> bool:
    """True for ``/``, drive roots and UNC share roots."""
    return path.parent == path


class BoundaryDetector:
    """Walks parent directories looking for a workspace boundary.

    Args:
        cache: Shared per-call stat cache.
        platform: Host platform; mountpoint detection is off on Windows.
    """

    def __init__(self, cache: StatCache, platform: str = "linux") -> None:
        self.cache = cache
        self.platform = platform

    def markers(self, options: Options) -> list[BoundaryMarker]:
        """Per-directory predicates in test order."""
        markers = [BoundaryMarker(BoundaryKind.MARKER, n) for n in options.boundary_names()]
        if options.detect_mountpoints and self.platform != "windows":
            markers.append(BoundaryMarker(BoundaryKind.MOUNTPOINT))
        return markers

    def find_boundary(
        self, start_dir: Path, options: Options, override_dir: Path | None = None,
    ) -> BoundaryWalk:
        """Climb from ``start_dir`` to the first boundary.

        Args:
            start_dir: Absolute directory to start from.
            options: Supplies marker names and the disable switches.
            override_dir: Resolved environment directory override, if set.

        Returns:
            The boundary directory (or ``None``) and the visited chain.
        """
        start = Path(normalize(start_dir))

        if override_dir is not None and not options.disable_boundaries:
            override = BoundaryMarker(BoundaryKind.OVERRIDE, normalize(override_dir))
            for directory in (start, *start.parents):
                if override.matches(directory, self.cache):
                    visited = tuple(_chain(start, directory))
                    logger.debug("Boundary override at %s", directory)
                    return BoundaryWalk(directory, visited, override)

        markers = self.markers(options)
        visited: list[Path] = []
        current = start
        while True:
            for marker in markers:
                if marker.matches(current, self.cache):
                    logger.debug("Boundary %s at %s", marker.kind.value, current)
                    return BoundaryWalk(current, tuple(visited), marker)
            visited.append(current)
            if is_filesystem_root(current):
                logger.debug("No boundary above %s", start)
                return BoundaryWalk(None, tuple(visited))
            current = current.parent


def _chain(start: Path, stop: Path) -> list[Path]:
    chain: list[Path] = []
    current = start
    while current != stop:
        chain.append(current)
        current = current.parent
    return chain
