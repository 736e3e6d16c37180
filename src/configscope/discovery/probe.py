"""Probing a single scope root.

``ScopeProbe.probe`` joins every candidate with a root, classifies the
result through the shared ``StatCache`` and keeps what qualifies:

* a config candidate qualifies only as a regular file;
* a directory candidate qualifies only as a directory.

Symlink policy:

``follow``
    A symlinked match is resolved canonically and classified by its
    target; the resolved path is reported. Cycles and dangling links drop
    the candidate.
``as-is``
    A symlinked match is classified by its target but reported under its
    own path.
``skip``
    Any match that is itself a symlink is dropped.

Results keep candidate order. Two candidates that resolve to the same real
path are reported once, under the first.
"""

from __future__ import annotations

import logging
from pathlib import Path

from configscope.discovery.models import ScopeResult
from configscope.discovery.patterns import Candidate, CandidateMatcher, CandidateSet
from configscope.discovery.scopes import RootDescriptor, RootKind
from configscope.discovery.stat_cache import PathKind, StatCache, normalize
from configscope.options import SelectField, SymlinkBehavior

logger = logging.getLogger(__name__)


class ScopeProbe:
    """Matches expanded candidates against scope roots.

    Args:
        cache: Shared per-call stat cache.
        candidates: Output of ``patterns.expand``.
        native_case_sensitive: The host filesystem's case behavior.
        boundary_names: Named boundary markers to report for roots that ask
            for them.
        select: Fields to compute; ``None`` computes all.
    """

    def __init__(
        self,
        cache: StatCache,
        candidates: CandidateSet,
        *,
        native_case_sensitive: bool = True,
        boundary_names: tuple[str, ...] = (),
        select: frozenset[SelectField] | None = None,
    ) -> None:
        self.cache = cache
        self.candidates = candidates
        self.native_case_sensitive = native_case_sensitive
        self.boundary_names = boundary_names
        self.select = select

    def _wants(self, name: SelectField) -> bool:
        return self.select is None or name in self.select

    def probe(self, root: RootDescriptor) -> ScopeResult:
        """Probe one root and return what qualifies there."""
        if root.kind is RootKind.FILE_OVERRIDE:
            found = self.qualify(root.path, want_dir=False, behavior=root.symlink_behavior)
            files = (found,) if found is not None and self._wants(SelectField.CONFIG_FILES) else ()
            return ScopeResult(config_files=files)
        if root.kind is RootKind.DIR_OVERRIDE:
            found = self.qualify(root.path, want_dir=True, behavior=root.symlink_behavior)
            dirs = (found,) if found is not None and self._wants(SelectField.CONFIG_DIRS) else ()
            return ScopeResult(config_dirs=dirs)

        if not self.cache.lookup(root.path).kind.is_dir:
            return ScopeResult()

        matcher = CandidateMatcher(self.cache, root.case_sensitive, self.native_case_sensitive)
        files: tuple[Path, ...] = ()
        dirs: tuple[Path, ...] = ()
        boundaries: tuple[Path, ...] = ()
        if self._wants(SelectField.CONFIG_FILES):
            files = self._collect(root, matcher, self.candidates.config_candidates, want_dir=False)
        if self._wants(SelectField.CONFIG_DIRS):
            dirs = self._collect(root, matcher, self.candidates.dir_candidates, want_dir=True)
        if root.with_boundaries and self._wants(SelectField.BOUNDARIES):
            boundaries = self._boundaries(root.path)
        return ScopeResult(config_files=files, config_dirs=dirs, boundaries=boundaries)

    def _collect(
        self,
        root: RootDescriptor,
        matcher: CandidateMatcher,
        candidates: tuple[Candidate, ...],
        *,
        want_dir: bool,
    ) -> tuple[Path, ...]:
        found: dict[str, Path] = {}
        for candidate in candidates:
            for path in matcher.match(root.path, candidate):
                qualified = self.qualify(path, want_dir=want_dir, behavior=root.symlink_behavior)
                if qualified is None:
                    continue
                real = self.cache.realpath(qualified)
                key = normalize(real if real is not None else qualified)
                found.setdefault(key, qualified)
        return tuple(found.values())

    def qualify(self, path: Path, *, want_dir: bool, behavior: SymlinkBehavior) -> Path | None:
        """Apply the symlink policy and type check to one path.

        Returns:
            The path to report, or ``None`` if ``path`` does not qualify.
        """
        entry = self.cache.lookup(path)
        if entry.kind is PathKind.ABSENT:
            return None

        if entry.kind.is_symlink:
            if behavior is SymlinkBehavior.SKIP:
                return None
            if behavior is SymlinkBehavior.FOLLOW:
                resolved = self.cache.realpath(path)
                if resolved is None:
                    logger.debug("Dropping unresolvable symlink %s", path)
                    return None
                target = self.cache.lookup(resolved).kind
                wanted = PathKind.DIRECTORY if want_dir else PathKind.FILE
                return resolved if target is wanted else None

        ok = entry.kind.is_dir if want_dir else entry.kind.is_file
        return Path(normalize(path)) if ok else None

    def _boundaries(self, directory: Path) -> tuple[Path, ...]:
        present: list[Path] = []
        for name in self.boundary_names:
            path = directory / name
            if self.cache.lookup(path).kind not in (PathKind.ABSENT, PathKind.DANGLING_SYMLINK):
                present.append(path)
        return tuple(present)
