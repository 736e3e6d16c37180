"""Candidate name expansion and matching.

``expand()`` turns an app name and options into the ordered candidate names
probed at every scope root. The order is the tie-break between candidates
found in the same root: earlier names win when a single result is wanted.

Config file candidates, in order:

1. ``{file_name}`` and ``.{file_name}``
2. ``.{app}`` then ``.{app}.{ext}`` for each non-empty extension
3. ``{app}/{file_name}[.{ext}]`` then ``.{app}/{file_name}[.{ext}]``
4. user-supplied ``patterns`` (globs)

Config directory candidates are ``{app}``, ``.{app}`` and the user-supplied
``dir_patterns``.

``CandidateMatcher`` maps a candidate onto concrete paths below a root.
Literal names are joined directly when the host's native case behavior is
wanted. When the caller asks for a case policy the filesystem does not
provide natively, each path segment is compared against the directory
listing instead, since a plain existence check on a case-insensitive
filesystem accepts wrong-case names.
"""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass
from pathlib import Path

from configscope.discovery.stat_cache import StatCache
from configscope.options import Options

_GLOB_CHARS = frozenset("*?[")


@dataclass(frozen=True)
class Candidate:
    """A relative name to look for under a scope root.

    Attributes:
        name: ``/``-separated relative name or glob.
        is_glob: Whether ``name`` uses glob syntax.
    """

    name: str
    is_glob: bool = False

    @classmethod
    def parse(cls, name: str) -> Candidate:
        name = name.replace("\\", "/").strip("/")
        return cls(name=name, is_glob=_has_magic(name))

    @property
    def parts(self) -> tuple[str, ...]:
        return tuple(p for p in self.name.split("/") if p and p != ".")


@dataclass(frozen=True)
class CandidateSet:
    """Ordered candidates for config files and config directories."""

    config_candidates: tuple[Candidate, ...]
    dir_candidates: tuple[Candidate, ...]


def expand(app_name: str, options: Options) -> CandidateSet:
    """Expand ``app_name`` and ``options`` into ordered, deduplicated candidates."""
    file_name = options.file_name
    exts = [e for e in options.extensions if e]

    names: list[str] = [file_name, f".{file_name}"]
    names.append(f".{app_name}")
    names.extend(f".{app_name}.{ext}" for ext in exts)
    for prefix in (app_name, f".{app_name}"):
        nested = [f"{prefix}/{file_name}"]
        nested.extend(f"{prefix}/{file_name}.{ext}" for ext in exts)
        names.extend(nested)
    configs = [Candidate(n) for n in names]
    configs.extend(Candidate.parse(p) for p in options.patterns)

    dirs = [Candidate(app_name), Candidate(f".{app_name}")]
    dirs.extend(Candidate.parse(p) for p in options.dir_patterns)

    return CandidateSet(
        config_candidates=_dedupe(configs),
        dir_candidates=_dedupe(dirs),
    )


def native_case_sensitive(platform: str) -> bool:
    """Whether the platform's default filesystem compares names case-sensitively."""
    return platform == "linux"


class CandidateMatcher:
    """Resolves candidates to concrete paths under a root.

    Args:
        cache: Shared per-call stat cache.
        case_sensitive: Requested policy, or ``None`` for native behavior.
        native: The host filesystem's native case sensitivity.
    """

    def __init__(self, cache: StatCache, case_sensitive: bool | None, native: bool) -> None:
        self.cache = cache
        self.case_sensitive = native if case_sensitive is None else case_sensitive
        self.enumerate = case_sensitive is not None and case_sensitive != native

    def match(self, root: Path, candidate: Candidate) -> list[Path]:
        """Return the paths ``candidate`` names under ``root``.

        Literal candidates yield at most one path. Under native case
        handling that path is returned unchecked and the caller verifies
        it through the stat cache.
        """
        parts = candidate.parts
        if not parts:
            return []
        if candidate.is_glob:
            return self._glob(root, parts)
        if not self.enumerate:
            return [root.joinpath(*parts)]
        found = self._exact(root, parts)
        return [found] if found is not None else []

    def _exact(self, root: Path, parts: tuple[str, ...]) -> Path | None:
        current = root
        for part in parts:
            name = self._pick(current, part)
            if name is None:
                return None
            current = current / name
        return current

    def _pick(self, directory: Path, part: str) -> str | None:
        names = self.cache.listdir(directory)
        if self.case_sensitive:
            return part if part in names else None
        if part in names:
            return part
        folded = part.casefold()
        for name in names:
            if name.casefold() == folded:
                return name
        return None

    def _glob(self, root: Path, parts: tuple[str, ...]) -> list[Path]:
        current = [root]
        for index, part in enumerate(parts):
            last = index == len(parts) - 1
            following: list[Path] = []
            for directory in current:
                if _has_magic(part):
                    names = [n for n in self.cache.listdir(directory) if self._fnmatch(n, part)]
                elif self.enumerate:
                    picked = self._pick(directory, part)
                    names = [picked] if picked is not None else []
                else:
                    names = [part]
                for name in names:
                    path = directory / name
                    if last or self.cache.lookup(path).kind.is_dir:
                        following.append(path)
            current = following
        return current

    def _fnmatch(self, name: str, pattern: str) -> bool:
        # Hidden entries only match patterns that start with a dot.
        if name.startswith(".") and not pattern.startswith("."):
            return False
        if self.case_sensitive:
            return fnmatch.fnmatchcase(name, pattern)
        return fnmatch.fnmatchcase(name.casefold(), pattern.casefold())


def _has_magic(name: str) -> bool:
    return any(ch in _GLOB_CHARS for ch in name)


def _dedupe(candidates: list[Candidate]) -> tuple[Candidate, ...]:
    return tuple(dict.fromkeys(c for c in candidates if c.name))
