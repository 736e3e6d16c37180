"""Result types produced by discovery.

Pure data holders. ``ScopeResult`` is what one probe root yields;
``DiscoveryResult`` aggregates every scope into the structure returned by
``find_app_config`` in full mode.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping

from configscope.options import SelectField


@dataclass(frozen=True)
class ScopeResult:
    """Matches found at one scope root.

    Attributes:
        config_files: Config files, in candidate order.
        config_dirs: Config directories, in candidate order.
        boundaries: Boundary marker entries present in the root. Only
            filled for project and workspace directories.
    """

    config_files: tuple[Path, ...] = ()
    config_dirs: tuple[Path, ...] = ()
    boundaries: tuple[Path, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.config_files or self.config_dirs or self.boundaries)

    def get(self, name: SelectField) -> tuple[Path, ...]:
        return getattr(self, name.value)

    def merged(self, other: ScopeResult) -> ScopeResult:
        """Concatenate two results, keeping first occurrences."""
        return ScopeResult(
            config_files=_unique(self.config_files + other.config_files),
            config_dirs=_unique(self.config_dirs + other.config_dirs),
            boundaries=_unique(self.boundaries + other.boundaries),
        )

    def project(self, select: frozenset[SelectField] | None) -> ScopeResult:
        """Blank out every field not in ``select``. Subclass fields are kept."""
        if select is None:
            return self
        return replace(self, **{f.value: () for f in SelectField if f not in select})

    def to_dict(self) -> dict[str, Any]:
        return {
            "config_files": [str(p) for p in self.config_files],
            "config_dirs": [str(p) for p in self.config_dirs],
            "boundaries": [str(p) for p in self.boundaries],
        }


@dataclass(frozen=True)
class ParentResult(ScopeResult):
    """A project-scope result for one ancestor of the working directory."""

    path: Path = Path()

    def to_dict(self) -> dict[str, Any]:
        return {"path": str(self.path), **super().to_dict()}


@dataclass(frozen=True)
class WorkspaceResult(ScopeResult):
    """The workspace scope: the boundary directory and what it contains.

    ``path`` is ``None`` when no boundary was found, in which case every
    field is empty.
    """

    path: Path | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"path": str(self.path) if self.path is not None else None, **super().to_dict()}


EMPTY = ScopeResult()


@dataclass(frozen=True)
class DiscoveryResult:
    """Every scope's matches for one discovery call.

    Attributes:
        env: Paths named by the environment overrides.
        pwd: Matches in the working directory.
        parents: Matches in each directory between the working directory
            and the workspace boundary, nearest first. Excludes both.
        workspace: Matches in the boundary directory.
        user: Matches in the user's home and config-home directories.
        system: Matches in system-wide config directories.
        registry: Registry matches, or ``None`` when the registry was not
            consulted.
        extra: Results of pluggable scopes, keyed by scope name.
    """

    env: ScopeResult = EMPTY
    pwd: ScopeResult = EMPTY
    parents: tuple[ParentResult, ...] = ()
    workspace: WorkspaceResult = field(default_factory=WorkspaceResult)
    user: ScopeResult = EMPTY
    system: ScopeResult = EMPTY
    registry: ScopeResult | None = None
    extra: Mapping[str, ScopeResult] = field(default_factory=dict)

    def scope_results(self, precedence: tuple[str, ...]) -> list[ScopeResult]:
        """Flatten into per-root results in precedence order."""
        ordered: list[ScopeResult] = []
        for name in precedence:
            if name == "project":
                ordered.append(self.pwd)
                ordered.extend(self.parents)
            elif name in ("env", "workspace", "user", "system"):
                ordered.append(getattr(self, name))
            elif name == "registry":
                if self.registry is not None:
                    ordered.append(self.registry)
            elif name in self.extra:
                ordered.append(self.extra[name])
        return ordered

    def project(self, select: frozenset[SelectField] | None) -> DiscoveryResult:
        """Blank out every field not in ``select`` across all scopes."""
        if select is None:
            return self
        return replace(
            self,
            env=self.env.project(select),
            pwd=self.pwd.project(select),
            parents=tuple(p.project(select) for p in self.parents),
            workspace=self.workspace.project(select),
            user=self.user.project(select),
            system=self.system.project(select),
            registry=self.registry.project(select) if self.registry is not None else None,
            extra={k: v.project(select) for k, v in self.extra.items()},
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "env": self.env.to_dict(),
            "pwd": self.pwd.to_dict(),
            "parents": [p.to_dict() for p in self.parents],
            "workspace": self.workspace.to_dict(),
            "user": self.user.to_dict(),
            "system": self.system.to_dict(),
        }
        if self.registry is not None:
            data["registry"] = self.registry.to_dict()
        for name, result in self.extra.items():
            data[name] = result.to_dict()
        return data


def _unique(paths: tuple[Path, ...]) -> tuple[Path, ...]:
    return tuple(dict.fromkeys(paths))
