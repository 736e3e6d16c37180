"""Host environment capability.

Discovery never reads ``os.environ``, ``os.getcwd()`` or the home directory
on its own. It receives an ``Environment`` instead, which makes every call
reproducible against a fixed variable map and working directory.
``Environment.from_process()`` snapshots the live process for normal use.
"""

from __future__ import annotations

import os
import platform as _platform
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

PLATFORMS = ("linux", "macos", "windows")


def current_platform() -> str:
    """Return the current platform identifier."""
    system = _platform.system().lower()
    if system == "darwin":
        return "macos"
    return "windows" if system == "windows" else "linux"


@dataclass(frozen=True)
class Environment:
    """Snapshot of the ambient inputs discovery consumes.

    Attributes:
        variables: Environment variables, read-only.
        cwd: Absolute working directory the project walk starts from.
        platform: One of ``"linux"``, ``"macos"``, ``"windows"``.
        home: Explicit home directory. When ``None`` it is derived from
            ``HOME`` (or ``USERPROFILE`` on Windows).
    """

    variables: Mapping[str, str] = field(default_factory=dict)
    cwd: Path = field(default_factory=Path.cwd)
    platform: str = field(default_factory=current_platform)
    home: Path | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "variables", MappingProxyType(dict(self.variables)))
        object.__setattr__(self, "cwd", Path(os.path.normpath(self.cwd)))
        if self.platform not in PLATFORMS:
            raise ValueError(f"Unknown platform {self.platform!r}; expected one of {PLATFORMS}")

    @classmethod
    def from_process(cls) -> Environment:
        """Capture the running process's environment."""
        try:
            home: Path | None = Path.home()
        except RuntimeError:
            home = None
        return cls(variables=dict(os.environ), cwd=Path.cwd(), home=home)

    @property
    def is_windows(self) -> bool:
        return self.platform == "windows"

    def get(self, name: str) -> str | None:
        """Return a variable's value, treating the empty string as unset."""
        value = self.variables.get(name)
        if value is None or not value.strip():
            return None
        return value

    def home_dir(self) -> Path | None:
        """Resolve the user's home directory."""
        if self.home is not None:
            return self.home
        names = ("USERPROFILE", "HOME") if self.is_windows else ("HOME",)
        for name in names:
            value = self.get(name)
            if value:
                return Path(value)
        return None

    def resolve_path(self, value: str | None) -> Path | None:
        """Resolve a user-supplied path value.

        A leading ``~`` expands to the home directory; relative paths are
        anchored at ``cwd``. Empty or unresolvable values yield ``None``.
        """
        if value is None or not value.strip():
            return None
        value = value.strip()
        if value == "~" or value.startswith(("~/", "~\\")):
            home = self.home_dir()
            if home is None:
                return None
            value = str(home) + value[1:]
        elif value.startswith("~"):
            # ``~otheruser`` forms are not resolvable without a user database.
            return None
        path = Path(value)
        if not path.is_absolute():
            path = self.cwd / path
        return Path(os.path.normpath(path))
