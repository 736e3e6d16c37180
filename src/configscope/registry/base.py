"""Registry lookup providers.

The ``registry`` scope asks an injected ``RegistryProvider`` for config paths
belonging to an app, for example entries from the Windows registry or a
managed-configuration service. The discovery core only calls the provider;
installing or loading a backend is the host application's business.

A missing provider is a normal state: the registry scope then yields an
empty result.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Awaitable, Callable, Iterable, Mapping, Union

PathLike = Union[str, Path]


class RegistryProvider(ABC):
    """Looks up config file paths for an app name.

    Implementations return already-resolved absolute paths, highest
    priority first. They may raise; discovery logs the failure and treats
    the registry scope as empty.
    """

    @property
    def provider_name(self) -> str:
        """Human-readable name used in log messages."""
        return type(self).__name__

    @abstractmethod
    async def find_config_paths(self, app_name: str) -> list[Path]:
        """Return config file paths registered for ``app_name``.

        Args:
            app_name: Application name as passed to discovery.

        Returns:
            Zero or more absolute paths.
        """


class StaticRegistryProvider(RegistryProvider):
    """Serves paths from a fixed mapping of app name to paths.

    Usage::

        provider = StaticRegistryProvider({"myapp": ["/opt/myapp/config.json"]})
    """

    def __init__(self, entries: Mapping[str, Iterable[PathLike]]) -> None:
        self.entries = {name: [Path(p) for p in paths] for name, paths in entries.items()}

    async def find_config_paths(self, app_name: str) -> list[Path]:
        return list(self.entries.get(app_name, []))


class CallableRegistryProvider(RegistryProvider):
    """Adapts a plain function (sync or async) to ``RegistryProvider``.

    Args:
        func: Called with the app name; returns an iterable of paths or an
            awaitable of one.
        name: Optional display name.
    """

    def __init__(
        self,
        func: Callable[[str], Union[Iterable[PathLike], Awaitable[Iterable[PathLike]]]],
        name: str | None = None,
    ) -> None:
        self.func = func
        self._name = name

    @property
    def provider_name(self) -> str:
        return self._name or getattr(self.func, "__name__", type(self).__name__)

    async def find_config_paths(self, app_name: str) -> list[Path]:
        result = self.func(app_name)
        if inspect.isawaitable(result):
            result = await result
        return [Path(p) for p in result or ()]
