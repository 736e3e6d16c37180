"""Pluggable scopes.

A ``ScopeProvider`` adds a search context beyond the built-in ones. It
resolves its own roots and probes them with the shared ``ScopeProbe``; the
orchestrator only needs its name in ``precedence`` to run it in the right
place. The ``registry`` scope is itself implemented this way.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from configscope.discovery.models import ScopeResult
from configscope.discovery.probe import ScopeProbe
from configscope.discovery.scopes import RootDescriptor, RootKind
from configscope.options import Options, Scope
from configscope.registry.base import RegistryProvider

logger = logging.getLogger(__name__)


class ScopeProvider(ABC):
    """A named scope that can resolve and probe its own roots."""

    @property
    @abstractmethod
    def scope_name(self) -> str:
        """Name used in ``precedence`` and as the result key."""

    @abstractmethod
    async def resolve_roots(self, app_name: str, options: Options) -> list[RootDescriptor]:
        """Return the roots to probe for ``app_name``."""

    async def probe(self, roots: list[RootDescriptor], probe: ScopeProbe) -> ScopeResult:
        """Probe every root and merge the results in root order."""
        result = ScopeResult()
        for root in roots:
            result = result.merged(probe.probe(root))
        return result

    async def discover(self, app_name: str, options: Options, probe: ScopeProbe) -> ScopeResult:
        roots = await self.resolve_roots(app_name, options)
        return await self.probe(roots, probe)


class RegistryScope(ScopeProvider):
    """The ``registry`` scope, backed by an optional ``RegistryProvider``.

    Args:
        provider: Lookup capability, or ``None`` when no backend is
            available. ``None`` yields an empty result.
    """

    def __init__(self, provider: RegistryProvider | None = None) -> None:
        self.provider = provider

    @property
    def scope_name(self) -> str:
        return Scope.REGISTRY.value

    async def resolve_roots(self, app_name: str, options: Options) -> list[RootDescriptor]:
        if self.provider is None:
            logger.debug("No registry provider; registry scope is empty")
            return []
        try:
            paths = [Path(p) for p in await self.provider.find_config_paths(app_name) or ()]
        except Exception:
            logger.warning(
                "Registry provider %s failed for %s", self.provider.provider_name, app_name,
                exc_info=True,
            )
            return []
        return [
            RootDescriptor(
                scope=self.scope_name,
                path=path,
                kind=RootKind.FILE_OVERRIDE,
                symlink_behavior=options.symlink_behavior,
                case_sensitive=options.case_sensitive,
            )
            for path in paths
            if path.is_absolute()
        ]
