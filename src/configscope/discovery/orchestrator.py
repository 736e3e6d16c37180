"""Scope-ordered discovery.

``DiscoveryOrchestrator`` drives one discovery call end to end:

1. Validate options (unknown precedence or select names raise
   ``OptionsError`` before anything touches the filesystem).
2. Expand candidate names once.
3. Walk from the working directory to the workspace boundary. The walk is
   shared: ``project`` and ``workspace`` both read it, and ``workspace``
   never resolves before it has finished.
4. Probe scopes and assemble the ``DiscoveryResult``.

Two evaluation modes:

**First-match** (a single path is wanted). Scopes are evaluated one root at
a time in precedence order, the working directory first and then each
parent for ``project``, and evaluation stops at the first root that has a
match. Later scopes are never probed.

**Full** (``find_all`` or several ``select`` fields). Every scope in
``precedence`` is probed over one shared ``StatCache``. Scopes are gathered as
coroutines, but probing itself is synchronous, so they only interleave at
registry provider awaits.

Each call builds its own cache, so nothing is shared between calls.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import AsyncIterator, Awaitable, Iterable, TypeVar

from configscope.discovery.boundary import BoundaryDetector, BoundaryWalk
from configscope.discovery.filesystem import FileSystem
from configscope.discovery.models import (
    EMPTY,
    DiscoveryResult,
    ParentResult,
    ScopeResult,
    WorkspaceResult,
)
from configscope.discovery.patterns import expand, native_case_sensitive
from configscope.discovery.probe import ScopeProbe
from configscope.discovery.providers import RegistryScope, ScopeProvider
from configscope.discovery.scopes import ScopeResolver
from configscope.discovery.stat_cache import StatCache, normalize
from configscope.environment import Environment
from configscope.options import Options, Scope, SelectField
from configscope.registry.base import RegistryProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_sync(coro: Awaitable[T]) -> T:
    """Run a discovery coroutine from synchronous code.

    Inside a running event loop ``asyncio.run`` is not allowed, so the
    coroutine gets its own loop on a single worker thread instead.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)  # type: ignore[arg-type]
    logger.debug("Event loop already running; discovering on a worker thread")
    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()  # type: ignore[arg-type]


class DiscoveryOrchestrator:
    """Finds app config files, config dirs and the workspace boundary.

    Args:
        environment: Variables, working directory and platform. Defaults to
            a snapshot of the running process.
        filesystem: Filesystem backend. Defaults to the host filesystem.
        registry: Optional registry lookup capability for the ``registry``
            scope.
        providers: Extra pluggable scopes. Their names become valid
            ``precedence`` entries.

    Usage::

        orchestrator = DiscoveryOrchestrator()
        path = orchestrator.find("myapp")
        result = orchestrator.discover("myapp")
    """

    def __init__(
        self,
        environment: Environment | None = None,
        filesystem: FileSystem | None = None,
        registry: RegistryProvider | None = None,
        providers: Iterable[ScopeProvider] = (),
    ) -> None:
        self.environment = environment if environment is not None else Environment.from_process()
        self.filesystem = filesystem
        self.providers: dict[str, ScopeProvider] = {Scope.REGISTRY.value: RegistryScope(registry)}
        for provider in providers:
            self.providers[provider.scope_name] = provider

    # ------------------------------------------------------------------
    # Async entry points
    # ------------------------------------------------------------------

    async def find_async(
        self, app_name: str, options: Options | None = None,
    ) -> Path | DiscoveryResult | None:
        """First match in first-match mode, the whole result in full mode."""
        options = self._prepare(options)
        if not options.first_match:
            return await self.discover_async(app_name, options)
        call = _DiscoveryCall(self, app_name, options, select=frozenset({options.first_match_field()}))
        return await call.first_match()

    async def discover_async(self, app_name: str, options: Options | None = None) -> DiscoveryResult:
        """Probe every scope in precedence and return the projected result."""
        options = self._prepare(options)
        call = _DiscoveryCall(self, app_name, options, select=options.select)
        result = await call.collect()
        return result.project(options.select)

    async def find_boundary_async(self, app_name: str, options: Options | None = None) -> Path | None:
        """Return the workspace boundary directory, without probing anything."""
        options = self._prepare(options)
        call = _DiscoveryCall(self, app_name, options, select=frozenset())
        return call.walk().boundary_dir

    async def find_dirs_async(self, app_name: str, options: Options | None = None) -> list[Path]:
        """Return every config directory across all scopes, in precedence order."""
        options = self._prepare(options).replace(select=[SelectField.CONFIG_DIRS], find_all=True)
        result = await self.discover_async(app_name, options)
        dirs: dict[str, Path] = {}
        for scope_result in result.scope_results(options.precedence):
            for path in scope_result.config_dirs:
                dirs.setdefault(normalize(path), path)
        return list(dirs.values())

    # ------------------------------------------------------------------
    # Sync entry points
    # ------------------------------------------------------------------

    def find(self, app_name: str, options: Options | None = None) -> Path | DiscoveryResult | None:
        return run_sync(self.find_async(app_name, options))

    def discover(self, app_name: str, options: Options | None = None) -> DiscoveryResult:
        return run_sync(self.discover_async(app_name, options))

    def find_boundary(self, app_name: str, options: Options | None = None) -> Path | None:
        return run_sync(self.find_boundary_async(app_name, options))

    def find_dirs(self, app_name: str, options: Options | None = None) -> list[Path]:
        return run_sync(self.find_dirs_async(app_name, options))

    def _prepare(self, options: Options | None) -> Options:
        options = options if options is not None else Options()
        options.validate(extra_scopes=self.providers)
        return options


class _DiscoveryCall:
    """State for a single discovery call: cache, walk and scope probes."""

    def __init__(
        self,
        orchestrator: DiscoveryOrchestrator,
        app_name: str,
        options: Options,
        select: frozenset[SelectField] | None,
    ) -> None:
        env = orchestrator.environment
        self.app_name = app_name
        self.options = options
        self.environment = env
        self.providers = orchestrator.providers
        self.cache = StatCache(orchestrator.filesystem)
        self.resolver = ScopeResolver(env, self.cache)
        self.detector = BoundaryDetector(self.cache, env.platform)
        self.probe = ScopeProbe(
            self.cache,
            expand(app_name, options),
            native_case_sensitive=native_case_sensitive(env.platform),
            boundary_names=options.boundary_names(),
            select=select,
        )
        self._walk: BoundaryWalk | None = None

    def walk(self) -> BoundaryWalk:
        """Run the boundary walk once and reuse it."""
        if self._walk is None:
            overrides = self.resolver.env_overrides(self.app_name, self.options)
            self._walk = self.detector.find_boundary(
                self.environment.cwd, self.options, overrides.config_dir,
            )
            logger.debug(
                "Boundary walk from %s: boundary=%s, %d visited",
                self.environment.cwd, self._walk.boundary_dir, len(self._walk.visited),
            )
        return self._walk

    def _active(self, name: str) -> bool:
        if name == Scope.REGISTRY.value and not self.options.check_registry:
            return False
        return name not in self.options.skip_locations

    # ------------------------------------------------------------------
    # Per-root iteration
    # ------------------------------------------------------------------

    async def iter_scope(self, name: str) -> AsyncIterator[ScopeResult]:
        """Yield results root by root for one scope, in probe order."""
        if not self._active(name):
            return
        if name in self.providers:
            yield await self.providers[name].discover(self.app_name, self.options, self.probe)
            return
        if name == Scope.PROJECT.value:
            walk = self.walk()
            start = walk.visited[0] if walk.visited else walk.boundary_dir
            for root in self.resolver.resolve_roots(name, self.app_name, self.options, walk):
                result = self.probe.probe(root)
                if root.path == start:
                    yield result
                else:
                    yield ParentResult(path=root.path, **vars(result))
            return
        walk = self.walk() if name == Scope.WORKSPACE.value else None
        if walk is not None and walk.boundary_dir is None:
            return
        for root in self.resolver.resolve_roots(name, self.app_name, self.options, walk):
            yield self.probe.probe(root)

    async def first_match(self) -> Path | None:
        """Return the first qualifying path in precedence order."""
        field = self.options.first_match_field()
        for name in self.options.precedence:
            async for result in self.iter_scope(name):
                paths = result.get(field)
                if paths:
                    logger.debug("First match in %s scope: %s", name, paths[0])
                    return paths[0]
        return None

    # ------------------------------------------------------------------
    # Full collection
    # ------------------------------------------------------------------

    async def _collect_scope(self, name: str) -> list[ScopeResult]:
        return [result async for result in self.iter_scope(name)]

    async def collect(self) -> DiscoveryResult:
        """Probe every scope in precedence and assemble the result."""
        names = list(self.options.precedence)
        gathered = await asyncio.gather(*(self._collect_scope(n) for n in names))
        by_scope = dict(zip(names, gathered))

        def merged(name: str) -> ScopeResult:
            result = EMPTY
            for part in by_scope.get(name, []):
                result = result.merged(part)
            return result

        pwd = EMPTY
        parents: list[ParentResult] = []
        for part in by_scope.get(Scope.PROJECT.value, []):
            if isinstance(part, ParentResult):
                parents.append(part)
            else:
                pwd = part

        workspace = WorkspaceResult()
        if Scope.WORKSPACE.value in by_scope:
            walk = self.walk()
            if walk.boundary_dir is not None:
                workspace = WorkspaceResult(path=walk.boundary_dir, **vars(merged(Scope.WORKSPACE.value)))

        registry: ScopeResult | None = None
        if self.options.check_registry:
            registry = merged(Scope.REGISTRY.value)

        builtin = {s.value for s in Scope}
        extra = {name: merged(name) for name in names if name not in builtin}

        return DiscoveryResult(
            env=merged(Scope.ENV.value),
            pwd=pwd,
            parents=tuple(parents),
            workspace=workspace,
            user=merged(Scope.USER.value),
            system=merged(Scope.SYSTEM.value),
            registry=registry,
            extra=extra,
        )
