"""Top-level discovery functions.

Thin wrappers that build a ``DiscoveryOrchestrator`` for one call. Pass
``environment`` / ``filesystem`` to run against something other than the
live process, and ``registry`` to enable lookups in the ``registry`` scope.
"""

from __future__ import annotations

from pathlib import Path

from configscope.discovery.filesystem import FileSystem
from configscope.discovery.models import DiscoveryResult
from configscope.discovery.orchestrator import DiscoveryOrchestrator
from configscope.environment import Environment
from configscope.options import Options
from configscope.registry.base import RegistryProvider


def _orchestrator(
    environment: Environment | None,
    filesystem: FileSystem | None,
    registry: RegistryProvider | None,
) -> DiscoveryOrchestrator:
    return DiscoveryOrchestrator(environment=environment, filesystem=filesystem, registry=registry)


def find_app_config(
    app_name: str,
    options: Options | None = None,
    *,
    environment: Environment | None = None,
    filesystem: FileSystem | None = None,
    registry: RegistryProvider | None = None,
) -> Path | DiscoveryResult | None:
    """Locate configuration for ``app_name``.

    In first-match mode (the default) returns the highest-precedence
    config file, or ``None`` when nothing matches anywhere. With
    ``find_all`` or a multi-field ``select`` returns the whole
    ``DiscoveryResult``.

    Raises:
        OptionsError: When ``options`` are invalid.
    """
    return _orchestrator(environment, filesystem, registry).find(app_name, options)


def discover(
    app_name: str,
    options: Options | None = None,
    *,
    environment: Environment | None = None,
    filesystem: FileSystem | None = None,
    registry: RegistryProvider | None = None,
) -> DiscoveryResult:
    """Return the full ``DiscoveryResult`` regardless of mode."""
    return _orchestrator(environment, filesystem, registry).discover(app_name, options)


def find_workspace_boundary(
    app_name: str,
    options: Options | None = None,
    *,
    environment: Environment | None = None,
    filesystem: FileSystem | None = None,
) -> Path | None:
    """Return the workspace root above the working directory, if any."""
    return _orchestrator(environment, filesystem, None).find_boundary(app_name, options)


def find_app_config_dirs(
    app_name: str,
    options: Options | None = None,
    *,
    environment: Environment | None = None,
    filesystem: FileSystem | None = None,
    registry: RegistryProvider | None = None,
) -> list[Path]:
    """Return every config directory for ``app_name``, highest precedence first."""
    return _orchestrator(environment, filesystem, registry).find_dirs(app_name, options)
