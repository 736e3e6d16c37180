"""configscope: scope-ordered discovery of application config files.

Finds where an application's configuration lives (environment overrides,
the project tree up to the workspace boundary, the user's home, system-wide
directories and an optional registry) without reading any of it.

Public API::

    from configscope import Options, find_app_config, find_workspace_boundary

    path = find_app_config("myapp")
    root = find_workspace_boundary("myapp")
    result = find_app_config("myapp", Options(find_all=True))
"""

from __future__ import annotations

from configscope.api import (
    discover,
    find_app_config,
    find_app_config_dirs,
    find_workspace_boundary,
)
from configscope.discovery.models import (
    DiscoveryResult,
    ParentResult,
    ScopeResult,
    WorkspaceResult,
)
from configscope.environment import Environment
from configscope.exceptions import ConfigScopeError, OptionsError
from configscope.options import Options, Scope, SelectField, SymlinkBehavior, load_options

__version__ = "0.1.0"

__all__ = [
    "ConfigScopeError",
    "DiscoveryResult",
    "Environment",
    "Options",
    "OptionsError",
    "ParentResult",
    "Scope",
    "ScopeResult",
    "SelectField",
    "SymlinkBehavior",
    "WorkspaceResult",
    "discover",
    "find_app_config",
    "find_app_config_dirs",
    "find_workspace_boundary",
    "load_options",
]
