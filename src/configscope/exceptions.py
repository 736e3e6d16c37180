"""configscope exception hierarchy.

All public exceptions inherit from ConfigScopeError, giving callers a single
base class to catch when they want to handle any configscope-specific failure
without swallowing unrelated errors.

Only configuration mistakes are raised. Environment conditions (missing
files, permission errors, a failing registry provider) never surface as
exceptions; discovery degrades to an empty result instead.
"""

from __future__ import annotations

from typing import Any, Mapping


class ConfigScopeError(Exception):
    """Base exception for all configscope errors."""

    context: dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = dict(context) if context is not None else {}


class OptionsError(ConfigScopeError, ValueError):
    """Raised when discovery options are invalid.

    Covers unknown or duplicate precedence entries, unknown ``select``
    fields, unsupported symlink behaviors, search locations aimed at a
    scope that cannot take extra roots, and malformed options files.
    Raised before any filesystem probing begins.
    """
