"""Registry providers for the optional ``registry`` scope."""

from __future__ import annotations

from configscope.registry.base import (
    CallableRegistryProvider,
    RegistryProvider,
    StaticRegistryProvider,
)

__all__ = [
    "CallableRegistryProvider",
    "RegistryProvider",
    "StaticRegistryProvider",
]
