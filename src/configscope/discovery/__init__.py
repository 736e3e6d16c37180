"""The scope-ordered discovery engine.

Leaf-first: ``stat_cache`` and ``patterns`` feed ``boundary``, ``scopes`` and
``probe``, which ``orchestrator`` drives per call.
"""

from __future__ import annotations

from configscope.discovery.boundary import BoundaryDetector, BoundaryKind, BoundaryMarker, BoundaryWalk
from configscope.discovery.filesystem import FileSystem, OSFileSystem
from configscope.discovery.orchestrator import DiscoveryOrchestrator
from configscope.discovery.patterns import Candidate, CandidateSet, expand
from configscope.discovery.probe import ScopeProbe
from configscope.discovery.providers import RegistryScope, ScopeProvider
from configscope.discovery.scopes import RootDescriptor, RootKind, ScopeResolver
from configscope.discovery.stat_cache import CacheEntry, PathKind, StatCache

__all__ = [
    "BoundaryDetector",
    "BoundaryKind",
    "BoundaryMarker",
    "BoundaryWalk",
    "CacheEntry",
    "Candidate",
    "CandidateSet",
    "DiscoveryOrchestrator",
    "FileSystem",
    "OSFileSystem",
    "PathKind",
    "RegistryScope",
    "RootDescriptor",
    "RootKind",
    "ScopeProbe",
    "ScopeProvider",
    "ScopeResolver",
    "StatCache",
    "expand",
]
