"""Shared fixtures for configscope tests."""

import pytest

from tests.discovery.helpers import FakeFileSystem, build_repo


@pytest.fixture
def repo_fs() -> FakeFileSystem:
    """Simulated tree with ``/repo/.git`` and ``/repo/pkg/.myapp.yaml``."""
    fs = FakeFileSystem()
    build_repo(fs)
    return fs
