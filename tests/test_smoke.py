import configscope
from configscope import __version__


def test_version():
    assert __version__ == "0.1.0"


def test_public_api():
    for name in ("find_app_config", "discover", "find_workspace_boundary", "find_app_config_dirs", "Options"):
        assert hasattr(configscope, name)
