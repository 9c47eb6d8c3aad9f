"""Test fixtures: repository store, staging root, plugin payload.

All tests should use these fixtures for consistency.
"""

import pytest

from paasctl.config.store import RepoConfigStore
from paasctl.types import PluginRepo


@pytest.fixture
def platform_tag():
    return "linux64"


@pytest.fixture
def plugin_bytes():
    """A 4096-byte plugin binary."""
    return b"\x7fELF" + b"\x00" * 4092


@pytest.fixture
def repo_store(tmp_path):
    """Empty store backed by a temp config.yaml."""
    return RepoConfigStore(tmp_path / "home" / "config.yaml")


@pytest.fixture
def main_repo(repo_store):
    repo = PluginRepo(name="main", url="https://r.example/")
    repo_store.add_repository(repo)
    return repo


@pytest.fixture
def staging_root(tmp_path):
    root = tmp_path / "staging"
    root.mkdir()
    return root
