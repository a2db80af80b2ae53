"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from pxgen.adapters.mock import MockRunner
from tests.helpers import WorkspaceBuilder


@pytest.fixture
def project_root() -> Path:
    """Return the repository root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    """A real directory standing in for the workspace root."""
    root = (tmp_path / "ws").resolve()
    root.mkdir()
    return root


@pytest.fixture
def workspace(workspace_root: Path) -> WorkspaceBuilder:
    """An empty workspace builder rooted at ``workspace_root``."""
    return WorkspaceBuilder(workspace_root)


@pytest.fixture
def mock_runner() -> MockRunner:
    return MockRunner()
