"""
Shared fixtures for the version-diff test suite.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config_logging import DiffConfig, reset_config  # noqa: E402


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop VD_* variables so every test starts from the documented defaults."""
    import os
    for name in list(os.environ):
        if name.startswith('VD_'):
            monkeypatch.delenv(name, raising=False)
    reset_config()
    from version_diff.differ import reset_default_differ
    reset_default_differ()
    yield
    reset_config()
    reset_default_differ()


@pytest.fixture
def config() -> DiffConfig:
    """Default configuration."""
    return DiffConfig()


@pytest.fixture(params=['myers', 'dmp'])
def engine(request) -> str:
    """Run a test once per sequence differ engine."""
    return request.param


@pytest.fixture
def differ(engine, config):
    """DocumentDiffer for the parametrized engine."""
    from version_diff import DocumentDiffer
    return DocumentDiffer(engine=engine, config=config)


@pytest.fixture
def fifty_lines():
    """A 50-line document and a copy with line 26 edited."""
    lines = [f"Line {i}" for i in range(1, 51)]
    new_lines = list(lines)
    new_lines[25] = "MODIFIED Line 26"
    return '\n'.join(lines), '\n'.join(new_lines)
