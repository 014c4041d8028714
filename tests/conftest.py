"""
Common test fixtures and configuration.

Environments are plain dicts handed to the resolver, so tests never touch
the real process environment unless they mean to (via monkeypatch).
"""
import logging
import sys
from pathlib import Path

import pytest
from click.testing import CliRunner

# Add src directory to Python path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hearth.connections import constants as env  # noqa: E402


@pytest.fixture(autouse=True)
def setup_logging():
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)
    yield


@pytest.fixture
def clean_environ(monkeypatch):
    """Remove every variable hearth reads from the process environment."""
    for name in env.RECOGNIZED_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def integrated_env():
    """Minimal settings for integrated/Azure AD authentication."""
    return {"SERVER_NAME": "localhost", "DATABASE_NAME": "test"}


@pytest.fixture
def sql_env():
    """Settings for SQL authentication on a non-default port."""
    return {
        "SERVER_NAME": "localhost",
        "SERVER_PORT": "5000",
        "DATABASE_NAME": "test",
        "AUTH_TYPE": "sql",
        "SQL_USERNAME": "sa",
        "SQL_PASSWORD": "pw",
    }


@pytest.fixture
def cli_runner():
    """Click test runner."""
    return CliRunner()
