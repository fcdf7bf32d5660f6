"""
Pytest configuration file.

Ensures the repo root is on sys.path so that 'import crypto_dashboard...' works,
and clears the cached settings around every test so environment changes made
with monkeypatch never leak between tests.
"""
import sys
from pathlib import Path

import pytest

# Add the repo root to sys.path
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from crypto_dashboard.config.settings import reset_settings  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_settings():
    """Reset the settings singleton before and after each test."""
    reset_settings()
    yield
    reset_settings()
