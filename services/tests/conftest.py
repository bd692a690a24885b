"""
Top-level test configuration for the SCM adapter.
"""

import json
import os
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

# Ensure test-friendly defaults
os.environ.setdefault("SCM_GITHUB_JSON_LOGS", "false")
os.environ.setdefault("SCM_GITHUB_LOG_LEVEL", "DEBUG")
os.environ.setdefault("SCM_GITHUB_CONFIG_FILE", "/nonexistent/scm-github.yaml")

from scm_github.scm import GithubScm  # noqa: E402

DATA_DIR = Path(__file__).parent / "data"


def load_payload(name: str) -> dict[str, Any]:
    """Load a recorded GitHub webhook payload from tests/data."""
    return json.loads((DATA_DIR / f"{name}.json").read_text())


@pytest.fixture
def mock_provider() -> MagicMock:
    """A GitHubProvider double with async repository lookups."""
    provider = MagicMock()
    provider.authenticate = MagicMock()
    provider.get = AsyncMock()
    provider.get_branch = AsyncMock()
    provider.get_content = AsyncMock()
    provider.create_status = AsyncMock()
    return provider


@pytest.fixture
def scm(mock_provider: MagicMock) -> GithubScm:
    """Adapter with a fast retry policy."""
    return GithubScm({"retry": {"min_timeout": 0.001, "retries": 2}}, provider=mock_provider)


@pytest.fixture
def payload():
    """Loader for recorded GitHub webhook payloads."""
    return load_payload
