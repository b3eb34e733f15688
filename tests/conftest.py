"""Shared fixtures for gh-org-stats tests."""

from pathlib import Path

import pytest
from helpers import TEST_TOKEN

from gh_org_stats.config import Config


@pytest.fixture
def output_path(tmp_path: Path) -> Path:
    """Path for the statistics log inside a temp directory."""
    return tmp_path / "out" / "github_organization_statistics.txt"


@pytest.fixture
def config(output_path: Path) -> Config:
    """Minimal valid configuration targeting org 'acme'."""
    return Config.model_validate(
        {
            "github": {"token": TEST_TOKEN, "organization": "acme"},
            "rate_limit": {"max_in_flight": 5},
            "output": {"path": str(output_path)},
        }
    )
