"""Shared fixtures for unit tests."""

from datetime import datetime, timedelta, timezone

import pytest
import structlog

from gitdaily.github import GitHubClient
from gitdaily.models import GitHubConfig
from tests.unit.payloads import FakeGitHub


@pytest.fixture
def fake_github():
    """Create an empty fake GitHub API."""
    return FakeGitHub()


@pytest.fixture
def github_config():
    """GitHub configuration with a small page size to exercise pagination."""
    return GitHubConfig(token="test-token", username="octo", page_size=2)


@pytest.fixture
def github_client(fake_github, github_config):
    """Create a GitHubClient backed by the fake API."""
    client = GitHubClient(github_config, transport=fake_github.transport())
    yield client
    client.close()


@pytest.fixture
def now():
    return datetime.now(timezone.utc)


@pytest.fixture
def days_ago(now):
    def _days_ago(days: float) -> datetime:
        return now - timedelta(days=days)

    return _days_ago


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()
