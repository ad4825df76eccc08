"""GitHub REST API access."""

from gitdaily.github.client import GitHubClient, RepositoryScope

__all__ = ["GitHubClient", "RepositoryScope"]
