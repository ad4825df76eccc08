"""Cross-branch commit aggregation."""

from datetime import datetime
from typing import Dict, Iterable, List

import structlog

from gitdaily.activity.window import filter_by_update_time
from gitdaily.errors import GitHubAPIError
from gitdaily.github import GitHubClient
from gitdaily.models import CommitRecord, Repository

logger = structlog.get_logger(__name__)


class CommitAggregator:
    """Collects the commits of repositories across all of their branches.

    Branches are processed one at a time. A commit reachable from several
    branches is kept once, from the first branch that returned it. The
    merged list keeps the per-branch page order and is not re-sorted by
    date across branches.
    """

    def __init__(self, client: GitHubClient) -> None:
        """Initialize the aggregator.

        Args:
            client: Configured GitHub client shared by every call
        """
        self.client = client

    def commits_since(self, repository: Repository, cutoff: datetime) -> List[CommitRecord]:
        """Return the deduplicated commits of every branch since ``cutoff``.

        Args:
            repository: Repository to aggregate
            cutoff: Only commits authored after this instant

        Returns:
            Merged commits; empty when there are no branches or no commits
        """
        try:
            branches = self.client.list_branches(repository)
        except GitHubAPIError as e:
            logger.warning("branch_listing_failed", repository=repository.full_name, error=str(e))
            return []

        merged: Dict[str, CommitRecord] = {}
        for branch in branches:
            try:
                commits = self.client.list_commits(repository, since=cutoff, branch=branch.name)
            except GitHubAPIError as e:
                logger.warning(
                    "branch_commits_failed",
                    repository=repository.full_name,
                    branch=branch.name,
                    error=str(e),
                )
                continue

            for commit in commits:
                if commit.sha not in merged:
                    merged[commit.sha] = commit

        logger.debug(
            "commits_aggregated",
            repository=repository.full_name,
            branches=len(branches),
            commits=len(merged),
        )
        return list(merged.values())

    def commits_for_repositories(
        self,
        repositories: Iterable[Repository],
        cutoff: datetime,
    ) -> List[CommitRecord]:
        """Aggregate several repositories into one combined list, in input order."""
        combined: List[CommitRecord] = []
        for repository in repositories:
            combined.extend(self.commits_since(repository, cutoff))
        return combined

    def has_recent_commits(self, repository: Repository, cutoff: datetime) -> bool:
        """Check for at least one commit after ``cutoff`` on any branch.

        The default branch is queried first; other branches are only listed
        when it has nothing.

        Raises:
            GitHubAPIError: If the default branch or branch listing fails
        """
        if self.client.has_commits_since(repository, cutoff):
            return True

        for branch in self.client.list_branches(repository):
            try:
                if self.client.has_commits_since(repository, cutoff, branch=branch.name):
                    return True
            except GitHubAPIError as e:
                logger.warning(
                    "branch_commit_check_failed",
                    repository=repository.full_name,
                    branch=branch.name,
                    error=str(e),
                )
        return False

    def active_repositories(
        self,
        repositories: Iterable[Repository],
        cutoff: datetime,
    ) -> List[Repository]:
        """Return the repositories with commits after ``cutoff``.

        ``updated_at`` is used as a cheap pre-filter; the commit check decides.
        Repositories whose check fails are logged and left out.
        """
        active: List[Repository] = []
        for repository in filter_by_update_time(repositories, cutoff):
            try:
                if self.has_recent_commits(repository, cutoff):
                    active.append(repository)
            except GitHubAPIError as e:
                logger.warning("commit_check_failed", repository=repository.full_name, error=str(e))
        return active

    def with_details(
        self,
        repository: Repository,
        commits: Iterable[CommitRecord],
    ) -> List[CommitRecord]:
        """Attach changed files and line statistics to each commit.

        Commits whose detail cannot be fetched are returned unchanged.
        """
        detailed: List[CommitRecord] = []
        for commit in commits:
            try:
                detail = self.client.get_commit_detail(repository, commit.sha)
            except GitHubAPIError as e:
                logger.warning(
                    "commit_detail_failed",
                    repository=repository.full_name,
                    sha=commit.short_sha,
                    error=str(e),
                )
                detailed.append(commit)
                continue
            detailed.append(commit.with_detail(detail))
        return detailed
