"""Tests for cross-branch commit aggregation."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from gitdaily.activity import CommitAggregator
from gitdaily.errors import GitHubAPIError
from gitdaily.github import GitHubClient
from gitdaily.models import Branch, CommitDetail, CommitRecord, Repository
from tests.unit.payloads import branch_payload, commit_payload, repo_payload

CUTOFF = datetime(2024, 1, 8, tzinfo=timezone.utc)
SHARED_SHA = "abc123" + "0" * 34


def make_commit(sha, message="Update code", repo_name="api"):
    return CommitRecord.from_api(commit_payload(sha, message=message), repo_name)


@pytest.fixture
def repository():
    return Repository.from_api(repo_payload("api"))


@pytest.fixture
def mock_client():
    """Create a mock GitHub client."""
    return MagicMock(spec=GitHubClient)


@pytest.fixture
def aggregator(mock_client):
    return CommitAggregator(mock_client)


class TestCommitsSince:
    """Test the branch fan-out and merge."""

    def test_commit_on_two_branches_appears_once(self, aggregator, mock_client, repository):
        mock_client.list_branches.return_value = [Branch(name="main", commit_sha="1"), Branch(name="dev", commit_sha="2")]
        mock_client.list_commits.side_effect = [
            [make_commit(SHARED_SHA, "fix bug")],
            [make_commit("d" * 40, "dev work"), make_commit(SHARED_SHA, "fix bug")],
        ]

        commits = aggregator.commits_since(repository, CUTOFF)

        assert [c.sha for c in commits] == [SHARED_SHA, "d" * 40]
        assert sum(1 for c in commits if c.sha == SHARED_SHA) == 1

    def test_queries_each_branch_since_cutoff(self, aggregator, mock_client, repository):
        mock_client.list_branches.return_value = [Branch(name="main", commit_sha="1"), Branch(name="dev", commit_sha="2")]
        mock_client.list_commits.return_value = []

        aggregator.commits_since(repository, CUTOFF)

        calls = mock_client.list_commits.call_args_list
        assert [c.kwargs["branch"] for c in calls] == ["main", "dev"]
        assert all(c.kwargs["since"] == CUTOFF for c in calls)

    def test_membership_independent_of_branch_order(self, mock_client, repository):
        main_commits = [make_commit("a" * 40), make_commit(SHARED_SHA)]
        dev_commits = [make_commit(SHARED_SHA), make_commit("b" * 40)]
        by_branch = {"main": main_commits, "dev": dev_commits}
        mock_client.list_commits.side_effect = lambda repo, since, branch: by_branch[branch]

        mock_client.list_branches.return_value = [Branch(name="main", commit_sha="1"), Branch(name="dev", commit_sha="2")]
        forward = CommitAggregator(mock_client).commits_since(repository, CUTOFF)
        mock_client.list_branches.return_value = [Branch(name="dev", commit_sha="2"), Branch(name="main", commit_sha="1")]
        backward = CommitAggregator(mock_client).commits_since(repository, CUTOFF)

        assert {c.sha for c in forward} == {c.sha for c in backward}
        assert len(forward) == len(backward) == 3

    def test_zero_branches_returns_empty(self, aggregator, mock_client, repository):
        mock_client.list_branches.return_value = []

        assert aggregator.commits_since(repository, CUTOFF) == []
        mock_client.list_commits.assert_not_called()

    def test_no_commits_on_any_branch(self, aggregator, mock_client, repository):
        mock_client.list_branches.return_value = [Branch(name="main", commit_sha="1")]
        mock_client.list_commits.return_value = []

        assert aggregator.commits_since(repository, CUTOFF) == []

    def test_failing_branch_is_skipped(self, aggregator, mock_client, repository):
        mock_client.list_branches.return_value = [Branch(name="broken", commit_sha="1"), Branch(name="main", commit_sha="2")]
        mock_client.list_commits.side_effect = [
            GitHubAPIError("boom", status_code=500),
            [make_commit("a" * 40)],
        ]

        commits = aggregator.commits_since(repository, CUTOFF)

        assert [c.sha for c in commits] == ["a" * 40]

    def test_branch_listing_failure_returns_empty(self, aggregator, mock_client, repository):
        mock_client.list_branches.side_effect = GitHubAPIError("boom")

        assert aggregator.commits_since(repository, CUTOFF) == []

    def test_keeps_per_branch_order_without_resorting(self, aggregator, mock_client, repository):
        older = CommitRecord.from_api(commit_payload("a" * 40, date="2024-01-09T00:00:00Z"), "api")
        newer = CommitRecord.from_api(commit_payload("b" * 40, date="2024-01-12T00:00:00Z"), "api")
        mock_client.list_branches.return_value = [Branch(name="main", commit_sha="1"), Branch(name="dev", commit_sha="2")]
        mock_client.list_commits.side_effect = [[older], [newer]]

        commits = aggregator.commits_since(repository, CUTOFF)

        assert [c.sha for c in commits] == ["a" * 40, "b" * 40]


class TestCommitsForRepositories:
    def test_combines_in_repository_order(self, aggregator, mock_client):
        api = Repository.from_api(repo_payload("api", repo_id=1))
        web = Repository.from_api(repo_payload("web", repo_id=2))
        mock_client.list_branches.return_value = [Branch(name="main", commit_sha="1")]
        mock_client.list_commits.side_effect = [
            [make_commit("a" * 40, repo_name="api")],
            [make_commit("a" * 40, repo_name="web"), make_commit("b" * 40, repo_name="web")],
        ]

        combined = aggregator.commits_for_repositories([api, web], CUTOFF)

        assert [(c.repo_name, c.sha[0]) for c in combined] == [("api", "a"), ("web", "a"), ("web", "b")]


class TestActiveRepositories:
    """Test the updated_at pre-filter combined with the commit check."""

    def test_requires_recent_update_and_commits(self, aggregator, mock_client, days_ago):
        recent_active = Repository.from_api(repo_payload("a", days_ago(2), repo_id=1))
        recent_idle = Repository.from_api(repo_payload("idle", days_ago(1), repo_id=2))
        stale = Repository.from_api(repo_payload("b", days_ago(10), repo_id=3))
        mock_client.has_commits_since.side_effect = lambda repo, since, branch=None: repo.name == "a"
        mock_client.list_branches.return_value = []

        active = aggregator.active_repositories([recent_active, recent_idle, stale], days_ago(7))

        assert [r.name for r in active] == ["a"]
        checked = {c.args[0].name for c in mock_client.has_commits_since.call_args_list}
        assert "b" not in checked

    def test_commits_on_non_default_branch_count(self, aggregator, mock_client, days_ago):
        repo = Repository.from_api(repo_payload("a", days_ago(1)))
        mock_client.has_commits_since.side_effect = lambda repo, since, branch=None: branch == "dev"
        mock_client.list_branches.return_value = [Branch(name="main", commit_sha="1"), Branch(name="dev", commit_sha="2")]

        assert aggregator.active_repositories([repo], days_ago(7)) == [repo]

    def test_failing_check_skips_repository(self, aggregator, mock_client, days_ago):
        broken = Repository.from_api(repo_payload("broken", days_ago(1), repo_id=1))
        fine = Repository.from_api(repo_payload("fine", days_ago(1), repo_id=2))

        def has_commits(repo, since, branch=None):
            if repo.name == "broken":
                raise GitHubAPIError("boom", status_code=409)
            return True

        mock_client.has_commits_since.side_effect = has_commits

        assert [r.name for r in aggregator.active_repositories([broken, fine], days_ago(7))] == ["fine"]


class TestWithDetails:
    def test_attaches_detail(self, aggregator, mock_client, repository):
        commit = make_commit("a" * 40)
        mock_client.get_commit_detail.return_value = CommitDetail(
            sha="a" * 40, files=["src/app.py"], additions=4, deletions=2
        )

        [detailed] = aggregator.with_details(repository, [commit])

        assert detailed.files == ["src/app.py"]
        assert (detailed.additions, detailed.deletions) == (4, 2)
        mock_client.get_commit_detail.assert_called_once_with(repository, "a" * 40)

    def test_failing_detail_keeps_commit(self, aggregator, mock_client, repository):
        commits = [make_commit("a" * 40), make_commit("b" * 40)]
        mock_client.get_commit_detail.side_effect = [
            GitHubAPIError("boom"),
            CommitDetail(sha="b" * 40, files=["x.py"], additions=1, deletions=0),
        ]

        detailed = aggregator.with_details(repository, commits)

        assert detailed[0].files is None
        assert detailed[1].files == ["x.py"]


def test_end_to_end_with_fake_api(fake_github, github_client):
    """Commit reachable from main and dev is aggregated once over the wire."""
    fake_github.add("/repos/octo/api/branches", [branch_payload("main"), branch_payload("dev")])
    by_branch = {
        "main": [commit_payload(SHARED_SHA, message="fix bug")],
        "dev": [commit_payload("e" * 40, message="wip"), commit_payload(SHARED_SHA, message="fix bug")],
    }
    fake_github.add("/repos/octo/api/commits", lambda request: by_branch[request.url.params["sha"]])
    repository = Repository.from_api(repo_payload("api"))

    commits = CommitAggregator(github_client).commits_since(repository, CUTOFF)

    assert [c.sha for c in commits].count(SHARED_SHA) == 1
    assert len(commits) == 2


def test_malformed_commit_skips_only_its_branch(fake_github, github_client):
    fake_github.add("/repos/octo/api/branches", [branch_payload("main"), branch_payload("dev")])
    broken = commit_payload("e" * 40)
    del broken["commit"]["author"]["date"]
    by_branch = {"main": [commit_payload("a" * 40)], "dev": [broken]}
    fake_github.add("/repos/octo/api/commits", lambda request: by_branch[request.url.params["sha"]])
    repository = Repository.from_api(repo_payload("api"))

    commits = CommitAggregator(github_client).commits_since(repository, CUTOFF)

    assert [c.sha for c in commits] == ["a" * 40]


def test_malformed_branch_listing_yields_no_commits(fake_github, github_client):
    fake_github.add("/repos/octo/api/branches", [branch_payload("main"), {"protected": False}])
    fake_github.add("/repos/octo/api/commits", [commit_payload("a" * 40)])
    repository = Repository.from_api(repo_payload("api"))

    commits = CommitAggregator(github_client).commits_since(repository, CUTOFF)

    assert commits == []
    assert "/repos/octo/api/commits" not in fake_github.paths()
