"""GitHub REST API client."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, TypeVar

import httpx
import structlog
from pydantic import ValidationError

from gitdaily.errors import GitHubAPIError
from gitdaily.models import (
    Branch,
    CommitDetail,
    CommitRecord,
    GitHubConfig,
    OrganizationRef,
    Repository,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class RepositoryScope(str, Enum):
    """Which repositories to list for a user."""

    OWNED = "owned"
    ORGANIZATIONS = "organizations"
    ALL = "all"


def format_since(since: datetime) -> str:
    """Format an instant as the RFC 3339 UTC string GitHub expects."""
    if since.tzinfo is None:
        since = since.astimezone()
    return since.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class GitHubClient:
    """Thin client over the GitHub REST API.

    One configured ``httpx.Client`` is shared by every call. The client keeps
    no fetched data between calls; every listing is returned to the caller.
    """

    def __init__(
        self,
        config: GitHubConfig,
        http_client: Optional[httpx.Client] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: GitHub configuration (token, username, page size, timeout)
            http_client: Optional pre-configured httpx client. Its headers and
                base URL are taken as-is.
            transport: Optional transport for the client created here
        """
        self.config = config
        self._owns_http_client = http_client is None
        self.http = http_client or httpx.Client(
            base_url=config.base_url,
            headers=self._default_headers(),
            timeout=config.timeout,
            transport=transport,
        )

    def _default_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.token}",
            "X-GitHub-Api-Version": self.config.api_version,
            "Accept": "application/vnd.github+json",
        }

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http_client:
            self.http.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ============================================================================
    # Request helpers
    # ============================================================================

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Issue one GET request and decode the JSON body.

        Raises:
            GitHubAPIError: On transport failure, non-2xx status or bad JSON
        """
        try:
            response = self.http.get(path, params=params)
        except httpx.HTTPError as e:
            raise GitHubAPIError(f"Request to {path} failed: {e}", url=path) from e

        if response.is_error:
            raise GitHubAPIError(
                f"GitHub API returned {response.status_code} for {path}: {response.text[:200]}",
                status_code=response.status_code,
                url=path,
            )

        try:
            return response.json()
        except ValueError as e:
            raise GitHubAPIError(f"Invalid JSON from {path}: {e}", url=path) from e

    def _paginate(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """Fetch every page of a list endpoint.

        Stops at the first empty page or the first page shorter than the
        page size.

        Args:
            path: Endpoint path relative to the API base URL
            params: Extra query parameters

        Returns:
            All items, in the order the pages returned them
        """
        page_size = self.config.page_size
        items: List[Dict[str, Any]] = []
        page = 1

        while True:
            query = dict(params or {})
            query.update({"per_page": page_size, "page": page})
            batch = self._get(path, params=query)

            if not isinstance(batch, list):
                raise GitHubAPIError(f"Expected a list from {path}, got {type(batch).__name__}", url=path)

            items.extend(batch)
            if len(batch) < page_size:
                break
            page += 1

        logger.debug("paginated_fetch", path=path, pages=page, items=len(items))
        return items

    @staticmethod
    def _decode(path: str, items: List[Any], factory: Callable[[Any], T]) -> List[T]:
        """Build models from decoded items, reporting malformed ones as API errors."""
        try:
            return [factory(item) for item in items]
        except (AttributeError, KeyError, TypeError, ValidationError) as e:
            raise GitHubAPIError(f"Unexpected payload from {path}: {e}", url=path) from e

    # ============================================================================
    # Repositories
    # ============================================================================

    def list_user_repositories(self, username: Optional[str] = None) -> List[Repository]:
        """List repositories owned by a user, most recently updated first."""
        username = username or self.config.username
        path = f"/users/{username}/repos"
        payload = self._paginate(
            path,
            {"type": "owner", "sort": "updated", "direction": "desc"},
        )
        return self._decode(path, payload, Repository.from_api)

    def list_organizations(self, username: Optional[str] = None) -> List[OrganizationRef]:
        """List the organizations a user belongs to."""
        username = username or self.config.username
        path = f"/users/{username}/orgs"
        payload = self._paginate(path)
        return self._decode(path, payload, lambda item: OrganizationRef(login=item["login"]))

    def list_organization_repositories(self, org: str) -> List[Repository]:
        """List every repository of an organization visible to the token."""
        path = f"/orgs/{org}/repos"
        payload = self._paginate(
            path,
            {"type": "all", "sort": "updated", "direction": "desc"},
        )
        return self._decode(path, payload, Repository.from_api)

    def _list_all_organization_repositories(self, username: str) -> List[Repository]:
        repos: List[Repository] = []
        for org in self.list_organizations(username):
            try:
                repos.extend(self.list_organization_repositories(org.login))
            except GitHubAPIError as e:
                logger.warning("organization_repositories_failed", org=org.login, error=str(e))
        return repos

    def list_repositories(
        self,
        username: Optional[str] = None,
        scope: RepositoryScope = RepositoryScope.ALL,
    ) -> List[Repository]:
        """List repositories for a user.

        Owned repositories come first, then organization repositories, with
        duplicates (by full name) dropped.

        Args:
            username: GitHub username (defaults to the configured one)
            scope: Which repositories to include

        Returns:
            Ordered list of repositories

        Raises:
            GitHubAPIError: If the owned repositories cannot be listed
        """
        username = username or self.config.username

        if scope == RepositoryScope.OWNED:
            return self.list_user_repositories(username)
        if scope == RepositoryScope.ORGANIZATIONS:
            return self._list_all_organization_repositories(username)

        repos = self.list_user_repositories(username)
        try:
            org_repos = self._list_all_organization_repositories(username)
        except GitHubAPIError as e:
            logger.warning("organization_listing_failed", username=username, error=str(e))
            return repos

        seen = {repo.full_name for repo in repos}
        for repo in org_repos:
            if repo.full_name not in seen:
                seen.add(repo.full_name)
                repos.append(repo)
        return repos

    # ============================================================================
    # Branches and commits
    # ============================================================================

    def list_branches(self, repository: Repository) -> List[Branch]:
        """List every branch of a repository."""
        path = f"/repos/{repository.full_name}/branches"
        payload = self._paginate(path)
        return self._decode(path, payload, Branch.from_api)

    def list_commits(
        self,
        repository: Repository,
        since: Optional[datetime] = None,
        branch: Optional[str] = None,
    ) -> List[CommitRecord]:
        """List commits of a repository, newest first.

        Args:
            repository: Repository to query
            since: Only commits authored after this instant
            branch: Branch name or SHA to list from instead of the default branch

        Returns:
            List of commits
        """
        params: Dict[str, Any] = {}
        if since is not None:
            params["since"] = format_since(since)
        if branch:
            params["sha"] = branch

        path = f"/repos/{repository.full_name}/commits"
        payload = self._paginate(path, params)
        return self._decode(path, payload, lambda item: CommitRecord.from_api(item, repository.name))

    def has_commits_since(
        self,
        repository: Repository,
        since: datetime,
        branch: Optional[str] = None,
    ) -> bool:
        """Check whether a branch (the default one if omitted) has a commit after ``since``."""
        params: Dict[str, Any] = {"since": format_since(since), "per_page": 1}
        if branch:
            params["sha"] = branch
        payload = self._get(f"/repos/{repository.full_name}/commits", params=params)
        return isinstance(payload, list) and len(payload) > 0

    def get_commit_detail(self, repository: Repository, sha: str) -> CommitDetail:
        """Fetch changed files and line statistics for one commit."""
        path = f"/repos/{repository.full_name}/commits/{sha}"
        payload = self._get(path)
        if not isinstance(payload, dict):
            raise GitHubAPIError(f"Unexpected commit payload for {sha}", url=path)
        return self._decode(path, [payload], CommitDetail.from_api)[0]
