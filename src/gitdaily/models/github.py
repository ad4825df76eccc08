"""Data models for GitHub repositories, branches and commits."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

SHORT_SHA_LENGTH = 8


class Repository(BaseModel):
    """A repository as returned by the GitHub REST API."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="GitHub repository ID")
    name: str = Field(..., description="Repository name")
    full_name: str = Field(..., description="Fully-qualified name (owner/name)")
    private: bool = Field(False, description="Whether the repository is private")
    language: Optional[str] = Field(None, description="Primary language")
    description: Optional[str] = Field(None, description="Repository description")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
    pushed_at: Optional[datetime] = Field(None, description="Last push timestamp")
    html_url: str = Field("", description="Web URL")

    @property
    def owner(self) -> str:
        """Owner login taken from the full name."""
        return self.full_name.split("/", 1)[0]

    def display_label(self) -> str:
        """Human-readable label used in listings."""
        language = self.language or "Unknown"
        return f"{self.name} ({language}) - Updated: {self.updated_at.strftime('%Y-%m-%d')}"

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Repository":
        """Build a repository from a REST payload."""
        return cls(
            id=payload["id"],
            name=payload["name"],
            full_name=payload["full_name"],
            private=payload.get("private", False),
            language=payload.get("language"),
            description=payload.get("description"),
            created_at=payload["created_at"],
            updated_at=payload["updated_at"],
            pushed_at=payload.get("pushed_at"),
            html_url=payload.get("html_url") or "",
        )


class Branch(BaseModel):
    """A branch head."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Branch name")
    commit_sha: str = Field(..., description="SHA of the branch head commit")
    protected: bool = Field(False, description="Whether the branch is protected")

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Branch":
        return cls(
            name=payload["name"],
            commit_sha=(payload.get("commit") or {}).get("sha", ""),
            protected=payload.get("protected", False),
        )


class CommitDetail(BaseModel):
    """Files and line statistics for a single commit."""

    model_config = ConfigDict(frozen=True)

    sha: str = Field(..., description="Full commit SHA")
    files: List[str] = Field(default_factory=list, description="Changed file paths")
    additions: int = Field(0, description="Number of lines added")
    deletions: int = Field(0, description="Number of lines deleted")

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "CommitDetail":
        stats = payload.get("stats") or {}
        return cls(
            sha=payload["sha"],
            files=[f["filename"] for f in payload.get("files") or [] if "filename" in f],
            additions=stats.get("additions", 0),
            deletions=stats.get("deletions", 0),
        )


class CommitRecord(BaseModel):
    """A commit belonging to one repository."""

    model_config = ConfigDict(frozen=True)

    sha: str = Field(..., description="Full commit SHA")
    message: str = Field("", description="Full commit message")
    author: str = Field("", description="Author login, or git author name when unlinked")
    date: datetime = Field(..., description="Author date")
    repo_name: str = Field(..., description="Name of the repository the commit belongs to")
    html_url: str = Field("", description="Web URL of the commit")

    # Populated only by the detail view
    files: Optional[List[str]] = Field(None, description="Changed file paths")
    additions: Optional[int] = Field(None, description="Number of lines added")
    deletions: Optional[int] = Field(None, description="Number of lines deleted")

    @property
    def short_sha(self) -> str:
        """First 8 characters of the SHA."""
        return self.sha[:SHORT_SHA_LENGTH]

    @property
    def message_summary(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0]

    def with_detail(self, detail: CommitDetail) -> "CommitRecord":
        """Return a copy carrying files and line statistics."""
        return self.model_copy(
            update={
                "files": list(detail.files),
                "additions": detail.additions,
                "deletions": detail.deletions,
            }
        )

    @classmethod
    def from_api(cls, payload: Dict[str, Any], repo_name: str) -> "CommitRecord":
        """Build a commit from an entry of the commit listing endpoint.

        The GitHub login is preferred over the git author name when the
        commit is linked to an account.
        """
        commit = payload.get("commit") or {}
        git_author = commit.get("author") or {}
        account = payload.get("author") or {}
        return cls(
            sha=payload["sha"],
            message=commit.get("message", ""),
            author=account.get("login") or git_author.get("name", ""),
            date=git_author["date"],
            repo_name=repo_name,
            html_url=payload.get("html_url") or "",
        )


class OrganizationRef(BaseModel):
    """An organization the user belongs to."""

    login: str = Field(..., description="Organization login")


class ActivityWindow(BaseModel):
    """The cutoff instant for a run plus a human-readable label."""

    model_config = ConfigDict(frozen=True)

    cutoff: datetime = Field(..., description="Activity before this instant is excluded")
    label: str = Field(..., description="Human-readable description of the window")
