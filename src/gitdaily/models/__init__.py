"""Data models for repositories, commits and configuration."""

from gitdaily.models.config import GitHubConfig, LLMConfig, Settings
from gitdaily.models.github import (
    ActivityWindow,
    Branch,
    CommitDetail,
    CommitRecord,
    OrganizationRef,
    Repository,
)

__all__ = [
    "Repository",
    "Branch",
    "CommitRecord",
    "CommitDetail",
    "OrganizationRef",
    "ActivityWindow",
    "GitHubConfig",
    "LLMConfig",
    "Settings",
]
