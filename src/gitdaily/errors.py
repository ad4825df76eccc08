"""Exception types raised by gitdaily."""

from typing import Optional


class GitDailyError(Exception):
    """Base class for all gitdaily errors."""


class ConfigurationError(GitDailyError):
    """Required configuration is missing or invalid."""


class GitHubAPIError(GitDailyError):
    """A request to the GitHub REST API failed."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class LLMError(GitDailyError):
    """The text generation endpoint could not produce a response."""
