"""Configuration models."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gitdaily.errors import ConfigurationError

GITHUB_MAX_PAGE_SIZE = 100

DEFAULT_DAYS_BACK = 7
DEFAULT_PER_PAGE = 10


class GitHubConfig(BaseModel):
    """Configuration for the GitHub REST client."""

    token: str = Field(..., description="Personal access token sent as a bearer token")
    username: str = Field(..., description="GitHub username whose repositories are listed")
    base_url: str = Field("https://api.github.com", description="REST API base URL")
    api_version: str = Field("2022-11-28", description="Value of the X-GitHub-Api-Version header")
    page_size: int = Field(
        GITHUB_MAX_PAGE_SIZE,
        gt=0,
        le=GITHUB_MAX_PAGE_SIZE,
        description="Items requested per page",
    )
    timeout: float = Field(15.0, description="Request timeout in seconds")


class LLMConfig(BaseModel):
    """Configuration for the text generation API."""

    provider: str = Field("gemini", description="LLM provider")
    model: str = Field("gemini-2.0-flash", description="Model name")
    api_key: Optional[str] = Field(None, description="API key")
    base_url: str = Field(
        "https://generativelanguage.googleapis.com/v1beta",
        description="API base URL",
    )
    timeout: float = Field(60.0, description="Request timeout in seconds")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # GitHub Settings
    github_access_token: Optional[str] = None
    github_username: Optional[str] = None
    github_api_url: str = "https://api.github.com"
    include_orgs: bool = True

    # LLM Settings
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"

    # Activity Settings
    days_back: int = DEFAULT_DAYS_BACK
    per_page: int = DEFAULT_PER_PAGE

    # Logging
    log_level: str = "INFO"

    @field_validator("days_back", mode="before")
    @classmethod
    def _days_back_or_default(cls, value: Any) -> int:
        return _positive_int_or(value, DEFAULT_DAYS_BACK)

    @field_validator("per_page", mode="before")
    @classmethod
    def _per_page_or_default(cls, value: Any) -> int:
        return _positive_int_or(value, DEFAULT_PER_PAGE)

    def validate_for_run(self, require_llm: bool = False) -> None:
        """Check that the settings needed for a run are present.

        Args:
            require_llm: Whether the Gemini API key is also required

        Raises:
            ConfigurationError: Naming every missing variable
        """
        missing: List[str] = []
        if not self.github_access_token:
            missing.append("GITHUB_ACCESS_TOKEN")
        if not self.github_username:
            missing.append("GITHUB_USERNAME")
        if require_llm and not self.gemini_api_key:
            missing.append("GEMINI_API_KEY")

        if missing:
            raise ConfigurationError(
                f"Missing required environment variable(s): {', '.join(missing)}"
            )

    def github_config(self) -> GitHubConfig:
        """Build the GitHub client configuration."""
        self.validate_for_run()
        return GitHubConfig(
            token=self.github_access_token,
            username=self.github_username,
            base_url=self.github_api_url,
        )

    def llm_config(self) -> LLMConfig:
        """Build the text generation configuration."""
        if not self.gemini_api_key:
            raise ConfigurationError("Missing required environment variable(s): GEMINI_API_KEY")
        return LLMConfig(model=self.gemini_model, api_key=self.gemini_api_key)


def _positive_int_or(value: Any, default: int) -> int:
    # Unparsable or non-positive overrides are ignored
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default
