"""Tests for settings loading and validation."""

import pytest

from gitdaily.errors import ConfigurationError
from gitdaily.models import Settings

ENV_VARS = [
    "GITHUB_ACCESS_TOKEN",
    "GITHUB_USERNAME",
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "DAYS_BACK",
    "PER_PAGE",
    "INCLUDE_ORGS",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Clear gitdaily variables and run from a directory without a .env file."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestSettings:
    """Test environment loading."""

    def test_defaults(self, clean_env):
        settings = Settings()

        assert settings.days_back == 7
        assert settings.per_page == 10
        assert settings.gemini_model == "gemini-2.0-flash"
        assert settings.include_orgs is True
        assert settings.github_access_token is None

    def test_reads_environment(self, clean_env):
        clean_env.setenv("GITHUB_ACCESS_TOKEN", "ghp_token")
        clean_env.setenv("GITHUB_USERNAME", "octo")
        clean_env.setenv("DAYS_BACK", "3")
        clean_env.setenv("PER_PAGE", "25")
        clean_env.setenv("INCLUDE_ORGS", "false")

        settings = Settings()

        assert settings.github_access_token == "ghp_token"
        assert settings.github_username == "octo"
        assert settings.days_back == 3
        assert settings.per_page == 25
        assert settings.include_orgs is False

    @pytest.mark.parametrize("value", ["0", "-4", "soon", ""])
    def test_invalid_overrides_fall_back_to_defaults(self, clean_env, value):
        clean_env.setenv("DAYS_BACK", value)
        clean_env.setenv("PER_PAGE", value)

        settings = Settings()

        assert settings.days_back == 7
        assert settings.per_page == 10

    def test_reads_dotenv_file(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("GITHUB_ACCESS_TOKEN=from-file\nGITHUB_USERNAME=filer\n")

        settings = Settings()

        assert settings.github_access_token == "from-file"
        assert settings.github_username == "filer"


class TestValidation:
    def test_missing_github_settings(self, clean_env):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings().validate_for_run()

        message = str(exc_info.value)
        assert "GITHUB_ACCESS_TOKEN" in message
        assert "GITHUB_USERNAME" in message
        assert "GEMINI_API_KEY" not in message

    def test_llm_key_required_for_summary(self, clean_env):
        settings = Settings(github_access_token="t", github_username="u")

        settings.validate_for_run()
        with pytest.raises(ConfigurationError, match="GEMINI_API_KEY"):
            settings.validate_for_run(require_llm=True)

    def test_github_config(self, clean_env):
        config = Settings(github_access_token="t", github_username="u").github_config()

        assert config.token == "t"
        assert config.username == "u"
        assert config.page_size == 100
        assert config.timeout == 15.0
        assert config.api_version == "2022-11-28"

    def test_github_config_requires_credentials(self, clean_env):
        with pytest.raises(ConfigurationError):
            Settings().github_config()

    def test_llm_config(self, clean_env):
        config = Settings(gemini_api_key="k", gemini_model="gemini-1.5-pro").llm_config()

        assert config.api_key == "k"
        assert config.model == "gemini-1.5-pro"
        assert config.timeout > 15.0
