"""Commit activity summarization."""

from typing import Sequence

import structlog

from gitdaily.llm.base import BaseLLMProvider
from gitdaily.llm.prompts import PromptTemplates
from gitdaily.models import CommitRecord

logger = structlog.get_logger(__name__)

NO_COMMITS_MESSAGE = "No commits found in the specified time period."
FALLBACK_SUMMARY = "Unable to generate summary at this time."


class SummaryGenerator:
    """Turns a set of commits into a natural-language activity summary."""

    def __init__(self, provider: BaseLLMProvider) -> None:
        """Initialize the summary generator.

        Args:
            provider: LLM provider used for the completion
        """
        self.provider = provider
        self.prompts = PromptTemplates()

    def build_prompt(self, commits: Sequence[CommitRecord]) -> str:
        """Build the full prompt for a non-empty commit set."""
        return self.prompts.daily_summary(self.prompts.commit_digest(commits))

    async def generate_summary(self, commits: Sequence[CommitRecord]) -> str:
        """Summarize commits grouped by repository.

        Args:
            commits: Combined commits of the selected repositories

        Returns:
            The generated summary, or a fixed placeholder when there are no
            commits or the provider returned no text

        Raises:
            LLMError: If the provider call fails
        """
        if not commits:
            return NO_COMMITS_MESSAGE

        prompt = self.build_prompt(commits)
        logger.info(
            "summary_requested",
            commits=len(commits),
            repositories=len(self.prompts.group_by_repository(commits)),
        )

        text = await self.provider.complete(prompt)
        if not text.strip():
            logger.warning("summary_empty")
            return FALLBACK_SUMMARY
        return text
