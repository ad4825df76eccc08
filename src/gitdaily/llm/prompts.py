"""Prompt templates for commit summaries."""

from typing import Dict, Iterable, List

from gitdaily.models import CommitRecord

DATE_FORMAT = "%Y-%m-%d %H:%M"


class PromptTemplates:
    """Collection of prompt templates for activity summaries."""

    @staticmethod
    def group_by_repository(commits: Iterable[CommitRecord]) -> Dict[str, List[CommitRecord]]:
        """Group commits by repository name in first-seen order."""
        grouped: Dict[str, List[CommitRecord]] = {}
        for commit in commits:
            grouped.setdefault(commit.repo_name, []).append(commit)
        return grouped

    @staticmethod
    def commit_digest(commits: Iterable[CommitRecord]) -> str:
        """Render commits as a per-repository digest.

        Args:
            commits: Commits from one or more repositories

        Returns:
            Digest text, one header per repository and one line per commit
        """
        lines = ["Recent commits summary:", ""]
        for repo_name, repo_commits in PromptTemplates.group_by_repository(commits).items():
            lines.append(f"Repository: {repo_name}")
            for commit in repo_commits:
                lines.append(
                    f"- {commit.short_sha}: {commit.message} "
                    f"(by {commit.author} on {commit.date.strftime(DATE_FORMAT)})"
                )
            lines.append("")
        return "\n".join(lines) + "\n"

    @staticmethod
    def daily_summary(digest: str) -> str:
        """Generate prompt for a meeting-ready summary of a commit digest.

        Args:
            digest: Output of ``commit_digest``

        Returns:
            Formatted prompt
        """
        return f"""Please provide a concise summary of the following recent commits for a daily standup or meeting.
Focus on the most important changes, new features, bug fixes, and any breaking changes.
Group by repository and highlight key achievements:

{digest}

Please format the response as a professional summary suitable for a team meeting."""
