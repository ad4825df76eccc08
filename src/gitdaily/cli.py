"""Command-line interface for gitdaily."""

import asyncio
from typing import List, Optional, Sequence

import structlog
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Prompt
from rich.table import Table

from gitdaily.activity import (
    CommitAggregator,
    days_back_window,
    filter_by_update_time,
    standup_window,
)
from gitdaily.errors import ConfigurationError, GitHubAPIError, LLMError
from gitdaily.github import GitHubClient, RepositoryScope
from gitdaily.llm import GeminiProvider, SummaryGenerator
from gitdaily.logging_config import configure_logging
from gitdaily.models import ActivityWindow, CommitRecord, Repository, Settings

app = typer.Typer(
    name="gitdaily",
    help="Daily commit digests for your GitHub repositories",
    add_completion=False,
)
console = Console()
logger = structlog.get_logger(__name__)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Summarize recent commit activity across your GitHub repositories."""
    if verbose:
        configure_logging("DEBUG")
        return
    try:
        configure_logging(load_settings().log_level)
    except ConfigurationError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


# ============================================================================
# Helpers
# ============================================================================


def load_settings() -> Settings:
    """Load settings from the environment and an optional .env file.

    Raises:
        ConfigurationError: If a variable has a value that cannot be parsed
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def build_github_client(settings: Settings) -> GitHubClient:
    return GitHubClient(settings.github_config())


def build_llm_provider(settings: Settings) -> GeminiProvider:
    return GeminiProvider.from_config(settings.llm_config())


def resolve_window(settings: Settings, days: Optional[int], standup: bool) -> ActivityWindow:
    """Pick the standup window or a days-back window."""
    if standup:
        return standup_window()
    return days_back_window(days or settings.days_back)


def parse_selection(text: str, count: int) -> List[int]:
    """Parse a numbered selection such as ``"1,3"``, ``"2-4"`` or ``"all"``.

    Args:
        text: User input, 1-based numbers
        count: Number of selectable items

    Returns:
        Sorted, unique 0-based indexes

    Raises:
        ValueError: If any part is not a number or out of range
    """
    text = text.strip().lower()
    if text in ("all", "a", "*"):
        return list(range(count))

    indexes = set()
    for part in text.replace(" ", ",").split(","):
        if not part:
            continue
        if "-" in part:
            start_text, end_text = part.split("-", 1)
            start, end = int(start_text), int(end_text)
        else:
            start = end = int(part)
        if start < 1 or end > count or start > end:
            raise ValueError(f"Selection out of range: {part}")
        indexes.update(range(start - 1, end))

    if not indexes:
        raise ValueError("Nothing selected")
    return sorted(indexes)


def select_by_name(repositories: Sequence[Repository], names: Sequence[str]) -> List[Repository]:
    """Pick repositories by name or full name, in listing order."""
    wanted = set(names)
    return [repo for repo in repositories if repo.name in wanted or repo.full_name in wanted]


def print_choices(repositories: Sequence[Repository]) -> None:
    """Print a numbered list of repositories for interactive selection."""
    for number, repo in enumerate(repositories, start=1):
        console.print(f"  [cyan]{number:>3}.[/cyan] {escape(repo.display_label())} [dim]({escape(repo.owner)})[/dim]")


def repositories_table(repositories: Sequence[Repository], start: int = 0) -> Table:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Repository", style="cyan")
    table.add_column("Language", style="green")
    table.add_column("Updated", style="blue")
    table.add_column("Visibility", style="yellow")

    for offset, repo in enumerate(repositories):
        table.add_row(
            str(start + offset + 1),
            escape(repo.full_name),
            escape(repo.language or "-"),
            repo.updated_at.strftime("%Y-%m-%d %H:%M"),
            "private" if repo.private else "public",
        )
    return table


def commits_table(commits: Sequence[CommitRecord], show_details: bool = False) -> Table:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("SHA", style="cyan", width=10)
    table.add_column("Author", style="green")
    table.add_column("Date", style="blue")
    table.add_column("Message", style="white")
    if show_details:
        table.add_column("Changes", justify="right", style="yellow")
        table.add_column("Files", style="dim")

    for commit in commits:
        row = [
            commit.short_sha,
            escape(commit.author[:20]),
            commit.date.strftime("%Y-%m-%d %H:%M"),
            escape(commit.message_summary[:60]),
        ]
        if show_details:
            row.append(f"+{commit.additions or 0} -{commit.deletions or 0}")
            row.append(escape("\n".join(commit.files or [])))
        table.add_row(*row)
    return table


def fetch_repositories(client: GitHubClient, include_orgs: bool) -> List[Repository]:
    """List repositories behind a spinner. Failure here is fatal."""
    scope = RepositoryScope.ALL if include_orgs else RepositoryScope.OWNED
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task("Fetching repositories...", total=None)
        return client.list_repositories(scope=scope)


async def _summarize(provider: GeminiProvider, commits: Sequence[CommitRecord]) -> str:
    try:
        return await SummaryGenerator(provider).generate_summary(commits)
    finally:
        logger.debug("llm_usage", **provider.get_usage_stats())
        await provider.aclose()


# ============================================================================
# Commands
# ============================================================================


@app.command()
def repos(
    days: Optional[int] = typer.Option(None, "--days", "-d", help="Days to look back (default: DAYS_BACK)"),
    standup: bool = typer.Option(False, "--standup", help="Since yesterday, or since Friday on Mondays"),
    show_all: bool = typer.Option(False, "--all", help="Show every repository, not only recent ones"),
    orgs: bool = typer.Option(True, "--orgs/--no-orgs", help="Include organization repositories"),
    page: int = typer.Option(1, "--page", "-p", help="Page of results to show (PER_PAGE rows each)"),
    check_commits: bool = typer.Option(False, "--check-commits", help="Only show repositories with commits in the window"),
) -> None:
    """List recently updated repositories."""
    try:
        settings = load_settings()
        settings.validate_for_run()
        window = resolve_window(settings, days, standup)

        with build_github_client(settings) as client:
            repositories = fetch_repositories(client, orgs and settings.include_orgs)
            if check_commits:
                repositories = CommitAggregator(client).active_repositories(repositories, window.cutoff)
            elif not show_all:
                repositories = filter_by_update_time(repositories, window.cutoff)

        if not repositories:
            console.print(f"[yellow]No repositories updated {window.label}.[/yellow]")
            return

        per_page = settings.per_page
        total_pages = (len(repositories) + per_page - 1) // per_page
        page = min(max(page, 1), total_pages)
        start = (page - 1) * per_page

        title = "All repositories" if show_all else f"Repositories updated {window.label}"
        console.print(f"[bold green]{title}:[/bold green] {len(repositories)}")
        console.print(repositories_table(repositories[start : start + per_page], start=start))
        if total_pages > 1:
            console.print(f"[dim]Page {page}/{total_pages} (use --page to navigate)[/dim]")

    except (ConfigurationError, GitHubAPIError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def commits(
    repo_name: str = typer.Argument(..., help="Repository name or owner/name"),
    days: Optional[int] = typer.Option(None, "--days", "-d", help="Days to look back (default: DAYS_BACK)"),
    standup: bool = typer.Option(False, "--standup", help="Since yesterday, or since Friday on Mondays"),
    details: bool = typer.Option(False, "--details", help="Fetch changed files and line counts"),
    orgs: bool = typer.Option(True, "--orgs/--no-orgs", help="Include organization repositories"),
) -> None:
    """List commits across all branches of one repository."""
    try:
        settings = load_settings()
        settings.validate_for_run()
        window = resolve_window(settings, days, standup)

        with build_github_client(settings) as client:
            repositories = fetch_repositories(client, orgs and settings.include_orgs)
            matches = select_by_name(repositories, [repo_name])
            if not matches:
                console.print(f"[bold red]Error:[/bold red] Repository not found: {escape(repo_name)}")
                raise typer.Exit(1)

            repository = matches[0]
            aggregator = CommitAggregator(client)
            found = aggregator.commits_since(repository, window.cutoff)
            if details:
                found = aggregator.with_details(repository, found)

        if not found:
            console.print(f"[yellow]No commits in {escape(repository.full_name)} {window.label}.[/yellow]")
            return

        console.print(f"[bold green]Commits in {escape(repository.full_name)} {window.label}:[/bold green] {len(found)}")
        console.print(commits_table(found, show_details=details))

    except (ConfigurationError, GitHubAPIError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def summary(
    days: Optional[int] = typer.Option(None, "--days", "-d", help="Days to look back (default: DAYS_BACK)"),
    standup: bool = typer.Option(False, "--standup", help="Since yesterday, or since Friday on Mondays"),
    select: bool = typer.Option(False, "--select", "-s", help="Choose repositories interactively"),
    repo: Optional[List[str]] = typer.Option(None, "--repo", "-r", help="Only summarize this repository (repeatable)"),
    orgs: bool = typer.Option(True, "--orgs/--no-orgs", help="Include organization repositories"),
) -> None:
    """Generate a meeting-ready summary of recent commits."""
    try:
        settings = load_settings()
        settings.validate_for_run(require_llm=True)
        window = resolve_window(settings, days, standup)

        with build_github_client(settings) as client:
            repositories = fetch_repositories(client, orgs and settings.include_orgs)
            aggregator = CommitAggregator(client)

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
                transient=True,
            ) as progress:
                progress.add_task("Checking repositories for recent commits...", total=None)
                active = aggregator.active_repositories(repositories, window.cutoff)

            if repo:
                active = select_by_name(active, repo)

            if not active:
                console.print(f"[yellow]No repositories with commits {window.label}.[/yellow]")
                return

            if select:
                print_choices(active)
                choice = Prompt.ask("Select repositories (e.g. 1,3 or 2-4, 'all')", default="all")
                active = [active[i] for i in parse_selection(choice, len(active))]

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
                transient=True,
            ) as progress:
                progress.add_task(f"Collecting commits from {len(active)} repositories...", total=None)
                combined = aggregator.commits_for_repositories(active, window.cutoff)

        console.print(f"[bold blue]Window:[/bold blue] {window.label}")
        console.print(f"[bold blue]Commits:[/bold blue] {len(combined)} across {len(active)} repositories\n")

        provider = build_llm_provider(settings)
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task("Generating summary...", total=None)
            text = asyncio.run(_summarize(provider, combined))

        console.print(Panel(Markdown(text), title="Summary", border_style="green"))

    except (ConfigurationError, GitHubAPIError, LLMError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
