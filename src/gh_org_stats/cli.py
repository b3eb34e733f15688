"""CLI entry point for gh-org-stats.

Takes no arguments; everything is read from the environment (and a ``.env``
file in the working directory, if present).
"""

import asyncio

import click
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from gh_org_stats.collect.models import RepoStatistics
from gh_org_stats.collect.orchestrator import RunState, run_collection
from gh_org_stats.config import ConfigError, load_config
from gh_org_stats.github.auth import AuthenticationError
from gh_org_stats.logging import setup_logging
from gh_org_stats.storage.writer import HEADER_LINE

console = Console()


@click.command()
def main() -> None:
    """Collect pull request statistics for every repository of an organization.

    \b
    Environment:
        GITHUB_ACCESS_TOKEN         access token (required)
        GITHUB_ORGANIZATION_NAME    organization to scan (required)
        STATISTICS_SINCE_TIMESTAMP  only count PRs created at or after this time
        STATISTICS_LABEL            only count PRs carrying this label
    """
    console.print("Starting...")
    load_dotenv()

    try:
        cfg = load_config()
    except (ConfigError, FileNotFoundError, ValidationError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise SystemExit(1) from e

    setup_logging(verbose=cfg.output.verbose, secrets=[cfg.github.token])

    def print_row(stats: RepoStatistics) -> None:
        console.print(escape(stats.to_row()), highlight=False)

    console.print(f"[bold]Collecting pull request statistics for {cfg.github.organization}[/bold]")
    console.print(HEADER_LINE, highlight=False)

    try:
        summary = asyncio.run(run_collection(cfg, on_row=print_row))
    except AuthenticationError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise SystemExit(1) from e
    except KeyboardInterrupt:
        console.print("\n[yellow]Collection interrupted by user[/yellow]")
    else:
        console.print(
            f"Wrote {summary.rows_written} of {summary.repos_remaining} remaining repos "
            f"({summary.repos_found} in organization)",
            highlight=False,
        )
        if summary.state == RunState.ABORTED:
            console.print(f"[bold red]Error:[/bold red] {escape(summary.error or '')}")
            if summary.error_payload is not None:
                console.print(summary.error_payload)

    console.print(f"See {cfg.output.path} for result.", highlight=False)


if __name__ == "__main__":
    main()
