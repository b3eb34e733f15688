"""Collection run controller.

Drives one run through its states::

    NOT_STARTED -> RATE_CHECKED -> LISTING -> PROCESSING_REPO* -> DONE

Any failure while listing or processing moves the run to ABORTED. The failed
repository is not retried and later repositories are left for the next run.
Repositories are processed strictly one after another, so rows land in the
log in processing order.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from gh_org_stats.collect.filters import FilterCriteria
from gh_org_stats.collect.models import RepoStatistics
from gh_org_stats.collect.pulls import collect_repo_statistics
from gh_org_stats.config import Config
from gh_org_stats.github.auth import GitHubAuth
from gh_org_stats.github.http import GitHubClient, GitHubHTTPError
from gh_org_stats.github.ratelimit import AdmissionGate, QuotaSnapshot
from gh_org_stats.github.rest import RestClient
from gh_org_stats.storage.checkpoint import ResumeTracker
from gh_org_stats.storage.writer import StatisticsWriter

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    """States of a collection run."""

    NOT_STARTED = "not_started"
    RATE_CHECKED = "rate_checked"
    LISTING = "listing"
    PROCESSING_REPO = "processing_repo"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class RunSummary:
    """Outcome of a collection run."""

    state: RunState = RunState.NOT_STARTED
    quota: QuotaSnapshot | None = None
    repos_found: int = 0
    repos_remaining: int = 0
    rows_written: int = 0
    failed_repo: str | None = None
    error: str | None = None
    error_payload: Any = None

    @property
    def succeeded(self) -> bool:
        """Whether every remaining repository was processed."""
        return self.state == RunState.DONE


def _upstream_payload(error: BaseException) -> Any:
    """Find the upstream error body attached to an error or its causes."""
    current: BaseException | None = error
    while current is not None:
        if isinstance(current, GitHubHTTPError) and current.payload is not None:
            return current.payload
        current = current.__cause__
    return None


async def collect_statistics(
    rest_client: RestClient,
    config: Config,
    on_row: Callable[[RepoStatistics], None] | None = None,
) -> RunSummary:
    """Run the collection state machine with an existing REST client.

    Args:
        rest_client: RestClient for GitHub API access.
        config: Application configuration.
        on_row: Called after each row has been written.

    Returns:
        RunSummary describing how far the run got.
    """
    summary = RunSummary()
    org = config.github.organization
    criteria = FilterCriteria.from_config(config.filters)
    current_repo: str | None = None

    try:
        summary.quota = await rest_client.get_rate_limit()
        summary.state = RunState.RATE_CHECKED
        logger.info(
            "Rate limit: %d/%d remaining, resets at %s",
            summary.quota.remaining,
            summary.quota.limit,
            summary.quota.reset_at.isoformat(),
        )
        if summary.quota.is_exhausted:
            logger.warning(
                "No API requests left until %s; requests will fail before then",
                summary.quota.reset_at.isoformat(),
            )

        summary.state = RunState.LISTING
        all_repos = await rest_client.list_org_repo_names(org)
        work = ResumeTracker(config.output.path).remaining(all_repos)
        summary.repos_found = len(all_repos)
        summary.repos_remaining = len(work)
        logger.info("Found %d repos, %d left", len(all_repos), len(work))

        with StatisticsWriter(config.output.path) as writer:
            for idx, repo in enumerate(work, 1):
                summary.state = RunState.PROCESSING_REPO
                current_repo = repo
                logger.info("Processing repo %d/%d: %s", idx, len(work), repo)

                stats = await collect_repo_statistics(rest_client, org, repo, criteria)
                writer.write(stats)
                summary.rows_written += 1
                if on_row:
                    on_row(stats)

        summary.state = RunState.DONE
        logger.info("Collection complete: %d rows written", summary.rows_written)

    except Exception as e:
        summary.state = RunState.ABORTED
        summary.failed_repo = current_repo
        summary.error = str(e)
        summary.error_payload = _upstream_payload(e)
        logger.error("Collection aborted%s: %s", f" at {current_repo}" if current_repo else "", e)
        if summary.error_payload is not None:
            logger.error("Upstream error payload: %s", summary.error_payload)

    return summary


async def run_collection(
    config: Config,
    on_row: Callable[[RepoStatistics], None] | None = None,
) -> RunSummary:
    """Build the clients from configuration and run one collection.

    The admission gate created here is the single bound on in-flight
    requests for the whole run.

    Args:
        config: Application configuration.
        on_row: Called after each row has been written.

    Returns:
        RunSummary describing how far the run got.
    """
    gate = AdmissionGate(config.rate_limit.max_in_flight)
    auth = GitHubAuth(config.github.token)

    async with GitHubClient(
        auth=auth,
        timeout=config.http.timeout,
        base_url=config.http.base_url,
    ) as http_client:
        rest_client = RestClient(http_client, gate, page_size=config.rate_limit.page_size)
        return await collect_statistics(rest_client, config, on_row=on_row)
