"""Pull request statistics for a single repository.

Lists a repository's pull requests, keeps the ones the filter chain accepts,
fetches each one's detail concurrently and sums the size fields. The result
is all-or-nothing: one failed detail fetch fails the whole repository.
"""

import asyncio
import logging

from gh_org_stats.collect.filters import FilterChain, FilterCriteria
from gh_org_stats.collect.models import PullRequest, RepoStatistics
from gh_org_stats.github.rest import RestClient

logger = logging.getLogger(__name__)


class PullRequestAggregationError(Exception):
    """Raised when a pull request detail fetch fails during aggregation.

    Attributes:
        repo: Repository whose statistics were being collected.
        pull_number: Pull request whose detail fetch failed.
    """

    def __init__(self, repo: str, pull_number: int, cause: BaseException) -> None:
        self.repo = repo
        self.pull_number = pull_number
        super().__init__(f"Failed to fetch pull request {repo}#{pull_number}: {cause}")


async def _fetch_detail(
    rest_client: RestClient,
    org: str,
    repo: str,
    pull: PullRequest,
) -> PullRequest:
    try:
        detail = await rest_client.get_pull(org, repo, pull.number)
    except Exception as e:
        raise PullRequestAggregationError(repo, pull.number, e) from e
    return pull.with_detail(detail)


async def fetch_pull_details(
    rest_client: RestClient,
    org: str,
    repo: str,
    pulls: list[PullRequest],
) -> list[PullRequest]:
    """Fetch detail for every pull request concurrently.

    Concurrency is bounded only by the client's admission gate. If any fetch
    fails, the outstanding ones are cancelled and the first failure is raised.

    Args:
        rest_client: RestClient for GitHub API access.
        org: Organization (repository owner).
        repo: Repository name.
        pulls: Pull requests to complete.

    Returns:
        Pull requests with additions, deletions and commits populated, in
        input order.

    Raises:
        PullRequestAggregationError: If any detail fetch fails.
    """
    tasks = [asyncio.create_task(_fetch_detail(rest_client, org, repo, pull)) for pull in pulls]
    try:
        return await asyncio.gather(*tasks)
    except Exception:
        for task in tasks:
            task.cancel()
        # Let cancelled fetches unwind and hand back their gate slots
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def collect_repo_statistics(
    rest_client: RestClient,
    org: str,
    repo: str,
    criteria: FilterCriteria,
) -> RepoStatistics:
    """Collect aggregated pull request statistics for one repository.

    Args:
        rest_client: RestClient for GitHub API access.
        org: Organization (repository owner).
        repo: Repository name.
        criteria: Which pull requests to count.

    Returns:
        RepoStatistics for the repository.

    Raises:
        GitHubHTTPError: If listing the pull requests fails.
        PullRequestAggregationError: If any detail fetch fails.
    """
    chain = FilterChain(criteria)

    listed = [PullRequest.from_api(item) for item in await rest_client.list_pulls(org, repo)]
    matching = [pull for pull in listed if chain.matches(pull)]

    logger.debug(
        "%s: %d pull requests listed, %d match (rejected: %s)",
        repo,
        len(listed),
        len(matching),
        chain.get_stats() or "none",
    )

    detailed = await fetch_pull_details(rest_client, org, repo, matching)
    return RepoStatistics.from_pulls(repo, detailed)
