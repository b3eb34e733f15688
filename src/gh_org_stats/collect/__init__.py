"""Pull request filtering and per-repository statistics collection."""

from gh_org_stats.collect.filters import FilterChain, FilterCriteria, FilterResult
from gh_org_stats.collect.models import PullRequest, RepoStatistics
from gh_org_stats.collect.pulls import (
    PullRequestAggregationError,
    collect_repo_statistics,
    fetch_pull_details,
)

__all__ = [
    "FilterChain",
    "FilterCriteria",
    "FilterResult",
    "PullRequest",
    "PullRequestAggregationError",
    "RepoStatistics",
    "collect_repo_statistics",
    "fetch_pull_details",
]
