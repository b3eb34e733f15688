"""Pull request filters.

A pull request is counted when every enabled filter passes it. An unset
criterion never rejects anything.
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime

from gh_org_stats.collect.models import PullRequest
from gh_org_stats.config import FilterConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterCriteria:
    """Which pull requests to count.

    Attributes:
        since: Inclusive lower bound on creation time.
        label: Label name a pull request must carry.
    """

    since: datetime | None = None
    label: str | None = None

    @classmethod
    def from_config(cls, config: FilterConfig) -> "FilterCriteria":
        """Build criteria from the filters configuration section."""
        return cls(since=config.since, label=config.label)


@dataclass
class FilterResult:
    """Result of a filter evaluation.

    Attributes:
        passed: Whether the pull request passed the filter.
        reason: Optional reason for rejection (None if passed).
        filter_name: Name of the filter that produced this result.
    """

    passed: bool
    reason: str | None = None
    filter_name: str = ""


class BaseFilter(ABC):
    """Abstract base class for pull request filters."""

    name: str = "base"

    @abstractmethod
    def is_enabled(self, criteria: FilterCriteria) -> bool:
        """Check if this filter applies under the given criteria."""

    @abstractmethod
    def evaluate(self, pull: PullRequest, criteria: FilterCriteria) -> FilterResult:
        """Evaluate a pull request against this filter."""


class SinceFilter(BaseFilter):
    """Reject pull requests created before ``criteria.since``."""

    name = "since"

    def is_enabled(self, criteria: FilterCriteria) -> bool:
        return criteria.since is not None

    def evaluate(self, pull: PullRequest, criteria: FilterCriteria) -> FilterResult:
        if criteria.since is not None and pull.created_at < criteria.since:
            return FilterResult(
                passed=False,
                reason=f"created {pull.created_at.isoformat()} before {criteria.since.isoformat()}",
                filter_name=self.name,
            )
        return FilterResult(passed=True, filter_name=self.name)


class LabelFilter(BaseFilter):
    """Reject pull requests that lack ``criteria.label``."""

    name = "label"

    def is_enabled(self, criteria: FilterCriteria) -> bool:
        return criteria.label is not None

    def evaluate(self, pull: PullRequest, criteria: FilterCriteria) -> FilterResult:
        if criteria.label not in pull.labels:
            return FilterResult(
                passed=False,
                reason=f"missing label {criteria.label!r}",
                filter_name=self.name,
            )
        return FilterResult(passed=True, filter_name=self.name)


class FilterChain:
    """Applies every enabled filter and tracks rejection counts."""

    def __init__(self, criteria: FilterCriteria) -> None:
        """Initialize filter chain.

        Args:
            criteria: Filter criteria for this run.
        """
        self.criteria = criteria
        self.stats: dict[str, int] = defaultdict(int)
        self.filters: list[BaseFilter] = [SinceFilter(), LabelFilter()]

    def evaluate(self, pull: PullRequest) -> FilterResult:
        """Evaluate all enabled filters, stopping at the first rejection.

        Args:
            pull: Pull request to check.

        Returns:
            FilterResult with pass/fail and rejection reason.
        """
        for filter_obj in self.filters:
            if not filter_obj.is_enabled(self.criteria):
                continue

            result = filter_obj.evaluate(pull, self.criteria)
            if not result.passed:
                self.stats[filter_obj.name] += 1
                return result

        return FilterResult(passed=True, filter_name="none")

    def matches(self, pull: PullRequest) -> bool:
        """Whether the pull request should be counted."""
        return self.evaluate(pull).passed

    def get_stats(self) -> dict[str, int]:
        """Get rejection counts keyed by filter name."""
        return dict(self.stats)
