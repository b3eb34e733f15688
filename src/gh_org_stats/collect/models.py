"""Pull request and per-repository statistics records."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from gh_org_stats.config import parse_timestamp

TSV_HEADER = ("repo", "#pulls", "#commits", "#additions", "#deletions")


@dataclass
class PullRequest:
    """A pull request as seen by the statistics collector.

    ``additions``, ``deletions`` and ``commits`` stay at zero until the
    detail endpoint has been read; the list endpoint omits them.
    """

    number: int
    created_at: datetime
    labels: frozenset[str] = field(default_factory=frozenset)
    additions: int = 0
    deletions: int = 0
    commits: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "PullRequest":
        """Build from a list or detail endpoint payload.

        Args:
            data: Pull request dict from the GitHub API.

        Returns:
            PullRequest instance.
        """
        return cls(
            number=int(data["number"]),
            created_at=parse_timestamp(data["created_at"]),
            labels=frozenset(label["name"] for label in data.get("labels") or []),
            additions=int(data.get("additions") or 0),
            deletions=int(data.get("deletions") or 0),
            commits=int(data.get("commits") or 0),
        )

    def with_detail(self, detail: dict[str, Any]) -> "PullRequest":
        """Return a copy carrying the size statistics from a detail payload."""
        return PullRequest(
            number=self.number,
            created_at=self.created_at,
            labels=self.labels,
            additions=int(detail.get("additions") or 0),
            deletions=int(detail.get("deletions") or 0),
            commits=int(detail.get("commits") or 0),
        )


@dataclass(frozen=True)
class RepoStatistics:
    """Aggregated pull request statistics for one repository."""

    repo: str
    pull_count: int
    commit_total: int
    addition_total: int
    deletion_total: int

    @classmethod
    def from_pulls(cls, repo: str, pulls: list[PullRequest]) -> "RepoStatistics":
        """Sum detail-populated pull requests into repository totals."""
        return cls(
            repo=repo,
            pull_count=len(pulls),
            commit_total=sum(p.commits for p in pulls),
            addition_total=sum(p.additions for p in pulls),
            deletion_total=sum(p.deletions for p in pulls),
        )

    def to_row(self) -> str:
        """Render as a tab-separated output log row (no newline)."""
        return "\t".join(
            str(v)
            for v in (
                self.repo,
                self.pull_count,
                self.commit_total,
                self.addition_total,
                self.deletion_total,
            )
        )
