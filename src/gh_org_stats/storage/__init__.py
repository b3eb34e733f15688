"""Statistics log storage and resume support."""

from gh_org_stats.storage.checkpoint import ResumeTracker
from gh_org_stats.storage.writer import HEADER_LINE, StatisticsWriter

__all__ = [
    "HEADER_LINE",
    "ResumeTracker",
    "StatisticsWriter",
]
