"""Resume support based on the statistics log.

The first column of the log is the record of which repositories are done.
A repository listed there is skipped on the next run; anything else is
collected from scratch.
"""

import logging
from pathlib import Path

from gh_org_stats.storage.writer import HEADER_LINE

logger = logging.getLogger(__name__)


class ResumeTracker:
    """Reads the set of completed repositories from the statistics log."""

    def __init__(self, path: Path) -> None:
        """Initialize the tracker.

        Args:
            path: Path to the tab-separated statistics log.
        """
        self.path = path

    def already_done(self) -> set[str]:
        """Names of repositories that already have a row in the log.

        Returns:
            Set of repository names; empty if the log doesn't exist.
        """
        if not self.path.exists():
            return set()

        done: set[str] = set()
        with self.path.open(encoding="utf-8") as f:
            for line in f:
                row = line.rstrip("\r\n")
                if row == HEADER_LINE:
                    continue
                name = row.split("\t", 1)[0]
                if name:
                    done.add(name)

        logger.debug("Found %d completed repositories in %s", len(done), self.path)
        return done

    def remaining(self, repos: list[str]) -> list[str]:
        """Filter out completed repositories, keeping upstream order.

        Args:
            repos: All repository names.

        Returns:
            Repositories still to be processed.
        """
        done = self.already_done()
        return [repo for repo in repos if repo not in done]
