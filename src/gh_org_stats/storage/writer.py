"""Tab-separated statistics log writer.

The log is append-only: a header row, then one row per completed repository,
each flushed to disk as soon as it is written.
"""

import os
from pathlib import Path
from typing import Any

from gh_org_stats.collect.models import TSV_HEADER, RepoStatistics

HEADER_LINE = "\t".join(TSV_HEADER)


class StatisticsWriter:
    """Synchronous appender for the statistics log.

    Example:
        with StatisticsWriter(Path("out/stats.txt")) as writer:
            writer.write(stats)
    """

    def __init__(self, path: Path) -> None:
        """Initialize the writer.

        Args:
            path: Path to the tab-separated log file.
        """
        self.path = path
        self._file: Any = None
        self._row_count = 0

    @property
    def row_count(self) -> int:
        """Rows written through this writer."""
        return self._row_count

    def __enter__(self) -> "StatisticsWriter":
        """Enter context manager."""
        self.open()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit context manager."""
        self.close()

    def open(self) -> None:
        """Open the log for appending, writing the header to a new file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        size = self.path.stat().st_size if self.path.exists() else 0
        self._file = self.path.open("a", encoding="utf-8")
        if size == 0:
            self._file.write(HEADER_LINE + "\n")
            self._file.flush()
        elif not self._ends_with_newline():
            # Keep the first new row off an unterminated last line
            self._file.write("\n")
            self._file.flush()

    def _ends_with_newline(self) -> bool:
        with self.path.open("rb") as f:
            f.seek(-1, os.SEEK_END)
            return f.read(1) == b"\n"

    def close(self) -> None:
        """Close the log file."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def write(self, stats: RepoStatistics) -> None:
        """Append one repository row and flush it.

        Args:
            stats: Completed statistics for a repository.

        Raises:
            RuntimeError: If the writer is not open.
        """
        if self._file is None:
            raise RuntimeError("StatisticsWriter is not open")

        self._file.write(stats.to_row() + "\n")
        self._file.flush()
        self._row_count += 1

