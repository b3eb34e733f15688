"""Tests for the statistics log writer."""

from pathlib import Path

import pytest

from gh_org_stats.collect.models import RepoStatistics
from gh_org_stats.storage.checkpoint import ResumeTracker
from gh_org_stats.storage.writer import HEADER_LINE, StatisticsWriter


class TestStatisticsWriter:
    """Tests for StatisticsWriter."""

    def test_header_line(self) -> None:
        """Test the header columns."""
        assert HEADER_LINE == "repo\t#pulls\t#commits\t#additions\t#deletions"

    def test_new_file_gets_header(self, tmp_path: Path) -> None:
        """Test opening a new log creates parent dirs and writes the header."""
        path = tmp_path / "nested" / "stats.txt"

        with StatisticsWriter(path) as writer:
            writer.write(RepoStatistics("api", 3, 11, 17, 14))

        assert path.read_text() == f"{HEADER_LINE}\napi\t3\t11\t17\t14\n"

    def test_appends_without_second_header(self, tmp_path: Path) -> None:
        """Test reopening an existing log only appends rows."""
        path = tmp_path / "stats.txt"

        with StatisticsWriter(path) as writer:
            writer.write(RepoStatistics("a", 1, 1, 1, 1))
        with StatisticsWriter(path) as writer:
            writer.write(RepoStatistics("b", 2, 2, 2, 2))

        assert path.read_text().splitlines() == [HEADER_LINE, "a\t1\t1\t1\t1", "b\t2\t2\t2\t2"]

    def test_empty_existing_file_gets_header(self, tmp_path: Path) -> None:
        """Test a zero-byte log is treated as new."""
        path = tmp_path / "stats.txt"
        path.touch()

        with StatisticsWriter(path):
            pass

        assert path.read_text() == f"{HEADER_LINE}\n"

    def test_rows_are_flushed_immediately(self, tmp_path: Path) -> None:
        """Test each row is on disk before the writer closes."""
        path = tmp_path / "stats.txt"

        with StatisticsWriter(path) as writer:
            writer.write(RepoStatistics("a", 0, 0, 0, 0))
            assert path.read_text().splitlines()[-1] == "a\t0\t0\t0\t0"
            assert writer.row_count == 1

    def test_write_requires_open(self, tmp_path: Path) -> None:
        """Test writing to a closed writer raises."""
        writer = StatisticsWriter(tmp_path / "stats.txt")

        with pytest.raises(RuntimeError, match="not open"):
            writer.write(RepoStatistics("a", 0, 0, 0, 0))

    def test_unterminated_last_line_is_closed_first(self, tmp_path: Path) -> None:
        """Test a log missing its final newline gets one before the next row."""
        path = tmp_path / "stats.txt"
        path.write_bytes(f"{HEADER_LINE}\nA\t1\t1\t1\t1".encode())

        with StatisticsWriter(path) as writer:
            writer.write(RepoStatistics("B", 1, 1, 1, 1))

        assert path.read_text().splitlines() == [HEADER_LINE, "A\t1\t1\t1\t1", "B\t1\t1\t1\t1"]
        assert ResumeTracker(path).already_done() == {"A", "B"}

    def test_terminated_log_gets_no_blank_line(self, tmp_path: Path) -> None:
        """Test a properly terminated log is appended to directly."""
        path = tmp_path / "stats.txt"
        path.write_bytes(f"{HEADER_LINE}\nA\t1\t1\t1\t1\n".encode())

        with StatisticsWriter(path) as writer:
            writer.write(RepoStatistics("B", 1, 1, 1, 1))

        assert path.read_text() == f"{HEADER_LINE}\nA\t1\t1\t1\t1\nB\t1\t1\t1\t1\n"
