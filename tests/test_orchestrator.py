"""End-to-end tests for the collection run controller."""

import logging
from pathlib import Path

import httpx
import pytest
import respx
from helpers import BASE_URL, paged, pull_payload, rate_limit_payload

from gh_org_stats.collect.models import RepoStatistics
from gh_org_stats.collect.orchestrator import RunState, run_collection
from gh_org_stats.config import Config
from gh_org_stats.storage.writer import HEADER_LINE


def mock_org(
    router: respx.MockRouter,
    repos: list[str],
    pulls: dict[str, dict[int, tuple[int, int, int]]],
    failing: set[tuple[str, int]] = frozenset(),
) -> dict[str, respx.Route]:
    """Register an organization whose repos hold pulls keyed by number.

    Each pull maps to (additions, deletions, commits). Pairs in ``failing``
    answer their detail request with a 500.
    """
    router.get(f"{BASE_URL}/rate_limit").mock(
        return_value=httpx.Response(200, json=rate_limit_payload())
    )
    router.get(f"{BASE_URL}/orgs/acme/repos").mock(
        side_effect=paged([[{"name": r} for r in repos]])
    )

    routes: dict[str, respx.Route] = {}
    for repo in repos:
        repo_pulls = pulls.get(repo, {})
        routes[repo] = router.get(f"{BASE_URL}/repos/acme/{repo}/pulls").mock(
            side_effect=paged([[pull_payload(n) for n in repo_pulls]])
        )

        def detail(request: httpx.Request, repo: str = repo) -> httpx.Response:
            number = int(request.url.path.rsplit("/", 1)[1])
            if (repo, number) in failing:
                return httpx.Response(500, json={"message": "Server Error"})
            additions, deletions, commits = pulls[repo][number]
            return httpx.Response(
                200,
                json=pull_payload(number, additions=additions, deletions=deletions, commits=commits),
            )

        router.get(url__regex=rf"{BASE_URL}/repos/acme/{repo}/pulls/\d+").mock(side_effect=detail)
    return routes


def log_lines(path: Path) -> list[str]:
    return path.read_text().splitlines()


class TestRunCollection:
    """Tests for run_collection."""

    @pytest.mark.asyncio
    async def test_fresh_run_writes_every_repo(self, config: Config, output_path: Path) -> None:
        """Test a run with no log writes a header and one row per repo in order."""
        pulls = {
            "api": {1: (10, 2, 1), 2: (0, 5, 3), 3: (7, 7, 7)},
            "web": {},
        }
        rows: list[RepoStatistics] = []

        with respx.mock(assert_all_called=False) as router:
            mock_org(router, ["api", "web"], pulls)
            summary = await run_collection(config, on_row=rows.append)

        assert summary.state == RunState.DONE
        assert summary.succeeded is True
        assert summary.repos_found == 2
        assert summary.repos_remaining == 2
        assert summary.rows_written == 2
        assert summary.quota is not None
        assert summary.quota.remaining == 4990
        assert [r.repo for r in rows] == ["api", "web"]
        assert log_lines(output_path) == [HEADER_LINE, "api\t3\t11\t17\t14", "web\t0\t0\t0\t0"]

    @pytest.mark.asyncio
    async def test_skips_repos_already_logged(self, config: Config, output_path: Path) -> None:
        """Test only repositories missing from the log are collected."""
        output_path.parent.mkdir(parents=True)
        output_path.write_text(f"{HEADER_LINE}\nA\t1\t1\t1\t1\n")

        with respx.mock(assert_all_called=False) as router:
            routes = mock_org(router, ["A", "B"], {"A": {1: (1, 1, 1)}, "B": {5: (4, 3, 2)}})
            summary = await run_collection(config)

        assert summary.state == RunState.DONE
        assert summary.repos_remaining == 1
        assert summary.rows_written == 1
        assert not routes["A"].called
        assert log_lines(output_path) == [HEADER_LINE, "A\t1\t1\t1\t1", "B\t1\t2\t4\t3"]

    @pytest.mark.asyncio
    async def test_second_run_is_a_no_op(self, config: Config, output_path: Path) -> None:
        """Test rerunning against an unchanged org leaves the log untouched."""
        pulls = {"api": {1: (1, 2, 3)}, "web": {2: (4, 5, 6)}}

        with respx.mock(assert_all_called=False) as router:
            mock_org(router, ["api", "web"], pulls)
            await run_collection(config)
        first = output_path.read_text()

        with respx.mock(assert_all_called=False) as router:
            routes = mock_org(router, ["api", "web"], pulls)
            summary = await run_collection(config)

        assert summary.state == RunState.DONE
        assert summary.repos_remaining == 0
        assert summary.rows_written == 0
        assert not any(route.called for route in routes.values())
        assert output_path.read_text() == first

    @pytest.mark.asyncio
    async def test_failure_keeps_earlier_rows_and_stops(
        self, config: Config, output_path: Path
    ) -> None:
        """Test a failed detail fetch aborts without a partial row."""
        pulls = {
            "A": {1: (1, 1, 1)},
            "B": {1: (10, 2, 1), 2: (0, 5, 3), 3: (7, 7, 7)},
            "C": {1: (1, 1, 1)},
        }

        with respx.mock(assert_all_called=False) as router:
            routes = mock_org(router, ["A", "B", "C"], pulls, failing={("B", 2)})
            summary = await run_collection(config)

        assert summary.state == RunState.ABORTED
        assert summary.succeeded is False
        assert summary.failed_repo == "B"
        assert summary.rows_written == 1
        assert "B#2" in (summary.error or "")
        assert summary.error_payload == {"message": "Server Error"}
        assert not routes["C"].called
        assert log_lines(output_path) == [HEADER_LINE, "A\t1\t1\t1\t1"]

    @pytest.mark.asyncio
    async def test_failed_repo_is_retried_next_run(
        self, config: Config, output_path: Path
    ) -> None:
        """Test the repository that failed is collected from scratch later."""
        pulls = {"A": {1: (1, 1, 1)}, "B": {1: (2, 2, 2)}}

        with respx.mock(assert_all_called=False) as router:
            mock_org(router, ["A", "B"], pulls, failing={("B", 1)})
            await run_collection(config)

        with respx.mock(assert_all_called=False) as router:
            mock_org(router, ["A", "B"], pulls)
            summary = await run_collection(config)

        assert summary.state == RunState.DONE
        assert log_lines(output_path) == [HEADER_LINE, "A\t1\t1\t1\t1", "B\t1\t2\t2\t2"]

    @pytest.mark.asyncio
    async def test_listing_failure_aborts_before_writing(
        self, config: Config, output_path: Path
    ) -> None:
        """Test a failing repository listing aborts with the upstream payload."""
        with respx.mock(assert_all_called=False) as router:
            router.get(f"{BASE_URL}/rate_limit").mock(
                return_value=httpx.Response(200, json=rate_limit_payload())
            )
            router.get(f"{BASE_URL}/orgs/acme/repos").mock(
                return_value=httpx.Response(404, json={"message": "Not Found"})
            )
            summary = await run_collection(config)

        assert summary.state == RunState.ABORTED
        assert summary.failed_repo is None
        assert summary.error_payload == {"message": "Not Found"}
        assert not output_path.exists()

    @pytest.mark.asyncio
    async def test_rate_limit_failure_aborts(self, config: Config) -> None:
        """Test a failing quota check aborts the run."""
        with respx.mock(assert_all_called=False) as router:
            router.get(f"{BASE_URL}/rate_limit").mock(
                return_value=httpx.Response(401, json={"message": "Bad credentials"})
            )
            summary = await run_collection(config)

        assert summary.state == RunState.ABORTED
        assert summary.quota is None
        assert summary.error_payload == {"message": "Bad credentials"}

    @pytest.mark.asyncio
    async def test_exhausted_quota_is_reported(
        self, config: Config, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test an empty quota logs a warning with the reset time."""
        with respx.mock(assert_all_called=False) as router:
            router.get(f"{BASE_URL}/rate_limit").mock(
                return_value=httpx.Response(
                    200, json=rate_limit_payload(remaining=0, reset=1735689600)
                )
            )
            router.get(f"{BASE_URL}/orgs/acme/repos").mock(side_effect=paged([]))
            with caplog.at_level(logging.WARNING, logger="gh_org_stats.collect.orchestrator"):
                summary = await run_collection(config)

        assert summary.state == RunState.DONE
        assert summary.quota is not None
        assert summary.quota.is_exhausted is True
        assert "No API requests left until 2025-01-01T00:00:00+00:00" in caplog.text
