"""GitHub REST API client with page-number pagination.

Every network call made here holds exactly one admission gate slot for its
duration.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any, cast

from gh_org_stats.github.http import GitHubClient, GitHubHTTPError, GitHubResponse
from gh_org_stats.github.ratelimit import AdmissionGate, QuotaSnapshot

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


class RestClient:
    """GitHub REST API client.

    Wraps GitHubClient to provide:
    - Admission gate bracketing of every request
    - Page-number pagination (``page`` from 1, stop at the first empty page)
    - High-level methods for the endpoints this tool reads
    """

    def __init__(
        self,
        http_client: GitHubClient,
        gate: AdmissionGate,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        """Initialize REST API client.

        Args:
            http_client: GitHubClient instance for HTTP requests.
            gate: Admission gate shared by every request-issuing component.
            page_size: Items requested per page.
        """
        self._http = http_client
        self._gate = gate
        self._page_size = page_size

    @property
    def gate(self) -> AdmissionGate:
        """The admission gate this client requests through."""
        return self._gate

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> GitHubResponse:
        async with self._gate.slot():
            return await self._http.get(path, params=params)

    async def paginate(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> AsyncIterator[Any]:
        """Iterate over every item of a paginated collection.

        Pages are fetched one after another; page N+1 is only requested once
        page N came back non-empty. Each call starts over from page 1.

        Args:
            path: API endpoint path.
            params: Extra query parameters.

        Yields:
            Items in the order the API returns them.

        Raises:
            GitHubHTTPError: If any page fails; iteration stops there.
        """
        page = 1

        while True:
            query = {**(params or {}), "per_page": self._page_size, "page": page}
            response = await self._get(path, query)

            items = response.data
            if items is None:
                items = []
            if not isinstance(items, list):
                raise GitHubHTTPError(
                    f"Expected a list from {path} page {page}, got {type(items).__name__}",
                    status_code=response.status_code,
                    url=response.url,
                    payload=items,
                )

            if not items:
                logger.debug("Pagination of %s ended at empty page %d", path, page)
                return

            for item in items:
                yield item

            page += 1

    async def list_all(self, path: str, params: dict[str, Any] | None = None) -> list[Any]:
        """Collect every item of a paginated collection into a list.

        Args:
            path: API endpoint path.
            params: Extra query parameters.

        Returns:
            All items in upstream order.
        """
        return [item async for item in self.paginate(path, params)]

    async def list_org_repo_names(self, org: str) -> list[str]:
        """List the names of every repository in an organization.

        Args:
            org: Organization name.

        Returns:
            Repository names in upstream order.
        """
        logger.info("Fetching repositories for org: %s", org)
        repos = await self.list_all(f"/orgs/{org}/repos")
        return [repo["name"] for repo in repos]

    async def list_pulls(self, owner: str, repo: str, state: str = "all") -> list[dict[str, Any]]:
        """List pull requests for a repository.

        Args:
            owner: Repository owner.
            repo: Repository name.
            state: PR state: "open", "closed", "all".

        Returns:
            Pull request summaries (without additions/deletions/commits).
        """
        logger.debug("Fetching pull requests for %s/%s (state=%s)", owner, repo, state)
        return await self.list_all(f"/repos/{owner}/{repo}/pulls", {"state": state})

    async def get_pull(self, owner: str, repo: str, number: int) -> dict[str, Any]:
        """Get a single pull request, including its size statistics.

        Args:
            owner: Repository owner.
            repo: Repository name.
            number: Pull request number.

        Returns:
            Pull request detail dict.
        """
        response = await self._get(f"/repos/{owner}/{repo}/pulls/{number}")
        return cast("dict[str, Any]", response.data)

    async def get_rate_limit(self) -> QuotaSnapshot:
        """Get current core quota status.

        Returns:
            QuotaSnapshot with remaining requests and reset time.
        """
        response = await self._get("/rate_limit")
        return QuotaSnapshot.from_response(cast("dict[str, Any]", response.data or {}))
