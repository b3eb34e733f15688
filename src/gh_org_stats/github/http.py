"""GitHub HTTP client.

Async HTTP client for the GitHub REST API. Requests are not retried: any
non-2xx status or transport failure raises GitHubHTTPError carrying the
upstream error body.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from gh_org_stats import __version__
from gh_org_stats.github.auth import GitHubAuth

logger = logging.getLogger(__name__)


class RateLimitInfo(BaseModel):
    """Quota headers attached to a GitHub API response."""

    limit: int
    remaining: int
    reset: datetime

    @classmethod
    def from_headers(cls, headers: httpx.Headers) -> Optional["RateLimitInfo"]:
        """Extract rate limit info from response headers.

        Args:
            headers: HTTP response headers.

        Returns:
            RateLimitInfo if headers present, None otherwise.
        """
        if "x-ratelimit-limit" not in headers:
            return None

        return cls(
            limit=int(headers.get("x-ratelimit-limit", "0")),
            remaining=int(headers.get("x-ratelimit-remaining", "0")),
            reset=datetime.fromtimestamp(int(headers.get("x-ratelimit-reset", "0")), tz=UTC),
        )


@dataclass
class GitHubResponse:
    """Successful GitHub API response."""

    status_code: int
    data: Any
    url: str = ""


class GitHubHTTPError(Exception):
    """Raised when a GitHub request fails.

    Attributes:
        status_code: HTTP status, or None for transport failures.
        url: Requested URL or path.
        payload: Decoded upstream error body, if any.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str = "",
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url
        self.payload = payload


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class GitHubClient:
    """Async HTTP client for the GitHub REST API.

    Features:
    - Bearer authentication on every request
    - Warning when the quota headers report exhaustion
    - Typed errors with the upstream error payload attached
    """

    BASE_URL = "https://api.github.com"
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        auth: GitHubAuth,
        timeout: float | None = DEFAULT_TIMEOUT,
        base_url: str = BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize GitHub HTTP client.

        Args:
            auth: GitHubAuth instance.
            timeout: Request timeout in seconds. None disables the timeout.
            base_url: Base URL for GitHub API.
            transport: Optional httpx transport, used by tests.
        """
        self._auth = auth
        self._timeout = timeout
        self._base_url = base_url.rstrip("/")
        self._transport = transport

        self._client: httpx.AsyncClient | None = None

    def _get_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": f"gh-org-stats/{__version__}",
        }
        headers.update(self._auth.get_authorization_header())
        return headers

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers=self._get_headers(),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> GitHubResponse:
        """Make one HTTP request to the GitHub API.

        Args:
            method: HTTP method (GET, POST, etc.).
            path: API path (e.g., "/orgs/acme/repos").
            **kwargs: Additional arguments passed to httpx (params, json, etc.).

        Returns:
            GitHubResponse with parsed data and metadata.

        Raises:
            GitHubHTTPError: On transport failure, timeout or non-2xx status.
        """
        client = await self._ensure_client()

        logger.debug("%s %s %s", method, path, kwargs.get("params") or "")

        try:
            response = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("Timeout for %s %s", method, path)
            raise GitHubHTTPError(f"Request timeout: {method} {path}", url=path) from e
        except httpx.HTTPError as e:
            logger.warning("Network error for %s %s: %s", method, path, e)
            raise GitHubHTTPError(f"Network error: {e}", url=path) from e

        rate_limit = RateLimitInfo.from_headers(response.headers)
        if rate_limit is not None and rate_limit.remaining == 0:
            logger.warning(
                "Rate limit reached. Limit: %d, Reset: %s",
                rate_limit.limit,
                rate_limit.reset.isoformat(),
            )

        data = _decode_body(response)

        if not response.is_success:
            logger.error("Request failed: %s %s - status %d", method, path, response.status_code)
            raise GitHubHTTPError(
                f"Request failed with status code {response.status_code}: {method} {path}",
                status_code=response.status_code,
                url=str(response.url),
                payload=data,
            )

        return GitHubResponse(
            status_code=response.status_code,
            data=data,
            url=str(response.url),
        )

    async def get(self, path: str, **kwargs: Any) -> GitHubResponse:
        """Make a GET request.

        Args:
            path: API path.
            **kwargs: Additional arguments (params, etc.).

        Returns:
            GitHubResponse with parsed data.
        """
        return await self.request("GET", path, **kwargs)

    async def close(self) -> None:
        """Close the HTTP client and cleanup resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GitHubClient":
        """Async context manager entry."""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
