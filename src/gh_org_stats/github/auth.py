"""GitHub authentication.

Only a static token is supported; it is sent as a bearer credential on every
request.
"""

import logging

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Raised when the access token is missing or unusable."""


class GitHubAuth:
    """Holds the access token and renders the Authorization header."""

    def __init__(self, token: str) -> None:
        """Initialize GitHub authentication.

        Args:
            token: GitHub access token.

        Raises:
            AuthenticationError: If the token is empty or contains whitespace.
        """
        token = (token or "").strip()
        if not token:
            raise AuthenticationError(
                "GitHub token not found. Set the GITHUB_ACCESS_TOKEN environment variable."
            )
        if any(ch.isspace() for ch in token):
            raise AuthenticationError("Invalid token format: token must not contain whitespace")

        self._token = token

    @property
    def token(self) -> str:
        """The raw access token."""
        return self._token

    def get_authorization_header(self) -> dict[str, str]:
        """Get the Authorization header for API requests.

        Returns:
            Dictionary with the bearer Authorization header.
        """
        return {"Authorization": f"Bearer {self._token}"}
