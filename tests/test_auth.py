"""Tests for GitHub authentication module."""

import pytest

from gh_org_stats.github.auth import AuthenticationError, GitHubAuth


class TestGitHubAuth:
    """Tests for GitHubAuth token handling."""

    def test_accepts_prefixed_token(self) -> None:
        """Test initialization with a ghp_ token."""
        token = "ghp_" + "a" * 36
        auth = GitHubAuth(token)
        assert auth.token == token

    def test_accepts_classic_token(self) -> None:
        """Test initialization with a 40 hex char classic token."""
        token = "abc123def456abc789def012abc345def6789abc"
        assert GitHubAuth(token).token == token

    def test_strips_surrounding_whitespace(self) -> None:
        """Test a trailing newline from a .env file is dropped."""
        assert GitHubAuth("ghp_abc123\n").token == "ghp_abc123"

    @pytest.mark.parametrize("token", ["", "   "])
    def test_rejects_empty_token(self, token: str) -> None:
        """Test that an empty token is rejected."""
        with pytest.raises(AuthenticationError, match="not found"):
            GitHubAuth(token)

    def test_rejects_embedded_whitespace(self) -> None:
        """Test that a token with inner whitespace is rejected."""
        with pytest.raises(AuthenticationError, match="whitespace"):
            GitHubAuth("ghp_abc def")

    def test_authorization_header_is_bearer(self) -> None:
        """Test the header uses the bearer scheme."""
        auth = GitHubAuth("ghp_" + "z" * 36)
        assert auth.get_authorization_header() == {"Authorization": "Bearer ghp_" + "z" * 36}
