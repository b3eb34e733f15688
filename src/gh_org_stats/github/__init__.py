"""GitHub API clients and utilities."""

from gh_org_stats.github.auth import AuthenticationError, GitHubAuth
from gh_org_stats.github.http import (
    GitHubClient,
    GitHubHTTPError,
    GitHubResponse,
    RateLimitInfo,
)
from gh_org_stats.github.ratelimit import AdmissionGate, QuotaSnapshot
from gh_org_stats.github.rest import RestClient

__all__ = [
    # Admission gate
    "AdmissionGate",
    # Auth
    "AuthenticationError",
    "GitHubAuth",
    # HTTP Client
    "GitHubClient",
    "GitHubHTTPError",
    "GitHubResponse",
    "QuotaSnapshot",
    "RateLimitInfo",
    # REST API Client
    "RestClient",
]
