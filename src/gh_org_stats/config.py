"""Configuration loading and validation.

Settings come from environment variables, optionally layered over a YAML file
named by ``GH_ORG_STATS_CONFIG``.
"""

import os
from collections.abc import Mapping
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

CONFIG_PATH_ENV = "GH_ORG_STATS_CONFIG"

# Environment variable -> (section, field)
ENV_FIELDS: dict[str, tuple[str, str]] = {
    "GITHUB_ACCESS_TOKEN": ("github", "token"),
    "GITHUB_ORGANIZATION_NAME": ("github", "organization"),
    "GH_ORG_STATS_BASE_URL": ("http", "base_url"),
    "GH_ORG_STATS_TIMEOUT": ("http", "timeout"),
    "STATISTICS_SINCE_TIMESTAMP": ("filters", "since"),
    "STATISTICS_LABEL": ("filters", "label"),
    "GH_ORG_STATS_MAX_IN_FLIGHT": ("rate_limit", "max_in_flight"),
    "GH_ORG_STATS_PAGE_SIZE": ("rate_limit", "page_size"),
    "GH_ORG_STATS_OUTPUT": ("output", "path"),
    "GH_ORG_STATS_VERBOSE": ("output", "verbose"),
}


class ConfigError(Exception):
    """Raised when required configuration is missing."""


def parse_timestamp(value: str | datetime | date) -> datetime:
    """Parse an ISO-8601 timestamp into a timezone-aware datetime.

    Naive values are taken to be UTC; a bare date means midnight UTC.

    Args:
        value: ISO-8601 string, date or datetime.

    Returns:
        Timezone-aware datetime.

    Raises:
        ValueError: If the string is not ISO-8601.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        parsed = datetime.fromisoformat(value.strip())

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class GitHubConfig(BaseModel):
    """GitHub target and credentials."""

    token: str = Field(min_length=1, repr=False)
    organization: str = Field(min_length=1)


class HTTPConfig(BaseModel):
    """HTTP transport settings."""

    base_url: str = "https://api.github.com"
    timeout: float | None = Field(default=30.0, gt=0, description="Seconds; None waits forever")


class FilterConfig(BaseModel):
    """Pull request filter settings."""

    since: datetime | None = None
    label: str | None = None

    @field_validator("since", mode="before")
    @classmethod
    def validate_since(cls, v: Any) -> datetime | None:
        """Accept ISO-8601 strings and normalize to aware datetimes."""
        if v is None or v == "":
            return None
        return parse_timestamp(v)

    @field_validator("label", mode="before")
    @classmethod
    def validate_label(cls, v: Any) -> str | None:
        """Treat an empty label as unset."""
        if v is None or v == "":
            return None
        return str(v)


class RateLimitConfig(BaseModel):
    """Admission gate and paging settings."""

    max_in_flight: int = Field(default=100, ge=1, description="Maximum outstanding requests")
    page_size: int = Field(default=100, ge=1, le=100)


class OutputConfig(BaseModel):
    """Output log settings."""

    path: Path = Field(default=Path("./out/github_organization_statistics.txt"))
    verbose: bool = False


class Config(BaseModel):
    """Root configuration model."""

    github: GitHubConfig
    http: HTTPConfig = Field(default_factory=HTTPConfig)
    filters: FilterConfig = Field(default_factory=FilterConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        msg = f"Config file not found: {path}"
        raise FileNotFoundError(msg)

    with path.open() as f:
        raw = yaml.safe_load(f)

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        msg = f"Config file {path} must contain a mapping, got {type(raw).__name__}"
        raise ConfigError(msg)
    return raw


def load_config(
    environ: Mapping[str, str] | None = None,
    path: Path | None = None,
) -> Config:
    """Load and validate configuration.

    Args:
        environ: Environment mapping. Defaults to ``os.environ``.
        path: Optional YAML base file. Defaults to ``$GH_ORG_STATS_CONFIG``.

    Returns:
        Validated Config object.

    Raises:
        ConfigError: If the access token or organization is missing, or the
            YAML file is not a mapping of sections.
        FileNotFoundError: If an explicit config file doesn't exist.
        ValidationError: If a value is invalid.
    """
    env = os.environ if environ is None else environ

    if path is None and env.get(CONFIG_PATH_ENV):
        path = Path(env[CONFIG_PATH_ENV])

    raw: dict[str, Any] = _read_yaml(path) if path else {}

    # Empty YAML sections load as None
    for section in ("github", "http", "filters", "rate_limit", "output"):
        section_data = raw.get(section) or {}
        if not isinstance(section_data, dict):
            msg = f"Config section '{section}' must be a mapping"
            raise ConfigError(msg)
        raw[section] = section_data

    for var, (section, field) in ENV_FIELDS.items():
        value = env.get(var)
        if value is None or value == "":
            continue
        raw[section][field] = value

    github = raw["github"]
    missing = [
        var
        for var, key in (("GITHUB_ACCESS_TOKEN", "token"), ("GITHUB_ORGANIZATION_NAME", "organization"))
        if not github.get(key)
    ]
    if missing:
        msg = f"Missing required configuration: {', '.join(missing)}"
        raise ConfigError(msg)

    return Config.model_validate(raw)
