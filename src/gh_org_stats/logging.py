"""Logging configuration with secret redaction."""

import logging
import re
from collections.abc import Iterable
from typing import ClassVar


class SecretRedactingFilter(logging.Filter):
    """Filter that masks access tokens in log messages.

    Besides well-known token shapes, any literal secret handed to the filter
    (the configured access token) is masked wherever it appears.
    """

    SECRET_PATTERNS: ClassVar[list[tuple[re.Pattern[str], str]]] = [
        # ghp_, gho_, ghu_, ghs_, ghr_ tokens
        (re.compile(r"gh[pousr]_[a-zA-Z0-9]{20,}"), "[REDACTED_GH_TOKEN]"),
        (re.compile(r"github_pat_[a-zA-Z0-9_]+"), "[REDACTED_GH_PAT]"),
        (re.compile(r"Bearer\s+[a-zA-Z0-9_\-\.]+"), "Bearer [REDACTED]"),
        (re.compile(r"(Authorization:\s*)[^\s,\]]+", re.IGNORECASE), r"\1[REDACTED]"),
    ]

    def __init__(self, secrets: Iterable[str] = ()) -> None:
        """Initialize the filter.

        Args:
            secrets: Literal values to mask in addition to the known patterns.
        """
        super().__init__()
        self._secrets = [s for s in secrets if s]

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact secrets from the record message and string args."""
        record.msg = self._redact(str(record.msg))
        if record.args:
            record.args = tuple(
                self._redact(arg) if isinstance(arg, str) else arg for arg in record.args
            )
        return True

    def _redact(self, text: str) -> str:
        for secret in self._secrets:
            text = text.replace(secret, "[REDACTED]")
        for pattern, replacement in self.SECRET_PATTERNS:
            text = pattern.sub(replacement, text)
        return text


def setup_logging(verbose: bool = False, secrets: Iterable[str] = ()) -> None:
    """Configure logging for the application.

    Args:
        verbose: Enable debug level logging.
        secrets: Literal secrets to mask in every log line.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    redaction_filter = SecretRedactingFilter(secrets)
    for handler in logging.getLogger().handlers:
        handler.addFilter(redaction_filter)

    # Request lines from httpx would include every page URL
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
