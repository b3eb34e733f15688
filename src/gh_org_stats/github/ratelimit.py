"""Outbound request admission and quota reporting.

The admission gate bounds how many GitHub requests are in flight at once,
across every kind of request. Waiters are woken when a slot frees up rather
than polling on an interval.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_MAX_IN_FLIGHT = 100


class AdmissionGate:
    """Counting gate for outbound requests.

    ``acquire()`` suspends the caller until fewer than ``max_in_flight``
    requests are outstanding and then takes a slot; ``release()`` gives one
    back. Use ``slot()`` to bracket a single network call so the slot is
    returned on success, failure and cancellation alike.

    The gate never raises. Waiters are not served in any guaranteed order.
    """

    def __init__(self, max_in_flight: int = DEFAULT_MAX_IN_FLIGHT) -> None:
        """Initialize the gate.

        Args:
            max_in_flight: Maximum number of outstanding requests.

        Raises:
            ValueError: If max_in_flight is less than 1.
        """
        if max_in_flight < 1:
            msg = f"max_in_flight must be >= 1, got {max_in_flight}"
            raise ValueError(msg)

        self._max_in_flight = max_in_flight
        self._semaphore = asyncio.Semaphore(max_in_flight)
        self._in_flight = 0
        self._peak_in_flight = 0
        self._admitted = 0

    @property
    def max_in_flight(self) -> int:
        """Configured upper bound on outstanding requests."""
        return self._max_in_flight

    @property
    def in_flight(self) -> int:
        """Number of requests currently holding a slot."""
        return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        """Highest number of simultaneously outstanding requests observed."""
        return self._peak_in_flight

    @property
    def admitted(self) -> int:
        """Total number of acquisitions granted."""
        return self._admitted

    async def acquire(self) -> None:
        """Wait for a free slot and take it."""
        await self._semaphore.acquire()
        self._in_flight += 1
        self._admitted += 1
        if self._in_flight > self._peak_in_flight:
            self._peak_in_flight = self._in_flight

        if self._in_flight == self._max_in_flight:
            logger.debug("Admission gate full: %d requests in flight", self._in_flight)

    def release(self) -> None:
        """Return a slot. Releasing an idle gate is a no-op."""
        if self._in_flight == 0:
            return
        self._in_flight -= 1
        self._semaphore.release()

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Hold one slot for the duration of the block."""
        await self.acquire()
        try:
            yield
        finally:
            self.release()


@dataclass
class QuotaSnapshot:
    """Core API quota as reported by the ``/rate_limit`` endpoint."""

    limit: int
    remaining: int
    used: int
    reset_at: datetime

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "QuotaSnapshot":
        """Build a snapshot from a ``/rate_limit`` response body.

        Prefers ``resources.core`` and falls back to the top-level ``rate``.

        Args:
            data: Decoded JSON body.

        Returns:
            QuotaSnapshot for the core REST quota.
        """
        rate = data.get("resources", {}).get("core") or data.get("rate") or {}
        return cls(
            limit=int(rate.get("limit", 0)),
            remaining=int(rate.get("remaining", 0)),
            used=int(rate.get("used", 0)),
            reset_at=datetime.fromtimestamp(int(rate.get("reset", 0)), tz=UTC),
        )

    @property
    def is_exhausted(self) -> bool:
        """Whether no requests remain before the reset."""
        return self.remaining <= 0
