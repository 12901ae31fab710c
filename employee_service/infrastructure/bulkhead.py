"""
Bulkhead for bounding concurrent calls.

Limits how many calls may be in flight against the document store at once,
so a slow store cannot tie up every request worker.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from ..domain.exceptions import BulkheadFullException

logger = logging.getLogger(__name__)


class Bulkhead:
    """
    Semaphore-based bulkhead.

    A call waits up to ``max_wait_seconds`` for a free slot and is rejected
    with BulkheadFullException when none frees up in time.
    """

    def __init__(
        self,
        max_concurrent_calls: int = 25,
        max_wait_seconds: float = 0.5,
        name: str = "default",
    ):
        """
        Initialize bulkhead.

        Args:
            max_concurrent_calls: Maximum calls in flight at once
            max_wait_seconds: How long a call may wait for a slot (0 = no waiting)
            name: Bulkhead name for logging
        """
        self.name = name
        self.max_concurrent_calls = max_concurrent_calls
        self.max_wait_seconds = max_wait_seconds
        self.in_flight = 0
        self.rejected = 0
        self._semaphore = asyncio.Semaphore(max_concurrent_calls)

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[None]:
        """
        Hold a bulkhead slot for the duration of the block.

        Raises:
            BulkheadFullException: If no slot frees up within the wait budget
        """
        if self._semaphore.locked() and self.max_wait_seconds <= 0:
            self._reject()

        try:
            await asyncio.wait_for(
                self._semaphore.acquire(), timeout=self.max_wait_seconds or None
            )
        except asyncio.TimeoutError:
            self._reject()

        self.in_flight += 1
        try:
            yield
        finally:
            self.in_flight -= 1
            self._semaphore.release()

    def _reject(self) -> None:
        self.rejected += 1
        logger.warning(
            f"Bulkhead '{self.name}' full: "
            f"{self.in_flight}/{self.max_concurrent_calls} calls in flight"
        )
        raise BulkheadFullException(self.name, self.max_concurrent_calls)

    def get_status(self) -> dict:
        """Get current bulkhead usage."""
        return {
            "name": self.name,
            "in_flight": self.in_flight,
            "max_concurrent_calls": self.max_concurrent_calls,
            "available": self.max_concurrent_calls - self.in_flight,
            "rejected": self.rejected,
        }
