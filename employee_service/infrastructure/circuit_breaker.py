"""
Circuit breaker implementation for fault tolerance.

Prevents cascading failures by temporarily blocking calls to a failing
document store. The circuit opens on the failure *rate* observed over a
sliding window of recent calls.
"""

import logging
from collections import deque
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Deque, Optional, Tuple, Type

from ..domain.exceptions import CircuitBreakerOpenException

logger = logging.getLogger(__name__)


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Blocking calls after failures
    HALF_OPEN = "half_open"  # Testing if the store recovered


class CircuitBreaker:
    """
    Circuit breaker pattern implementation.

    Protects store calls from cascading failures:
    - CLOSED: Normal operation, outcomes recorded in a sliding window
    - OPEN: Failure rate reached the threshold, block all calls
    - HALF_OPEN: Testing recovery, allow limited calls

    Only exceptions listed in ``recorded_exceptions`` count as failures.
    Exceptions listed in ``ignored_exceptions``, and any other exception,
    pass through without being recorded as either success or failure.
    """

    def __init__(
        self,
        failure_rate_threshold: float = 50.0,
        sliding_window_size: int = 100,
        minimum_number_of_calls: int = 10,
        recovery_timeout: int = 60,
        half_open_max_calls: int = 3,
        ignored_exceptions: Tuple[Type[BaseException], ...] = (),
        recorded_exceptions: Tuple[Type[BaseException], ...] = (Exception,),
        name: str = "default",
    ):
        """
        Initialize circuit breaker.

        Args:
            failure_rate_threshold: Failure percentage (0-100) that opens the circuit
            sliding_window_size: Number of recent outcomes considered
            minimum_number_of_calls: Outcomes required before the rate is evaluated
            recovery_timeout: Seconds to wait before attempting recovery
            half_open_max_calls: Concurrent trial calls allowed in half-open state,
                and successes needed there to close
            ignored_exceptions: Exception types that are not recorded
            recorded_exceptions: Exception types recorded as failures
            name: Circuit breaker name for logging
        """
        self.name = name
        self.failure_rate_threshold = failure_rate_threshold
        self.sliding_window_size = sliding_window_size
        self.minimum_number_of_calls = minimum_number_of_calls
        self.recovery_timeout = recovery_timeout
        self.half_open_max_calls = half_open_max_calls
        self.ignored_exceptions = ignored_exceptions
        self.recorded_exceptions = recorded_exceptions

        self.state = CircuitState.CLOSED
        self.outcomes: Deque[bool] = deque(maxlen=sliding_window_size)
        self.success_count = 0
        self.half_open_in_flight = 0
        self.last_failure_time: Optional[datetime] = None
        self.opened_at: Optional[datetime] = None

    @property
    def failure_count(self) -> int:
        """Failures currently inside the sliding window."""
        return sum(1 for ok in self.outcomes if not ok)

    @property
    def failure_rate(self) -> float:
        """Failure percentage over the sliding window."""
        if not self.outcomes:
            return 0.0
        return self.failure_count / len(self.outcomes) * 100

    async def call(self, func: Callable[..., Awaitable], *args, **kwargs):
        """
        Execute coroutine function through circuit breaker.

        Args:
            func: Coroutine function to execute
            *args: Positional arguments for func
            **kwargs: Keyword arguments for func

        Returns:
            Result of func execution

        Raises:
            CircuitBreakerOpenException: If circuit is open
            Exception: Any exception from func execution
        """
        self._before_call()

        trial = self.state == CircuitState.HALF_OPEN
        if trial:
            self.half_open_in_flight += 1

        try:
            result = await func(*args, **kwargs)
        except self.ignored_exceptions:
            raise
        except self.recorded_exceptions:
            self._on_failure()
            raise
        finally:
            if trial:
                self.half_open_in_flight -= 1

        self._on_success()
        return result

    def _before_call(self) -> None:
        """
        Reject the call while OPEN, or move to HALF_OPEN after the timeout.

        In HALF_OPEN at most ``half_open_max_calls`` trial calls run at once.
        """
        if self.state == CircuitState.HALF_OPEN:
            if self.half_open_in_flight < self.half_open_max_calls:
                return
            logger.warning(
                f"Circuit breaker '{self.name}' HALF_OPEN, "
                f"{self.half_open_in_flight} trial calls in flight"
            )
            raise CircuitBreakerOpenException(
                service=self.name,
                failure_rate=self.failure_rate,
                retry_after=0,
            )

        if self.state != CircuitState.OPEN:
            return

        if self._should_attempt_recovery():
            logger.info(f"Circuit breaker '{self.name}' entering HALF_OPEN state")
            self.state = CircuitState.HALF_OPEN
            self.success_count = 0
            return

        retry_after = self._get_retry_after_seconds()
        logger.warning(f"Circuit breaker '{self.name}' is OPEN, retry after {retry_after}s")
        raise CircuitBreakerOpenException(
            service=self.name,
            failure_rate=self.failure_rate,
            retry_after=retry_after,
        )

    def _on_success(self):
        """Handle successful call."""
        if self.state == CircuitState.HALF_OPEN:
            self.success_count += 1
            logger.info(
                f"Circuit breaker '{self.name}' HALF_OPEN success "
                f"({self.success_count}/{self.half_open_max_calls})"
            )

            if self.success_count >= self.half_open_max_calls:
                logger.info(f"Circuit breaker '{self.name}' closing after recovery")
                self.state = CircuitState.CLOSED
                self.opened_at = None
                self.outcomes.clear()
            return

        self.outcomes.append(True)

    def _on_failure(self):
        """Handle failed call."""
        self.last_failure_time = datetime.now()

        if self.state == CircuitState.HALF_OPEN:
            # Failed during recovery - back to OPEN
            logger.warning(f"Circuit breaker '{self.name}' failed during recovery, reopening")
            self.state = CircuitState.OPEN
            self.opened_at = datetime.now()
            return

        self.outcomes.append(False)
        logger.warning(
            f"Circuit breaker '{self.name}' failure "
            f"({self.failure_count}/{len(self.outcomes)} calls, {self.failure_rate:.1f}%)"
        )

        if (
            len(self.outcomes) >= self.minimum_number_of_calls
            and self.failure_rate >= self.failure_rate_threshold
        ):
            logger.error(
                f"Circuit breaker '{self.name}' OPENING at "
                f"{self.failure_rate:.1f}% failure rate"
            )
            self.state = CircuitState.OPEN
            self.opened_at = datetime.now()

    def _should_attempt_recovery(self) -> bool:
        """Check if enough time has passed to attempt recovery."""
        if not self.opened_at:
            return False

        elapsed = (datetime.now() - self.opened_at).total_seconds()
        return elapsed >= self.recovery_timeout

    def _get_retry_after_seconds(self) -> int:
        """Calculate remaining time until recovery attempt."""
        if not self.opened_at:
            return self.recovery_timeout

        elapsed = (datetime.now() - self.opened_at).total_seconds()
        remaining = max(0, int(self.recovery_timeout - elapsed))
        return remaining

    def reset(self):
        """Manually reset circuit breaker to CLOSED state."""
        logger.info(f"Circuit breaker '{self.name}' manually reset")
        self.state = CircuitState.CLOSED
        self.outcomes.clear()
        self.success_count = 0
        self.last_failure_time = None
        self.opened_at = None

    def get_status(self) -> dict:
        """Get current circuit breaker status."""
        return {
            "name": self.name,
            "state": self.state.value,
            "failure_count": self.failure_count,
            "buffered_calls": len(self.outcomes),
            "failure_rate": round(self.failure_rate, 2),
            "failure_rate_threshold": self.failure_rate_threshold,
            "opened_at": self.opened_at.isoformat() if self.opened_at else None,
            "retry_after_seconds": (
                self._get_retry_after_seconds() if self.state == CircuitState.OPEN else None
            ),
        }
