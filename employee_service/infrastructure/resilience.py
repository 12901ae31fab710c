"""
Resilience policy composition.

Wraps service operations in retry, circuit breaker, rate limiter and
bulkhead guards. The policy is a plain configuration object so thresholds
and fallbacks are explicit and testable.

Composition order, outermost first::

    fallback -> retry -> circuit breaker -> rate limiter -> bulkhead -> call
"""

import functools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple, Type

from pymongo.errors import ConnectionFailure, ExecutionTimeout, PyMongoError
from tenacity import (AsyncRetrying, retry_if_exception_type,
                      stop_after_attempt, wait_exponential)

from .. import metrics
from ..domain.exceptions import (CircuitBreakerOpenException,
                                 EmployeeServiceException)
from .bulkhead import Bulkhead
from .circuit_breaker import CircuitBreaker
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

# Store errors worth another attempt
TRANSIENT_STORE_ERRORS: Tuple[Type[BaseException], ...] = (
    ConnectionFailure,
    ExecutionTimeout,
)

# Errors that count against the circuit and may be answered by a fallback
STORE_ERRORS: Tuple[Type[BaseException], ...] = (PyMongoError,)

Fallback = Callable[[Exception], Any]


@dataclass(frozen=True)
class ResiliencePolicy:
    """Thresholds for every guard around a service operation."""

    name: str = "employeeService"

    retry_max_attempts: int = 3
    retry_wait_min_seconds: float = 0.1
    retry_wait_max_seconds: float = 2.0
    retry_on: Tuple[Type[BaseException], ...] = TRANSIENT_STORE_ERRORS
    record_failures_on: Tuple[Type[BaseException], ...] = STORE_ERRORS

    failure_rate_threshold: float = 50.0
    sliding_window_size: int = 100
    minimum_number_of_calls: int = 10
    recovery_timeout: int = 60
    half_open_max_calls: int = 3

    rate_limit_max_requests: int = 100
    rate_limit_window_seconds: int = 1

    bulkhead_max_concurrent_calls: int = 25
    bulkhead_max_wait_seconds: float = 0.5

    @classmethod
    def from_settings(cls, settings, name: str = "employeeService") -> "ResiliencePolicy":
        """Build a policy from application settings."""
        return cls(
            name=name,
            retry_max_attempts=settings.RETRY_MAX_ATTEMPTS,
            retry_wait_min_seconds=settings.RETRY_WAIT_MIN_SECONDS,
            retry_wait_max_seconds=settings.RETRY_WAIT_MAX_SECONDS,
            failure_rate_threshold=settings.CIRCUIT_BREAKER_FAILURE_RATE_THRESHOLD,
            sliding_window_size=settings.CIRCUIT_BREAKER_SLIDING_WINDOW_SIZE,
            minimum_number_of_calls=settings.CIRCUIT_BREAKER_MINIMUM_CALLS,
            recovery_timeout=settings.CIRCUIT_BREAKER_RECOVERY_TIMEOUT,
            half_open_max_calls=settings.CIRCUIT_BREAKER_HALF_OPEN_MAX_CALLS,
            rate_limit_max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
            rate_limit_window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
            bulkhead_max_concurrent_calls=settings.BULKHEAD_MAX_CONCURRENT_CALLS,
            bulkhead_max_wait_seconds=settings.BULKHEAD_MAX_WAIT_SECONDS,
        )


class ResilientExecutor:
    """
    Runs coroutine functions under a ResiliencePolicy.

    One executor owns one set of guards; operations sharing an executor
    share its circuit state, rate window and bulkhead slots.

    Domain exceptions (not-found, validation, rate-limit and bulkhead
    rejections) are never retried, never recorded by the circuit breaker
    and never replaced by a fallback. A fallback answers only store
    failures that survived the retries, and open-circuit rejections. Any
    other error propagates unrecorded.
    """

    def __init__(self, policy: ResiliencePolicy):
        self.policy = policy
        self.circuit_breaker = CircuitBreaker(
            failure_rate_threshold=policy.failure_rate_threshold,
            sliding_window_size=policy.sliding_window_size,
            minimum_number_of_calls=policy.minimum_number_of_calls,
            recovery_timeout=policy.recovery_timeout,
            half_open_max_calls=policy.half_open_max_calls,
            ignored_exceptions=(EmployeeServiceException,),
            recorded_exceptions=policy.record_failures_on,
            name=policy.name,
        )
        self.rate_limiter = RateLimiter(
            max_requests=policy.rate_limit_max_requests,
            window_seconds=policy.rate_limit_window_seconds,
            name=policy.name,
        )
        self.bulkhead = Bulkhead(
            max_concurrent_calls=policy.bulkhead_max_concurrent_calls,
            max_wait_seconds=policy.bulkhead_max_wait_seconds,
            name=policy.name,
        )

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception_type(self.policy.retry_on),
            stop=stop_after_attempt(self.policy.retry_max_attempts),
            wait=wait_exponential(
                multiplier=self.policy.retry_wait_min_seconds,
                min=self.policy.retry_wait_min_seconds,
                max=self.policy.retry_wait_max_seconds,
            ),
            reraise=True,
        )

    async def execute(
        self,
        func: Callable[..., Awaitable],
        *args,
        fallback: Optional[Fallback] = None,
        **kwargs,
    ):
        """
        Execute func through every guard.

        Args:
            func: Coroutine function to execute
            *args: Positional arguments for func
            fallback: Called with the exception to produce a substitute result
            **kwargs: Keyword arguments for func

        Returns:
            Result of func, or the fallback value

        Raises:
            EmployeeServiceException: Domain errors and guard rejections
            PyMongoError: Store failures when no fallback is given
            Exception: Any other error, unrecorded and without fallback
        """
        operation = getattr(func, "__name__", "call")
        try:
            async for attempt in self._retrying():
                with attempt:
                    return await self.circuit_breaker.call(
                        self._guarded, func, *args, **kwargs
                    )
        except CircuitBreakerOpenException as e:
            if fallback is None:
                raise
            return self._apply_fallback(fallback, operation, e)
        except EmployeeServiceException:
            raise
        except self.policy.record_failures_on as e:
            if fallback is None:
                raise
            return self._apply_fallback(fallback, operation, e)
        finally:
            metrics.update_circuit_breaker_state(
                self.policy.name, self.circuit_breaker.state.value
            )

    async def _guarded(self, func: Callable[..., Awaitable], *args, **kwargs):
        self.rate_limiter.acquire()
        async with self.bulkhead.acquire():
            return await func(*args, **kwargs)

    def _apply_fallback(self, fallback: Fallback, operation: str, error: Exception):
        logger.error(f"Error during {operation}, answering with fallback: {error}")
        metrics.track_fallback(self.policy.name, operation)
        return fallback(error)

    def get_status(self) -> dict:
        """Get status of every guard."""
        return {
            "circuit_breaker": self.circuit_breaker.get_status(),
            "rate_limiter": self.rate_limiter.get_current_usage(),
            "bulkhead": self.bulkhead.get_status(),
        }


def empty_list_fallback(error: Exception) -> list:
    """Fallback for listing operations."""
    return []


def none_fallback(error: Exception) -> None:
    """Fallback for single-record lookups."""
    return None


def resilient(fallback: Optional[Fallback] = None):
    """
    Run a service method through the instance's ``resilience`` executor.

    Args:
        fallback: Substitute-result callable for store failures and open circuits

    Example:
        @resilient(fallback=empty_list_fallback)
        async def get_all_employees(self, page: int, size: int): ...
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            return await self.resilience.execute(
                func, self, *args, fallback=fallback, **kwargs
            )

        return wrapper

    return decorator
