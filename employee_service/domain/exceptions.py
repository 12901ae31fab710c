"""
Custom exceptions for the employee service domain.

These exceptions represent domain-level errors and are independent
of infrastructure concerns (HTTP, database, etc.).
"""

from typing import Any, Optional


class EmployeeServiceException(Exception):
    """Base exception for all employee service errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class EmployeeNotFoundException(EmployeeServiceException):
    """Raised when no employee matches an id-based lookup."""

    def __init__(self, value: Any, field: str = "id"):
        message = f"Employee not found with {field}: {value}"
        super().__init__(message=message, details={"field": field, "value": str(value)})


class NoEmployeesException(EmployeeServiceException):
    """Raised when an aggregate needs at least one employee and none exist."""

    def __init__(self, operation: str):
        message = f"No employees available for {operation}"
        super().__init__(message=message, details={"operation": operation})


class ValidationException(EmployeeServiceException):
    """Raised when input validation fails."""

    def __init__(self, field: str, value: Any, reason: str):
        message = f"Validation failed for {field}: {reason}"
        super().__init__(
            message=message,
            details={"field": field, "value": str(value), "reason": reason},
        )


class RateLimitExceededException(EmployeeServiceException):
    """Raised when rate limit is exceeded."""

    def __init__(
        self, limit: int, window_seconds: int, retry_after: Optional[int] = None
    ):
        message = f"Rate limit exceeded: {limit} requests per {window_seconds} seconds"
        if retry_after:
            message += f". Retry after {retry_after} seconds"
        super().__init__(
            message=message,
            details={
                "limit": limit,
                "window_seconds": window_seconds,
                "retry_after": retry_after,
            },
        )


class CircuitBreakerOpenException(EmployeeServiceException):
    """Raised when circuit breaker is open (failure rate too high)."""

    def __init__(
        self, service: str, failure_rate: float, retry_after: Optional[int] = None
    ):
        message = (
            f"Circuit breaker open for '{service}' at {failure_rate:.1f}% failure rate"
        )
        if retry_after:
            message += f". Retry after {retry_after} seconds"
        super().__init__(
            message=message,
            details={
                "service": service,
                "failure_rate": round(failure_rate, 2),
                "retry_after": retry_after,
            },
        )


class BulkheadFullException(EmployeeServiceException):
    """Raised when the bulkhead has no free slot within the wait budget."""

    def __init__(self, name: str, max_concurrent_calls: int):
        message = (
            f"Bulkhead '{name}' is full: {max_concurrent_calls} concurrent calls in flight"
        )
        super().__init__(
            message=message,
            details={"name": name, "max_concurrent_calls": max_concurrent_calls},
        )
