"""
Tests for domain exceptions.

Simple tests to ensure exceptions carry message and details.
"""

from employee_service.domain.exceptions import (BulkheadFullException,
                                                CircuitBreakerOpenException,
                                                EmployeeNotFoundException,
                                                EmployeeServiceException,
                                                NoEmployeesException,
                                                RateLimitExceededException,
                                                ValidationException)


class TestExceptions:
    """Test custom exceptions."""

    def test_employee_not_found_message(self):
        """Test EmployeeNotFoundException message format."""
        exc = EmployeeNotFoundException("abc-123")
        assert str(exc) == "Employee not found with id: abc-123"
        assert exc.details == {"field": "id", "value": "abc-123"}

    def test_employee_not_found_other_field(self):
        exc = EmployeeNotFoundException("ana@example.com", field="email")
        assert "email" in str(exc)

    def test_validation_exception(self):
        """Test ValidationException."""
        exc = ValidationException("salaryIncrease", -5, "must be positive")
        assert "salaryIncrease" in str(exc)
        assert "must be positive" in str(exc)
        assert exc.details["value"] == "-5"

    def test_no_employees_exception(self):
        exc = NoEmployeesException("salary extremes")
        assert "salary extremes" in exc.message

    def test_rate_limit_exception_retry_after(self):
        exc = RateLimitExceededException(limit=10, window_seconds=1, retry_after=2)
        assert "Retry after 2 seconds" in str(exc)
        assert exc.details["retry_after"] == 2

    def test_circuit_breaker_exception(self):
        exc = CircuitBreakerOpenException("employeeService", 75.0, retry_after=30)
        assert "employeeService" in str(exc)
        assert "75.0%" in str(exc)
        assert exc.details["failure_rate"] == 75.0

    def test_bulkhead_exception(self):
        exc = BulkheadFullException("employeeService", 25)
        assert exc.details["max_concurrent_calls"] == 25

    def test_all_inherit_from_base(self):
        """Test every domain exception shares the base class."""
        for exc in (
            EmployeeNotFoundException("x"),
            NoEmployeesException("op"),
            ValidationException("f", "v", "r"),
            RateLimitExceededException(1, 1),
            CircuitBreakerOpenException("s", 50.0),
            BulkheadFullException("b", 1),
        ):
            assert isinstance(exc, EmployeeServiceException)
