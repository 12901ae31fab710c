"""
Unit tests for infrastructure components.

Tests for Circuit Breaker, Rate Limiter and Bulkhead.
"""

import asyncio
from datetime import datetime, timedelta

import pytest

from employee_service.domain.exceptions import (BulkheadFullException,
                                                CircuitBreakerOpenException,
                                                EmployeeNotFoundException,
                                                RateLimitExceededException)
from employee_service.infrastructure.bulkhead import Bulkhead
from employee_service.infrastructure.circuit_breaker import (CircuitBreaker,
                                                             CircuitState)
from employee_service.infrastructure.rate_limiter import RateLimiter


async def success_func():
    return "success"


async def failing_func():
    raise Exception("Store Error")


class TestCircuitBreaker:
    """Tests for Circuit Breaker pattern."""

    @pytest.fixture
    def circuit_breaker(self):
        """Create a circuit breaker for testing."""
        return CircuitBreaker(
            failure_rate_threshold=50.0,
            sliding_window_size=10,
            minimum_number_of_calls=4,
            recovery_timeout=5,
            half_open_max_calls=2,
            ignored_exceptions=(EmployeeNotFoundException,),
            name="test_service",
        )

    def test_initial_state_closed(self, circuit_breaker):
        """Test circuit breaker starts in CLOSED state."""
        assert circuit_breaker.state == CircuitState.CLOSED
        assert circuit_breaker.failure_count == 0
        assert circuit_breaker.failure_rate == 0.0

    @pytest.mark.asyncio
    async def test_successful_call(self, circuit_breaker):
        """Test successful function call."""
        result = await circuit_breaker.call(success_func)
        assert result == "success"
        assert circuit_breaker.failure_count == 0

    @pytest.mark.asyncio
    async def test_failed_call_increments_count(self, circuit_breaker):
        """Test failed call increments failure count."""
        with pytest.raises(Exception):
            await circuit_breaker.call(failing_func)

        assert circuit_breaker.failure_count == 1
        assert circuit_breaker.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_stays_closed_below_minimum_calls(self, circuit_breaker):
        """Failure rate is not evaluated until the minimum number of calls."""
        for _ in range(3):
            with pytest.raises(Exception):
                await circuit_breaker.call(failing_func)

        assert circuit_breaker.failure_rate == 100.0
        assert circuit_breaker.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_circuit_opens_at_failure_rate(self, circuit_breaker):
        """Test circuit opens once the failure rate reaches the threshold."""
        await circuit_breaker.call(success_func)
        await circuit_breaker.call(success_func)
        for _ in range(2):
            with pytest.raises(Exception):
                await circuit_breaker.call(failing_func)

        assert circuit_breaker.state == CircuitState.OPEN

        # Next call should raise CircuitBreakerOpenException
        with pytest.raises(CircuitBreakerOpenException):
            await circuit_breaker.call(success_func)

    @pytest.mark.asyncio
    async def test_stays_closed_below_threshold(self, circuit_breaker):
        for _ in range(3):
            await circuit_breaker.call(success_func)
        with pytest.raises(Exception):
            await circuit_breaker.call(failing_func)

        assert circuit_breaker.failure_rate == 25.0
        assert circuit_breaker.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_ignored_exceptions_not_recorded(self, circuit_breaker):
        """Domain errors pass through without counting as failures."""

        async def not_found():
            raise EmployeeNotFoundException("x")

        for _ in range(5):
            with pytest.raises(EmployeeNotFoundException):
                await circuit_breaker.call(not_found)

        assert len(circuit_breaker.outcomes) == 0
        assert circuit_breaker.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_half_open_recovery(self, circuit_breaker):
        """Test circuit closes after enough successes in HALF_OPEN."""
        for _ in range(4):
            with pytest.raises(Exception):
                await circuit_breaker.call(failing_func)
        assert circuit_breaker.state == CircuitState.OPEN

        circuit_breaker.opened_at = datetime.now() - timedelta(seconds=10)

        await circuit_breaker.call(success_func)
        assert circuit_breaker.state == CircuitState.HALF_OPEN

        await circuit_breaker.call(success_func)
        assert circuit_breaker.state == CircuitState.CLOSED
        assert circuit_breaker.failure_count == 0

    @pytest.mark.asyncio
    async def test_half_open_failure_reopens(self, circuit_breaker):
        for _ in range(4):
            with pytest.raises(Exception):
                await circuit_breaker.call(failing_func)
        circuit_breaker.opened_at = datetime.now() - timedelta(seconds=10)

        with pytest.raises(Exception):
            await circuit_breaker.call(failing_func)

        assert circuit_breaker.state == CircuitState.OPEN

    @pytest.mark.asyncio
    async def test_unlisted_exceptions_not_recorded(self):
        """Only recorded exception types count as failures."""
        breaker = CircuitBreaker(
            minimum_number_of_calls=1,
            recorded_exceptions=(OSError,),
            name="store_only",
        )

        async def bad_value():
            raise ValueError("year -476 is out of range")

        for _ in range(3):
            with pytest.raises(ValueError):
                await breaker.call(bad_value)

        assert len(breaker.outcomes) == 0
        assert breaker.state == CircuitState.CLOSED

        async def store_down():
            raise OSError("connection refused")

        with pytest.raises(OSError):
            await breaker.call(store_down)
        assert breaker.state == CircuitState.OPEN

    @pytest.mark.asyncio
    async def test_half_open_caps_concurrent_trial_calls(self, circuit_breaker):
        """Calls beyond half_open_max_calls are rejected while trials are in flight."""
        for _ in range(4):
            with pytest.raises(Exception):
                await circuit_breaker.call(failing_func)
        circuit_breaker.opened_at = datetime.now() - timedelta(seconds=10)

        release = asyncio.Event()

        async def slow_success():
            await release.wait()
            return "success"

        trials = [asyncio.create_task(circuit_breaker.call(slow_success)) for _ in range(2)]
        await asyncio.sleep(0)
        assert circuit_breaker.state == CircuitState.HALF_OPEN
        assert circuit_breaker.half_open_in_flight == 2

        with pytest.raises(CircuitBreakerOpenException) as exc_info:
            await circuit_breaker.call(success_func)
        assert exc_info.value.details["retry_after"] == 0

        release.set()
        assert await asyncio.gather(*trials) == ["success", "success"]
        assert circuit_breaker.half_open_in_flight == 0
        assert circuit_breaker.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_half_open_slot_released_after_failure(self, circuit_breaker):
        for _ in range(4):
            with pytest.raises(Exception):
                await circuit_breaker.call(failing_func)
        circuit_breaker.opened_at = datetime.now() - timedelta(seconds=10)

        with pytest.raises(Exception):
            await circuit_breaker.call(failing_func)

        assert circuit_breaker.half_open_in_flight == 0
        assert circuit_breaker.state == CircuitState.OPEN

    @pytest.mark.asyncio
    async def test_reset(self, circuit_breaker):
        """Test manual reset."""
        with pytest.raises(Exception):
            await circuit_breaker.call(failing_func)

        circuit_breaker.reset()

        assert circuit_breaker.state == CircuitState.CLOSED
        assert circuit_breaker.failure_count == 0

    def test_get_status(self, circuit_breaker):
        """Test status retrieval."""
        status = circuit_breaker.get_status()

        assert status["name"] == "test_service"
        assert status["state"] == "closed"
        assert status["failure_count"] == 0
        assert status["retry_after_seconds"] is None


class TestRateLimiter:
    """Tests for Rate Limiter."""

    @pytest.fixture
    def rate_limiter(self):
        """Create a rate limiter for testing."""
        return RateLimiter(max_requests=3, window_seconds=1, name="test_limiter")

    def test_allows_requests_within_limit(self, rate_limiter):
        """Test requests are allowed within limit."""
        rate_limiter.acquire()
        rate_limiter.acquire()
        rate_limiter.acquire()

        # 4th request should fail
        with pytest.raises(RateLimitExceededException) as exc_info:
            rate_limiter.acquire()

        assert exc_info.value.details["retry_after"] >= 1

    def test_window_slides(self, rate_limiter, monkeypatch):
        """Calls older than the window no longer count."""
        clock = [100.0]
        monkeypatch.setattr(
            "employee_service.infrastructure.rate_limiter.time.monotonic", lambda: clock[0]
        )
        for _ in range(3):
            rate_limiter.acquire()

        clock[0] += 1.0
        rate_limiter.acquire()

    def test_get_current_usage(self, rate_limiter):
        """Test usage statistics."""
        rate_limiter.acquire()
        rate_limiter.acquire()

        usage = rate_limiter.get_current_usage()

        assert usage["current_requests"] == 2
        assert usage["max_requests"] == 3
        assert usage["usage_percent"] == pytest.approx(66.67, rel=0.1)

    def test_reset(self, rate_limiter):
        """Test reset clears tracked calls."""
        for _ in range(3):
            rate_limiter.acquire()

        rate_limiter.reset()
        rate_limiter.acquire()


class TestBulkhead:
    """Tests for Bulkhead."""

    @pytest.mark.asyncio
    async def test_tracks_in_flight(self):
        bulkhead = Bulkhead(max_concurrent_calls=2, max_wait_seconds=0, name="test")

        async with bulkhead.acquire():
            assert bulkhead.in_flight == 1
            assert bulkhead.get_status()["available"] == 1

        assert bulkhead.in_flight == 0

    @pytest.mark.asyncio
    async def test_rejects_when_full_without_wait(self):
        """Test immediate rejection when no slot is free and no wait allowed."""
        bulkhead = Bulkhead(max_concurrent_calls=1, max_wait_seconds=0, name="test")

        async with bulkhead.acquire():
            with pytest.raises(BulkheadFullException):
                async with bulkhead.acquire():
                    pass

        assert bulkhead.rejected == 1
        assert bulkhead.in_flight == 0

    @pytest.mark.asyncio
    async def test_rejects_after_wait_budget(self):
        bulkhead = Bulkhead(max_concurrent_calls=1, max_wait_seconds=0.01, name="test")

        async with bulkhead.acquire():
            with pytest.raises(BulkheadFullException):
                async with bulkhead.acquire():
                    pass

    @pytest.mark.asyncio
    async def test_waiter_gets_released_slot(self):
        """A waiting call proceeds once a slot is released in time."""
        bulkhead = Bulkhead(max_concurrent_calls=1, max_wait_seconds=1.0, name="test")
        release = asyncio.Event()

        async def holder():
            async with bulkhead.acquire():
                await release.wait()

        task = asyncio.create_task(holder())
        await asyncio.sleep(0)

        async def waiter():
            async with bulkhead.acquire():
                return "ran"

        waiting = asyncio.create_task(waiter())
        await asyncio.sleep(0)
        release.set()

        assert await waiting == "ran"
        await task
        assert bulkhead.rejected == 0

    @pytest.mark.asyncio
    async def test_slot_released_on_error(self):
        bulkhead = Bulkhead(max_concurrent_calls=1, max_wait_seconds=0, name="test")

        with pytest.raises(RuntimeError):
            async with bulkhead.acquire():
                raise RuntimeError("boom")

        async with bulkhead.acquire():
            assert bulkhead.in_flight == 1
