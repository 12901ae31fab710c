"""
Prometheus metrics for Employee Service.

Tracks HTTP traffic, MongoDB command latency, cache performance and
resilience guard activity.
"""

from fastapi import Response
from prometheus_client import (CONTENT_TYPE_LATEST, Counter, Gauge, Histogram,
                               generate_latest)

# Request metrics
http_requests_total = Counter(
    "employee_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "employee_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# MongoDB command metrics
mongodb_commands_total = Counter(
    "employee_mongodb_commands_total",
    "Total MongoDB commands",
    ["command", "status"],
)

mongodb_command_duration_seconds = Histogram(
    "employee_mongodb_command_duration_seconds",
    "MongoDB command duration in seconds",
    ["command", "status"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

# Cache metrics
employee_cache_hits_total = Counter(
    "employee_cache_hits_total", "Total cache hits", ["cache_name"]
)

employee_cache_misses_total = Counter(
    "employee_cache_misses_total", "Total cache misses", ["cache_name"]
)

employee_cache_evictions_total = Counter(
    "employee_cache_evictions_total", "Total cache invalidations", ["cache_name"]
)

# Resilience metrics
circuit_breaker_state = Gauge(
    "employee_circuit_breaker_state",
    "Circuit breaker state (0=closed, 1=half_open, 2=open)",
    ["name"],
)

resilience_fallbacks_total = Counter(
    "employee_resilience_fallbacks_total",
    "Calls answered by a fallback value",
    ["name", "operation"],
)

CIRCUIT_STATE_VALUES = {"closed": 0, "half_open": 1, "open": 2}


def track_request_metrics(
    method: str, endpoint: str, status_code: int, duration: float
):
    """Track HTTP request metrics."""
    http_requests_total.labels(
        method=method, endpoint=endpoint, status=status_code
    ).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
        duration
    )


def track_mongodb_command(command: str, success: bool, duration: float):
    """Track a completed MongoDB command."""
    status = "success" if success else "failed"
    mongodb_commands_total.labels(command=command, status=status).inc()
    mongodb_command_duration_seconds.labels(command=command, status=status).observe(
        duration
    )


def track_cache_hit(cache_name: str):
    """Track cache hits."""
    employee_cache_hits_total.labels(cache_name=cache_name).inc()


def track_cache_miss(cache_name: str):
    """Track cache misses."""
    employee_cache_misses_total.labels(cache_name=cache_name).inc()


def track_cache_eviction(cache_name: str):
    """Track cache invalidations."""
    employee_cache_evictions_total.labels(cache_name=cache_name).inc()


def update_circuit_breaker_state(name: str, state: str):
    """Update circuit breaker state gauge."""
    circuit_breaker_state.labels(name=name).set(CIRCUIT_STATE_VALUES.get(state, 0))


def track_fallback(name: str, operation: str):
    """Track fallback usage."""
    resilience_fallbacks_total.labels(name=name, operation=operation).inc()


async def metrics_endpoint():
    """
    Prometheus metrics endpoint.

    Returns:
        Response with Prometheus metrics in text format
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
