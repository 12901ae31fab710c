"""
Infrastructure layer - Resilience guards around the document store.

Circuit breaker, rate limiter, bulkhead and the policy that composes them.
"""
