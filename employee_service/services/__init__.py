"""
Service layer - Business logic orchestration.

Coordinates repositories, caches and resilience guards.
"""
