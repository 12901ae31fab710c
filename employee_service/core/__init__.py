"""Core cross-cutting concerns: authentication and authorization."""
