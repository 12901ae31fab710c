"""Employee Service - CRUD REST API for employee records backed by MongoDB."""

__version__ = "1.0.0"
