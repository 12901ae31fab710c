"""
Metrics middleware for FastAPI applications.

Automatically tracks HTTP request metrics for all endpoints.
"""

import time
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Track Prometheus metrics for every HTTP request.

    Endpoints are labelled with their route template (``/api/v1/employees/{employee_id}``)
    so label cardinality stays bounded by the number of routes.
    """

    def __init__(self, app, track_func: Callable):
        """
        Initialize the middleware.

        Args:
            app: FastAPI application
            track_func: Called with (method, endpoint, status_code, duration)
        """
        super().__init__(app)
        self.track_func = track_func

    @staticmethod
    def _endpoint(request: Request) -> str:
        for route in request.app.router.routes:
            match, _ = route.matches(request.scope)
            if match == Match.FULL:
                return getattr(route, "path", request.url.path)
        return request.url.path

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            self.track_func(
                method=request.method,
                endpoint=self._endpoint(request),
                status_code=status_code,
                duration=time.time() - start_time,
            )
