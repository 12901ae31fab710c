"""
Global exception handlers for the employee API.

Domain exceptions map to HTTP statuses through a single table; request
validation errors become 400 with field-level details, and anything
unexpected becomes a generic 500 that never leaks internals.
"""

from typing import Dict, Tuple, Type

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .domain.exceptions import (BulkheadFullException,
                                CircuitBreakerOpenException,
                                EmployeeNotFoundException,
                                EmployeeServiceException, NoEmployeesException,
                                RateLimitExceededException,
                                ValidationException)

logger = structlog.get_logger(__name__)

# Resolved along the exception MRO; unmapped domain errors become 500
EXCEPTION_STATUS: Dict[Type[EmployeeServiceException], Tuple[int, str]] = {
    EmployeeNotFoundException: (status.HTTP_404_NOT_FOUND, "not_found"),
    NoEmployeesException: (status.HTTP_404_NOT_FOUND, "not_found"),
    ValidationException: (status.HTTP_400_BAD_REQUEST, "validation_error"),
    RateLimitExceededException: (status.HTTP_429_TOO_MANY_REQUESTS, "rate_limit_exceeded"),
    CircuitBreakerOpenException: (status.HTTP_503_SERVICE_UNAVAILABLE, "service_unavailable"),
    BulkheadFullException: (status.HTTP_503_SERVICE_UNAVAILABLE, "service_unavailable"),
}

HTTP_ERROR_CODES = {
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


def error_body(error: str, message: str, details: dict = None) -> dict:
    """Build the error response body shared by every handler."""
    return {
        "success": False,
        "error": error,
        "message": message,
        "details": details or {},
    }


def status_for(exc: EmployeeServiceException) -> Tuple[int, str]:
    """Resolve the HTTP status and error code for a domain exception."""
    for exc_type in type(exc).__mro__:
        if exc_type in EXCEPTION_STATUS:
            return EXCEPTION_STATUS[exc_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_server_error"


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_http_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:
    @app.exception_handler(EmployeeServiceException)
    async def domain_error_handler(request: Request, exc: EmployeeServiceException):
        """Handle all employee service domain errors."""
        status_code, code = status_for(exc)
        logger.warning(
            "Request failed",
            path=request.url.path,
            error=code,
            message=exc.message,
        )

        headers = None
        retry_after = exc.details.get("retry_after")
        if retry_after is not None:
            headers = {"Retry-After": str(retry_after)}

        return JSONResponse(
            status_code=status_code,
            content=error_body(code, exc.message, exc.details),
            headers=headers,
        )


def _register_http_error_handler(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        """Handle framework HTTP errors such as 401/403 from auth dependencies."""
        code = HTTP_ERROR_CODES.get(exc.status_code, "http_error")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        errors = [
            {
                "field": ".".join(str(loc) for loc in e["loc"]),
                "message": e["msg"],
                "type": e["type"],
            }
            for e in exc.errors()
        ]
        logger.warning("Validation error", path=request.url.path, errors=errors)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body("validation_error", "Invalid request data", {"errors": errors}),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions."""
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("internal_server_error", "An unexpected error occurred"),
        )
