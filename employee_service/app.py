"""
Main FastAPI application.

This file wires together all layers:
- Domain: Employee entity and business rules
- Infrastructure: Resilience guards
- Repositories: MongoDB data access
- Cache: In-memory and Redis read caches
- Services: Business logic orchestration
- Routers: HTTP endpoints
"""

import logging
import sys
import uuid
from contextlib import asynccontextmanager
from typing import List, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import TypeAdapter
from pymongo import AsyncMongoClient

from . import __version__
from .cache import CacheManager, RedisCache
from .config import Settings, settings
from .database import close_mongo_client, create_mongo_client, get_database
from .dependencies import set_employee_service
from .error_handlers import register_error_handlers
from .infrastructure.resilience import ResiliencePolicy, ResilientExecutor
from .metrics import metrics_endpoint, track_request_metrics
from .metrics_middleware import PrometheusMiddleware
from .models import EmployeeDTO
from .repositories.employee_repository import IEmployeeRepository
from .repositories.mongo_repository import MongoEmployeeRepository
from .routers import employee_router, health_router
from .services.employee_service import (EMPLOYEE_CACHE, EMPLOYEES_CACHE,
                                        EmployeeService)

# stdlib loggers (infrastructure modules) share the configured level
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)

# Global state
mongo_client: Optional[AsyncMongoClient] = None
redis_cache: Optional[RedisCache] = None


def create_employee_service(
    repository: IEmployeeRepository,
    redis: Optional[RedisCache] = None,
    config: Settings = settings,
) -> EmployeeService:
    """
    Create and configure the employee service with all dependencies.

    Args:
        repository: Employee repository
        redis: Connected Redis cache (optional, in-memory caching only if None)
        config: Application settings

    Returns:
        Configured EmployeeService instance
    """
    cache = CacheManager(
        regions={
            EMPLOYEES_CACHE: TypeAdapter(List[EmployeeDTO]),
            EMPLOYEE_CACHE: TypeAdapter(EmployeeDTO),
        },
        max_size=config.CACHE_MAX_SIZE,
        ttl_seconds=config.CACHE_TTL_SECONDS,
        redis_cache=redis,
    )
    resilience = ResilientExecutor(ResiliencePolicy.from_settings(config))
    return EmployeeService(repository=repository, cache=cache, resilience=resilience)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global mongo_client, redis_cache

    logger.info("Starting Employee Service...", version=__version__)

    # Initialize MongoDB
    mongo_client = create_mongo_client(settings)
    repository = MongoEmployeeRepository(get_database(mongo_client, settings))
    if await repository.ping():
        logger.info("MongoDB connected successfully", database=settings.MONGODB_DATABASE)
    else:
        # Requests fail over to fallbacks until the store comes up
        logger.warning("MongoDB not reachable at startup", database=settings.MONGODB_DATABASE)

    # Initialize Redis
    if settings.REDIS_URL:
        redis_cache = RedisCache(
            redis_url=settings.REDIS_URL,
            prefix=settings.CACHE_PREFIX,
            default_ttl=settings.CACHE_TTL_SECONDS,
        )
        try:
            await redis_cache.connect()
        except Exception as e:
            logger.warning("Redis not available, using in-memory cache only", error=str(e))
            redis_cache = None
    else:
        logger.info("REDIS_URL not set, using in-memory cache only")

    # Initialize service dependencies
    set_employee_service(create_employee_service(repository, redis_cache))
    logger.info("Employee Service started successfully")

    yield

    # Shutdown
    logger.info("Shutting down Employee Service...")
    set_employee_service(None)

    if redis_cache:
        await redis_cache.disconnect()
        redis_cache = None

    await close_mongo_client(mongo_client)
    mongo_client = None

    logger.info("Employee Service shut down complete")


# Create FastAPI app
app = FastAPI(
    title="Employee Service",
    description="Employee records API over MongoDB with caching and fault tolerance",
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

register_error_handlers(app)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add Prometheus metrics middleware
app.add_middleware(PrometheusMiddleware, track_func=track_request_metrics)


# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID for distributed tracing."""
    request_id = request.headers.get("X-Request-ID") or f"req-{uuid.uuid4().hex[:16]}"

    structlog.contextvars.bind_contextvars(request_id=request_id)
    try:
        response = await call_next(request)
    finally:
        structlog.contextvars.clear_contextvars()

    response.headers["X-Request-ID"] = request_id
    return response


# Include routers
app.include_router(employee_router.router)
app.include_router(health_router.router)


# Prometheus metrics endpoint
@app.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics endpoint."""
    return await metrics_endpoint()


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with service information."""
    return {
        "service": settings.SERVICE_NAME,
        "version": __version__,
        "status": "operational",
        "docs": "/api/docs",
        "health": "/api/v1/health",
        "ready": "/api/v1/ready",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "employee_service.app:app",
        host=settings.SERVICE_HOST,
        port=settings.SERVICE_PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
