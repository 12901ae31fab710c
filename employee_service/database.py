"""
MongoDB connection management.

Builds the asynchronous pymongo client from settings, with connection pool
limits, timeouts and a command listener that feeds Prometheus.
"""

import logging
from typing import Optional

from pymongo import AsyncMongoClient, monitoring
from pymongo.asynchronous.database import AsyncDatabase

from . import metrics
from .config import Settings

logger = logging.getLogger(__name__)


class MongoMetricsCommandListener(monitoring.CommandListener):
    """Records duration and outcome of every MongoDB command."""

    def started(self, event: monitoring.CommandStartedEvent) -> None:
        logger.debug(f"MongoDB command started: {event.command_name}")

    def succeeded(self, event: monitoring.CommandSucceededEvent) -> None:
        metrics.track_mongodb_command(
            event.command_name, True, event.duration_micros / 1_000_000
        )

    def failed(self, event: monitoring.CommandFailedEvent) -> None:
        logger.warning(f"MongoDB command failed: {event.command_name}: {event.failure}")
        metrics.track_mongodb_command(
            event.command_name, False, event.duration_micros / 1_000_000
        )


def create_mongo_client(settings: Settings) -> AsyncMongoClient:
    """
    Create the MongoDB client.

    The client connects lazily; no I/O happens here.

    Args:
        settings: Application settings

    Returns:
        Configured AsyncMongoClient
    """
    client: AsyncMongoClient = AsyncMongoClient(
        settings.MONGODB_URI,
        maxPoolSize=settings.MONGODB_MAX_POOL_SIZE,
        minPoolSize=settings.MONGODB_MIN_POOL_SIZE,
        maxIdleTimeMS=settings.MONGODB_MAX_IDLE_TIME_MS,
        connectTimeoutMS=settings.MONGODB_CONNECT_TIMEOUT_MS,
        socketTimeoutMS=settings.MONGODB_SOCKET_TIMEOUT_MS or None,
        serverSelectionTimeoutMS=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
        event_listeners=[MongoMetricsCommandListener()],
    )
    logger.info(
        f"MongoDB client created for {settings.MONGODB_URI.split('@')[-1]} "
        f"(pool {settings.MONGODB_MIN_POOL_SIZE}-{settings.MONGODB_MAX_POOL_SIZE})"
    )
    return client


def get_database(client: AsyncMongoClient, settings: Settings) -> AsyncDatabase:
    """Get the configured database handle."""
    return client[settings.MONGODB_DATABASE]


async def close_mongo_client(client: Optional[AsyncMongoClient]) -> None:
    """Close the MongoDB client if one was created."""
    if client is not None:
        await client.close()
        logger.info("MongoDB connection closed")
