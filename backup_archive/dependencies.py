"""
Document store connection and dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from pymongo import AsyncMongoClient

from backup_archive.config import Settings
from backup_archive.db import (
    ArchiveDbClient,
    InMemoryArchiveDbClient,
    MongoArchiveDbClient,
)
from backup_archive.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DbHandle:
    """
    Process-wide view of the document store.

    `client` is None when the initial connection failed; the server keeps
    answering requests in degraded mode until it is restarted.
    """

    client: Optional[ArchiveDbClient] = None

    @property
    def available(self) -> bool:
        return self.client is not None

    def require(self) -> ArchiveDbClient:
        if self.client is None:
            raise StorageUnavailableError()
        return self.client


UNAVAILABLE = DbHandle()


async def connect_db(settings: Settings) -> DbHandle:
    """
    Open the shared store connection. Never raises: failures are logged and
    an unavailable handle is returned so the server can still start.
    """
    if settings.use_in_memory_backends:
        logger.info("Using in-memory archive backend")
        return DbHandle(InMemoryArchiveDbClient())

    client: Optional[AsyncMongoClient] = None
    try:
        logger.info("Connecting to MongoDB...")
        if not settings.mongo_uri:
            raise ValueError("MONGO_URI is not set")
        client = AsyncMongoClient(
            settings.mongo_uri,
            serverSelectionTimeoutMS=settings.connect_timeout_ms,
            connectTimeoutMS=settings.connect_timeout_ms,
            maxPoolSize=settings.max_pool_size,
            minPoolSize=settings.min_pool_size,
        )
        db_client = MongoArchiveDbClient(
            client,
            settings.db_name,
            files_collection=settings.files_collection,
            metadata_collection=settings.metadata_collection,
        )
        await db_client.ping()
    except Exception as exc:
        logger.error("MongoDB connection failed: %s", exc)
        if client is not None:
            try:
                await client.close()
            except Exception:
                logger.debug("Ignoring error while closing failed client", exc_info=True)
        return UNAVAILABLE

    logger.info("Connected to MongoDB: %s", db_client.db.name)
    return DbHandle(db_client)


async def get_db_handle(request: Request) -> DbHandle:
    """Get the store handle from app state, unavailable if never set."""
    return getattr(request.app.state, "db_handle", UNAVAILABLE)
