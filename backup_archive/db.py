"""
Document store abstraction for MongoDB and an in-memory test implementation.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Iterable, Optional, Protocol, TypeVar

from pymongo import AsyncMongoClient, DESCENDING

BACKUP_FIELDS = ("backup_id", "backup_name", "timestamp", "total_size")
DOWNLOAD_FIELDS = ("backup_id", "backup_name", "timestamp")
FILE_FIELDS = ("relative_path", "file_size", "filename")

T = TypeVar("T")


async def with_timeout(awaitable: Awaitable[T], timeout: Optional[float]) -> T:
    """Await a store call, bounded by `timeout` seconds when one is given."""
    if timeout is None:
        return await awaitable
    return await asyncio.wait_for(awaitable, timeout)


class ArchiveDbClient(Protocol):
    """Read-only queries the API needs from the backup archive."""

    async def find_backups(
        self, fields: Iterable[str], limit: int
    ) -> list[dict]:
        ...

    async def find_files(
        self, backup_id: str, fields: Iterable[str], limit: int
    ) -> list[dict]:
        ...

    async def find_file(
        self, backup_id: str, relative_path: str
    ) -> Optional[dict]:
        ...

    async def ping(self) -> None:
        ...

    async def close(self) -> None:
        ...


def _projection(fields: Iterable[str]) -> dict:
    projection = {name: 1 for name in fields}
    projection["_id"] = 0
    return projection


class MongoArchiveDbClient:
    """
    PyMongo async implementation over the `backup_metadata` and `files` collections.
    """

    def __init__(
        self,
        client: AsyncMongoClient,
        db_name: Optional[str],
        *,
        files_collection: str = "files",
        metadata_collection: str = "backup_metadata",
    ):
        self.client = client
        self.db = client[db_name] if db_name else client.get_default_database()
        self.files = self.db[files_collection]
        self.metadata = self.db[metadata_collection]

    async def find_backups(
        self, fields: Iterable[str], limit: int
    ) -> list[dict]:
        cursor = (
            self.metadata.find({}, projection=_projection(fields))
            .sort("timestamp", DESCENDING)
            .limit(limit)
        )
        return await cursor.to_list(length=None)

    async def find_files(
        self, backup_id: str, fields: Iterable[str], limit: int
    ) -> list[dict]:
        cursor = self.files.find(
            {"backup_id": backup_id, "is_directory": {"$ne": True}},
            projection=_projection(fields),
        ).limit(limit)
        return await cursor.to_list(length=None)

    async def find_file(
        self, backup_id: str, relative_path: str
    ) -> Optional[dict]:
        return await self.files.find_one(
            {
                "backup_id": backup_id,
                "relative_path": relative_path,
                "is_chunked": {"$ne": True},
            }
        )

    async def ping(self) -> None:
        await self.db.command("ping")

    async def close(self) -> None:
        await self.client.close()


def _project(doc: dict, fields: Iterable[str]) -> dict:
    return {name: doc[name] for name in fields if name in doc}


@dataclass
class InMemoryArchiveDbClient:
    """Test double mirroring the Mongo query semantics."""

    backups: list[dict] = field(default_factory=list)
    files: list[dict] = field(default_factory=list)
    ping_error: Optional[Exception] = None
    closed: bool = False

    async def find_backups(
        self, fields: Iterable[str], limit: int
    ) -> list[dict]:
        # Missing timestamps sort like nulls in Mongo: last when descending.
        dated = [doc for doc in self.backups if doc.get("timestamp") is not None]
        undated = [doc for doc in self.backups if doc.get("timestamp") is None]
        dated.sort(key=lambda doc: doc["timestamp"], reverse=True)
        fields = tuple(fields)
        return [_project(doc, fields) for doc in (dated + undated)[:limit]]

    async def find_files(
        self, backup_id: str, fields: Iterable[str], limit: int
    ) -> list[dict]:
        fields = tuple(fields)
        matches = [
            _project(doc, fields)
            for doc in self.files
            if doc.get("backup_id") == backup_id
            and doc.get("is_directory") is not True
        ]
        return matches[:limit]

    async def find_file(
        self, backup_id: str, relative_path: str
    ) -> Optional[dict]:
        for doc in self.files:
            if (
                doc.get("backup_id") == backup_id
                and doc.get("relative_path") == relative_path
                and doc.get("is_chunked") is not True
            ):
                return dict(doc)
        return None

    async def ping(self) -> None:
        if self.ping_error is not None:
            raise self.ping_error

    async def close(self) -> None:
        self.closed = True

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.backups.clear()
        self.files.clear()
        self.ping_error = None
