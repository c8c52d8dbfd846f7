"""
Pydantic schemas for the backup archive API.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel


class RootResponse(BaseModel):
    message: str
    status: str
    memory: str


class HealthResponse(BaseModel):
    success: Literal[True] = True
    status: Literal["healthy"] = "healthy"
    database: Literal["connected", "disconnected", "error"]


class BackupSummary(BaseModel):
    # Documents come from an external ingestion process; values pass through
    # with whatever type they were stored as.
    backup_id: Any = None
    backup_name: Any = None
    timestamp: Any = None
    total_size: Any = None


class DownloadableBackup(BaseModel):
    backup_id: Any = None
    backup_name: Any = None
    timestamp: Any = None


class ListBackupsResponse(BaseModel):
    success: Literal[True] = True
    count: int
    backups: list[BackupSummary]


class ListDownloadsResponse(BaseModel):
    success: Literal[True] = True
    count: int
    backups: list[DownloadableBackup]


class FileSummary(BaseModel):
    relative_path: Any = None
    file_size: Any = None
    filename: Any = None


class ListFilesResponse(BaseModel):
    success: Literal[True] = True
    backup_id: str
    count: int
    files: list[FileSummary]


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    error: str
