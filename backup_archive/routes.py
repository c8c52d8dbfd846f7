"""
HTTP routes for the backup archive API.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from backup_archive.catalog import (
    list_backups as read_backups,
    list_downloadable,
    list_files as read_files,
    parse_limit,
)
from backup_archive.config import Settings, get_settings
from backup_archive.content import resolve_download
from backup_archive.dependencies import DbHandle, get_db_handle
from backup_archive.exceptions import CatalogQueryError, FileNotFoundInArchiveError
from backup_archive.health import check_database
from backup_archive.schemas import (
    ErrorResponse,
    HealthResponse,
    ListBackupsResponse,
    ListDownloadsResponse,
    ListFilesResponse,
    RootResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_ERRORS = {500: {"model": ErrorResponse}}


@router.get("/", response_model=RootResponse)
def root():
    return RootResponse(
        message="📦 MongoDB File Server", status="running", memory="optimized"
    )


@router.get("/health", response_model=HealthResponse)
async def health(
    db: DbHandle = Depends(get_db_handle),
    settings: Settings = Depends(get_settings),
):
    """
    Process liveness is always reported as healthy; the database state is a
    secondary signal so uptime checks are not tripped by a store outage.
    """
    database = await check_database(db, timeout=settings.query_timeout_seconds)
    return HealthResponse(database=database)


@router.get(
    "/backups",
    response_model=ListBackupsResponse,
    response_model_exclude_unset=True,
    responses=_ERRORS,
)
async def list_backups(
    limit: Optional[str] = Query(None),
    db: DbHandle = Depends(get_db_handle),
    settings: Settings = Depends(get_settings),
):
    count = parse_limit(limit, settings.default_backup_limit, settings.max_list_limit)
    try:
        result = await read_backups(db, count, timeout=settings.query_timeout_seconds)
        return ListBackupsResponse(**result)
    except Exception:
        logger.exception("Failed to fetch backups")
        raise CatalogQueryError("Failed to fetch backups")


@router.get(
    "/downloads",
    response_model=ListDownloadsResponse,
    response_model_exclude_unset=True,
    responses=_ERRORS,
)
async def list_downloads(
    limit: Optional[str] = Query(None),
    db: DbHandle = Depends(get_db_handle),
    settings: Settings = Depends(get_settings),
):
    count = parse_limit(limit, settings.default_backup_limit, settings.max_list_limit)
    try:
        result = await list_downloadable(
            db, count, timeout=settings.query_timeout_seconds
        )
        return ListDownloadsResponse(**result)
    except Exception:
        logger.exception("Failed to fetch downloads")
        raise CatalogQueryError("Failed to fetch downloads")


@router.get(
    "/backups/{backup_id}/files",
    response_model=ListFilesResponse,
    response_model_exclude_unset=True,
    responses=_ERRORS,
)
async def list_files(
    backup_id: str,
    limit: Optional[str] = Query(None),
    db: DbHandle = Depends(get_db_handle),
    settings: Settings = Depends(get_settings),
):
    count = parse_limit(limit, settings.default_file_limit, settings.max_list_limit)
    try:
        result = await read_files(
            db, backup_id, count, timeout=settings.query_timeout_seconds
        )
        return ListFilesResponse(**result)
    except Exception:
        logger.exception("[%s] Failed to fetch files", backup_id)
        raise CatalogQueryError("Failed to fetch files")


@router.get(
    "/download/{backup_id}/{relative_path:path}",
    response_class=Response,
    responses={404: {"model": ErrorResponse}, **_ERRORS},
)
async def download_file(
    backup_id: str,
    relative_path: str,
    db: DbHandle = Depends(get_db_handle),
    settings: Settings = Depends(get_settings),
):
    try:
        download = await resolve_download(
            db, backup_id, relative_path, timeout=settings.query_timeout_seconds
        )
    except Exception:
        logger.exception("[%s] Failed to download %s", backup_id, relative_path)
        raise CatalogQueryError("Failed to download file")

    if download is None:
        raise FileNotFoundInArchiveError()

    return Response(
        content=download.content,
        media_type=download.content_type,
        headers=download.headers,
    )
