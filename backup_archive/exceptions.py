"""Custom exceptions and error rendering for the archive API."""

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_404_NOT_FOUND,
    HTTP_413_CONTENT_TOO_LARGE,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

logger = logging.getLogger(__name__)


class StorageUnavailableError(RuntimeError):
    """Raised when no document store connection was ever established."""

    def __init__(self):
        super().__init__("document store is not connected")


class ArchiveApiError(HTTPException):
    """Base exception for archive API errors."""
    pass


class FileNotFoundInArchiveError(ArchiveApiError):
    def __init__(self):
        super().__init__(HTTP_404_NOT_FOUND, "File not found")


class CatalogQueryError(ArchiveApiError):
    def __init__(self, message: str):
        super().__init__(HTTP_500_INTERNAL_SERVER_ERROR, message)


class RequestTooLargeError(ArchiveApiError):
    def __init__(self):
        super().__init__(HTTP_413_CONTENT_TOO_LARGE, "Request body too large")


def error_body(message: str) -> dict:
    return {"success": False, "error": message}


async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error"),
    )


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
