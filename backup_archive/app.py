"""
FastAPI application entry point for the backup archive server.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.status import HTTP_204_NO_CONTENT

from backup_archive.config import get_settings
from backup_archive.dependencies import connect_db
from backup_archive.exceptions import (
    RequestTooLargeError,
    error_body,
    install_exception_handlers,
)
from backup_archive.routes import router

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store connection once; a failure leaves the app degraded."""
    app.state.db_handle = await connect_db(get_settings())
    if app.state.db_handle.available:
        logger.info("Backup archive server ready")
    else:
        logger.warning("Backup archive server ready (DB connection failed)")

    yield

    if app.state.db_handle.available:
        await app.state.db_handle.client.close()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Backup Archive File Server", version="0.1.0", lifespan=lifespan
    )
    install_exception_handlers(app)

    @app.middleware("http")
    async def json_body_limit(request: Request, call_next):
        content_type = request.headers.get("content-type", "")
        if not content_type.startswith("application/json"):
            return await call_next(request)

        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit():
            size = int(content_length)
        else:
            # Chunked bodies carry no length up front; read them to measure.
            size = len(await request.body())
        if size > settings.max_json_body_bytes:
            exc = RequestTooLargeError()
            return JSONResponse(
                status_code=exc.status_code, content=error_body(exc.detail)
            )
        return await call_next(request)

    # Registered last so it is the outermost middleware.
    @app.middleware("http")
    async def cors_headers(request: Request, call_next):
        if request.method == "OPTIONS":
            response = Response(status_code=HTTP_204_NO_CONTENT)
        else:
            response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    app.include_router(router)
    return app


app = create_app()
