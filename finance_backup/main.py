"""Finance Backup - FastAPI Application."""

import os
import time
import traceback
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from finance_backup import __version__
from finance_backup.config import settings
from finance_backup.logger import configure_logging, get_logger
from finance_backup.routers import backups

# Initialize logging early
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan."""
    logger.info(
        "Application started",
        version=__version__,
        environment=settings.environment,
        data_source=settings.data_source,
        export_sink=settings.export_sink,
    )
    yield
    if settings.data_source == "sql":
        from finance_backup.database import engine

        await engine.dispose()
    logger.info("Application shutting down")


app = FastAPI(
    title="Finance Backup API",
    description="Snapshot exports and interactive reports for the Blessin Finance tables",
    version=__version__,
    lifespan=lifespan,
)


@app.middleware("http")
async def logging_middleware(request: Request, call_next: Any) -> Response:
    """Middleware to inject Request-ID and log request details."""
    request_id = request.headers.get("X-Request-ID", str(uuid4()))

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
    )

    start_time = time.perf_counter()
    try:
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        logger.info(
            "HTTP Request",
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2),
        )

        response.headers["X-Request-ID"] = request_id
        return response
    except Exception as exc:
        duration = time.perf_counter() - start_time
        logger.exception(
            "HTTP Request Failed",
            duration_ms=round(duration * 1000, 2),
            error=str(exc),
        )
        raise


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler to ensure JSON response."""
    # Only show exception details in DEBUG mode
    if settings.debug:
        detail = str(exc)
        trace = traceback.format_exc()
    else:
        detail = "An internal server error occurred. Please try again later."
        trace = None

    return JSONResponse(
        status_code=500,
        content={
            "detail": detail,
            "trace": trace,
            "request_id": structlog.contextvars.get_contextvars().get("request_id"),
        },
    )


app.include_router(backups.router)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Liveness probe with the active data source and sink."""
    return JSONResponse(
        status_code=200,
        content={
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "git_sha": os.getenv("GIT_COMMIT_SHA", "unknown"),
            "version": __version__,
            "data_source": settings.data_source,
            "export_sink": settings.export_sink,
        },
    )
