"""
FastAPI main application for the series provider API.

This module initializes the FastAPI app, seeds the series store, configures
middleware and error handlers, and includes all API routers.
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import __version__
from api.schemas.common import ErrorResponse
from series_store import config
from series_store.capabilities import load_capabilities
from series_store.observability.logging import log_context, setup_logging
from series_store.observability.metrics import (
    api_request_counter,
    api_request_duration,
    get_metrics,
)
from series_store.seed import load_seed
from series_store.storage.interfaces import (
    ConflictError,
    InvalidOperationError,
    NotFoundError,
    SeriesRepository,
    StorageError,
)
from series_store.types import Capabilities

logger = logging.getLogger(__name__)


# Application state
class AppState:
    """Application state container."""

    def __init__(self):
        self.store: Optional[SeriesRepository] = None
        self.capabilities: Capabilities = Capabilities()
        self.started_at: Optional[datetime] = None


app_state = AppState()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager for startup and shutdown events.

    Seeds the series store and reads the capability flags.
    """
    setup_logging(level=config.LOG_LEVEL, json_format=config.LOG_JSON)
    logger.info("Starting series provider API...")
    app_state.started_at = datetime.now(timezone.utc)

    app_state.capabilities = load_capabilities()
    app_state.store = load_seed(config.SEED_PATH)

    logger.info("API startup complete")

    yield

    logger.info("Shutting down series provider API...")
    app_state.store = None


# Create FastAPI application
app = FastAPI(
    title="Series Provider API",
    description="""
    ## Time-series data provider

    Serves time series by name, optionally as of a point in time (vintage),
    as the n-th release or as the complete revision history.

    ### Features

    - **Batch loading**: Several series per request, missing names reported inline
    - **Revision history**: Vintage, release and complete history views
    - **Editing**: Create, replace and remove with optimistic concurrency
    - **Browsing**: Hierarchical tree with series listings
    - **Search**: Free-text search over series descriptions
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)


# CORS middleware configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def track_requests(request: Request, call_next):
    """Record request count and latency per route."""
    endpoint = request.url.path
    start_time = time.perf_counter()
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    with log_context(method=request.method, endpoint=endpoint):
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            api_request_duration.labels(method=request.method, endpoint=endpoint).observe(
                time.perf_counter() - start_time
            )
            api_request_counter.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code,
            ).inc()


# Exception handlers

def _utc_now() -> str:
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"


def _error_response(status_code: int, error: str, detail: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            detail=detail,
            code=code,
            timestamp=_utc_now(),
        ).model_dump(),
    )


@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError):
    """Map store exceptions to status codes."""
    if isinstance(exc, NotFoundError):
        return _error_response(status.HTTP_404_NOT_FOUND, str(exc), str(exc), "NOT_FOUND")
    if isinstance(exc, ConflictError):
        return _error_response(status.HTTP_409_CONFLICT, str(exc), str(exc), "CONFLICT")
    if isinstance(exc, InvalidOperationError):
        logger.warning(f"Bad request on {request.url.path}: {exc}")
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc), str(exc), "BAD_REQUEST")
    logger.error(f"Storage error on {request.url.path}: {exc}", exc_info=True)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Storage Error", str(exc), "STORAGE_ERROR"
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with consistent error response format."""
    return _error_response(exc.status_code, str(exc.detail), str(exc.detail), f"HTTP_{exc.status_code}")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation Error", str(exc), "VALIDATION_ERROR"
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal Server Error",
        "An unexpected error occurred",
        "INTERNAL_ERROR",
    )


# Root endpoint
@app.get("/", tags=["Root"])
async def root() -> Dict[str, Any]:
    """
    API root endpoint providing basic information.
    """
    return {
        "name": "Series Provider API",
        "version": __version__,
        "status": "operational",
        "docs": "/docs",
        "endpoints": {
            "capabilities": "/getcapabilities",
            "series": "/loadseries",
            "browse": "/loadtree",
            "search": "/searchseries",
            "health": "/health",
            "metrics": "/metrics",
        },
    }


@app.get("/metrics", tags=["Monitoring"], response_class=Response)
async def prometheus_metrics():
    """Expose Prometheus metrics in text format."""
    return Response(content=get_metrics(), media_type=CONTENT_TYPE_LATEST)


# Include routers
from api.routers import browse, capabilities, edit, health, revisions, search, series  # noqa: E402

app.include_router(capabilities.router)
app.include_router(series.router)
app.include_router(revisions.router)
app.include_router(edit.router)
app.include_router(browse.router)
app.include_router(search.router)
app.include_router(health.router)


def main():
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=config.HOST,
        port=config.PORT,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
