"""
Health check endpoint for monitoring API status.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status

from api import __version__
from api.dependencies import get_store
from api.schemas.common import HealthCheckResponse
from series_store.storage.interfaces import SeriesRepository


router = APIRouter(prefix="/health", tags=["Health"])


@router.get(
    "",
    response_model=HealthCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Liveness check including the number of series held by the store.",
)
def health_check(
    store: SeriesRepository = Depends(get_store),
) -> HealthCheckResponse:
    """
    Basic health check endpoint.

    Returns 503 through ``get_store`` while the store is not seeded, so it is
    also usable as a readiness check.
    """
    return HealthCheckResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z",
        series={
            "editable": store.count(),
            "revision": store.revision_count(),
        },
    )
