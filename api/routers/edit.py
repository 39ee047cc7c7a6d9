"""
Series editing endpoints.

Create, replace and remove editable series. Replacing is guarded by the
last-modified timestamp the client last saw.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from api.dependencies import get_store, parse_timestamp, require_capability
from api.schemas.series import SeriesPayload
from series_store.codec import decode_series, encode_datetime
from series_store.storage.interfaces import SeriesRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Edit"], dependencies=[Depends(require_capability("edit_series"))])


@router.post(
    "/createseries",
    response_model=str,
    status_code=status.HTTP_200_OK,
    summary="Create or replace series",
    description=(
        "Store a series. An existing series is only replaced when forceReplace is set "
        "or lastModified matches its stored timestamp."
    ),
)
def create_series(
    payload: SeriesPayload,
    last_modified: Optional[str] = Query(
        None, alias="lastModified", description="Timestamp returned by the previous save or load"
    ),
    force_replace: Optional[bool] = Query(
        None, alias="forceReplace", description="Replace regardless of lastModified"
    ),
    store: SeriesRepository = Depends(get_store),
) -> str:
    """
    Create or replace a series.

    Args:
        payload: The series
        last_modified: Optimistic-concurrency token
        force_replace: Skip the concurrency check
        store: Series store

    Returns:
        The new last-modified timestamp

    Raises:
        InvalidSeriesError: If the body cannot be decoded (400)
        InvalidOperationError: If the series tracks revisions (400)
        ConflictError: If the concurrency check fails (409)
    """
    record = decode_series(payload.to_wire())
    stamp = store.create_or_replace(
        record,
        expected_last_modified=parse_timestamp(last_modified, "lastModified"),
        force_replace=bool(force_replace),
    )
    return encode_datetime(stamp)


@router.get(
    "/removeseries",
    status_code=status.HTTP_200_OK,
    summary="Remove series",
    description="Remove a series and every listing row reference to it.",
)
def remove_series(
    name: str = Query(..., alias="n", description="Series name"),
    store: SeriesRepository = Depends(get_store),
) -> Response:
    if not store.delete(name):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Series {name} not found",
        )
    return Response(status_code=status.HTTP_200_OK)
