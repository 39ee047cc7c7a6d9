"""
Revision history endpoints.

Point-in-time (vintage), n-th release and complete history views of
series that store their revision history.
"""

from typing import Dict, List

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_store, parse_timestamp, require_capability
from api.schemas.series import (
    SeriesResponse,
    VintageResponse,
    history_to_response,
    series_to_response,
    vintage_to_response,
)
from series_store.storage.interfaces import SeriesRepository

router = APIRouter(tags=["Revisions"])


@router.get(
    "/loadvintage",
    response_model=SeriesResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Load vintage",
    description="Load a series as it was known at a point in time.",
    dependencies=[Depends(require_capability("revisions"))],
)
def load_vintage(
    name: str = Query(..., alias="n", description="Series name"),
    timestamp: str = Query(..., description="Point in time (ISO 8601); naive values are UTC"),
    store: SeriesRepository = Depends(get_store),
) -> SeriesResponse:
    """
    Load the latest vintage at or before ``timestamp``.

    A timestamp before the first vintage returns the first vintage.

    Returns:
        Series tagged with ``RevisionSeriesType`` and ``RevisionTimeStamp``

    Raises:
        NotFoundError: If the series does not store revisions
    """
    record = store.load_vintage(name, parse_timestamp(timestamp, "timestamp"))
    return series_to_response(record)


@router.get(
    "/loadvintagetimestamps",
    response_model=List[VintageResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="List vintages",
    description="List the vintage timestamps of a series, each with an optional label.",
    dependencies=[Depends(require_capability("revisions"))],
)
def load_vintage_timestamps(
    name: str = Query(..., alias="n", description="Series name"),
    store: SeriesRepository = Depends(get_store),
) -> List[VintageResponse]:
    return [vintage_to_response(v) for v in store.list_vintages(name)]


@router.get(
    "/loadrelease",
    response_model=SeriesResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Load release",
    description="Load the n-th release of a series; numbers past the last release return the last one.",
    dependencies=[Depends(require_capability("revisions_release"))],
)
def load_release(
    name: str = Query(..., alias="n", description="Series name"),
    nth_release: int = Query(..., alias="nthrelease", ge=0, description="Release number, 0 is the first"),
    store: SeriesRepository = Depends(get_store),
) -> SeriesResponse:
    return series_to_response(store.load_release(name, nth_release))


@router.get(
    "/loadcompletehistory",
    response_model=Dict[str, SeriesResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Load complete history",
    description="Load every vintage of a series keyed by its timestamp.",
    dependencies=[Depends(require_capability("revisions_complete_history"))],
)
def load_complete_history(
    name: str = Query(..., alias="n", description="Series name"),
    store: SeriesRepository = Depends(get_store),
) -> Dict[str, SeriesResponse]:
    return history_to_response(store.load_complete_history(name))
