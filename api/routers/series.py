"""
Series lookup endpoints.

Batch loads of full series or metadata only. Missing names are reported
per item, so one bad name never fails the whole batch.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.dependencies import get_capabilities, get_store, require_capability
from api.schemas.series import (
    DownloadResultResponse,
    EntityResponse,
    SeriesResponse,
    entity_result_to_response,
    series_result_to_response,
)
from series_store.storage.interfaces import SeriesRepository
from series_store.types import Capabilities

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Series"])


def _check_batch(names: List[str], capabilities: Capabilities) -> None:
    if not names:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No series names given",
        )
    if len(names) > 1 and not capabilities.allow_multiple_series_per_request:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only one series per request is supported",
        )


@router.get(
    "/loadseries",
    response_model=List[DownloadResultResponse[SeriesResponse]],
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Load series",
    description="Load one or more series by name. Names that do not exist are reported inline.",
)
def load_series(
    names: List[str] = Query(default=[], alias="n", description="Series names"),
    store: SeriesRepository = Depends(get_store),
    capabilities: Capabilities = Depends(get_capabilities),
) -> List[DownloadResultResponse[SeriesResponse]]:
    """
    Load series by name.

    Args:
        names: Series names, matched case-insensitively
        store: Series store
        capabilities: Capability descriptor

    Returns:
        One ``{"data": series}`` or ``{"error": message}`` item per name

    Raises:
        HTTPException: 404 if no names were given
    """
    _check_batch(names, capabilities)
    results = store.get_many(names)
    logger.debug(f"Loaded {sum(r.ok for r in results)}/{len(results)} series")
    return [series_result_to_response(r) for r in results]


@router.get(
    "/loadmeta",
    response_model=List[DownloadResultResponse[EntityResponse]],
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Load series metadata",
    description="Load metadata only for one or more series by name.",
    dependencies=[Depends(require_capability("meta"))],
)
def load_meta(
    names: List[str] = Query(default=[], alias="n", description="Series names"),
    store: SeriesRepository = Depends(get_store),
    capabilities: Capabilities = Depends(get_capabilities),
) -> List[DownloadResultResponse[EntityResponse]]:
    _check_batch(names, capabilities)
    return [entity_result_to_response(r) for r in store.get_many_meta(names)]
