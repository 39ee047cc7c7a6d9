"""
Search endpoint.

Free-text search over series descriptions. The query is matched as a
case-insensitive substring; there is no ranking.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_store, require_capability
from series_store.codec import encode_metadata
from series_store.storage.interfaces import SeriesRepository

router = APIRouter(tags=["Search"], dependencies=[Depends(require_capability("search"))])


@router.get(
    "/searchseries",
    response_model=List[Dict[str, Any]],
    status_code=status.HTTP_200_OK,
    summary="Search series",
    description="Find series whose description contains the query text.",
)
def search_series(
    query: str = Query(..., description="Text to look for"),
    store: SeriesRepository = Depends(get_store),
) -> List[Dict[str, Any]]:
    """
    Search series metadata.

    Args:
        query: Text to look for, case-insensitive
        store: Series store

    Returns:
        Metadata of every matching series

    Raises:
        NotFoundError: If nothing matches (404)
    """
    return [encode_metadata(meta) for meta in store.search(query)]
