"""
Browse tree endpoints.

The tree is served one node list at a time; leaves point at listings that
are resolved against the current series metadata on every request.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_store, require_capability
from api.schemas.series import (
    BrowseNodeResponse,
    ListingResponse,
    browse_node_to_response,
    listing_to_response,
)
from series_store.storage.interfaces import SeriesRepository

router = APIRouter(tags=["Browse"], dependencies=[Depends(require_capability("browse"))])


@router.get(
    "/loadtree",
    response_model=List[BrowseNodeResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Load browse tree",
    description="Load the root of the browse tree, or the node list behind a reference.",
)
def load_tree(
    reference: Optional[str] = Query(None, description="Node list reference; blank for the root"),
    store: SeriesRepository = Depends(get_store),
) -> List[BrowseNodeResponse]:
    return [browse_node_to_response(node) for node in store.load_tree(reference)]


@router.get(
    "/listseries",
    response_model=ListingResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="List series",
    description="Load the listing behind a browse tree leaf with the metadata of every series in it.",
)
def list_series(
    reference: str = Query(..., description="Listing reference"),
    store: SeriesRepository = Depends(get_store),
) -> ListingResponse:
    """
    Load a listing.

    Names that no longer resolve get a null ``entityMeta`` entry.

    Raises:
        NotFoundError: If the reference is blank or unknown
    """
    return listing_to_response(store.list_series(reference))
