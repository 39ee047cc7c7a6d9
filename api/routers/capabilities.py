"""
Capability endpoint.

Clients call this once per session to learn which optional operations the
server implements.
"""

from fastapi import APIRouter, Depends, status

from api.dependencies import get_capabilities
from api.schemas.series import CapabilitiesResponse
from series_store.types import Capabilities

router = APIRouter(tags=["Capabilities"])


@router.get(
    "/getcapabilities",
    response_model=CapabilitiesResponse,
    status_code=status.HTTP_200_OK,
    summary="Get capabilities",
    description="Declare which optional operations this server supports.",
)
async def get_server_capabilities(
    capabilities: Capabilities = Depends(get_capabilities),
) -> CapabilitiesResponse:
    return CapabilitiesResponse.from_capabilities(capabilities)
