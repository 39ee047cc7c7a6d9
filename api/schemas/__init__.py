"""
API schemas for request and response models.

This module defines Pydantic models used for API serialization.
"""

from api.schemas.common import (
    ErrorResponse,
    HealthCheckResponse,
)
from api.schemas.series import (
    AspectResponse,
    BrowseNodeResponse,
    CapabilitiesResponse,
    DownloadResultResponse,
    EntityResponse,
    GroupResponse,
    ListingResponse,
    SeriesPayload,
    SeriesResponse,
    SeriesRowResponse,
    VintageResponse,
)

__all__ = [
    "ErrorResponse",
    "HealthCheckResponse",
    "AspectResponse",
    "BrowseNodeResponse",
    "CapabilitiesResponse",
    "DownloadResultResponse",
    "EntityResponse",
    "GroupResponse",
    "ListingResponse",
    "SeriesPayload",
    "SeriesResponse",
    "SeriesRowResponse",
    "VintageResponse",
]
