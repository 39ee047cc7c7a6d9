"""
Common API schemas used across endpoints.
"""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
    code: str = Field(..., description="Error code")
    timestamp: str = Field(..., description="ISO 8601 timestamp")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "LastModified does not match",
                "detail": "LastModified does not match",
                "code": "CONFLICT",
                "timestamp": "2024-01-15T10:30:00Z",
            }
        }
    )


class HealthCheckResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="API version")
    timestamp: str = Field(..., description="ISO 8601 timestamp")
    series: Dict[str, int] = Field(..., description="Number of series held by the store, by kind")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "healthy",
                "version": "1.0.0",
                "timestamp": "2024-01-15T10:30:00Z",
                "series": {"editable": 15, "revision": 1},
            }
        }
    )
