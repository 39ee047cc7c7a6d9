"""
FastAPI dependency injection providers.

This module provides the store and capability descriptor held in the
application state, capability gating for optional routes, and parsing of
timestamp query parameters.
"""

from datetime import datetime
from typing import Callable, Optional

from fastapi import Depends, HTTPException, status

from series_store.codec import parse_datetime
from series_store.storage.interfaces import SeriesRepository
from series_store.types import Capabilities


# Store dependencies

async def get_store() -> SeriesRepository:
    """
    Get the series store from application state.

    Returns:
        The process-wide series repository

    Raises:
        HTTPException: If the store has not been seeded yet
    """
    from api.main import app_state

    if app_state.store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Series store not initialized",
        )

    return app_state.store


async def get_capabilities() -> Capabilities:
    """Get the capability descriptor from application state."""
    from api.main import app_state
    return app_state.capabilities


# Capability gating

def require_capability(name: str) -> Callable:
    """
    Build a dependency that refuses a route whose capability is switched off.

    Args:
        name: Capability field name, e.g. ``"search"``

    Returns:
        Dependency raising 404 when the capability is disabled
    """
    if name not in Capabilities.model_fields:
        raise ValueError(f"Unknown capability {name}")

    async def check(capabilities: Capabilities = Depends(get_capabilities)) -> None:
        if not getattr(capabilities, name):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Operation not supported: {name}",
            )

    return check


# Query parsing

def parse_timestamp(value: Optional[str], parameter: str) -> Optional[datetime]:
    """
    Parse an ISO 8601 query parameter.

    Args:
        value: Raw query value, may be None
        parameter: Query parameter name, for the error message

    Returns:
        The parsed datetime, or None when absent

    Raises:
        HTTPException: 422 if the value is not an ISO 8601 date
    """
    if value is None:
        return None
    try:
        return parse_datetime(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid {parameter}: {value!r} is not an ISO 8601 date",
        )
