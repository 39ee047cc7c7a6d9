"""
Storage layer for the series server.

This package provides the repository contract, its exception taxonomy and
the in-memory implementation.
"""

# Interface exports
from series_store.storage.interfaces import (
    ConflictError,
    InvalidOperationError,
    InvalidSeriesError,
    NotFoundError,
    SeriesRepository,
    StorageError,
)

# Concrete implementations
from series_store.storage.memory import InMemorySeriesStore

__all__ = [
    # Interfaces
    "SeriesRepository",
    # Exceptions
    "StorageError",
    "NotFoundError",
    "ConflictError",
    "InvalidOperationError",
    "InvalidSeriesError",
    # Implementations
    "InMemorySeriesStore",
]
