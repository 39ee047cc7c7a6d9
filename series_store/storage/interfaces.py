"""
Storage layer interface contracts.

This module defines the Protocol that the series store implements and the
exception taxonomy that store operations raise. The HTTP adapter depends only
on this contract, so a different backing store can be swapped in without
touching the routers.
"""

from datetime import datetime
from typing import Dict, List, Optional, Protocol

from series_store.types import (
    BrowseNode,
    DownloadResult,
    Entity,
    Listing,
    Metadata,
    SeriesRecord,
    VintageInfo,
)


# ============================================================================
# Repository Interface (Protocol-based for type checking)
# ============================================================================


class SeriesRepository(Protocol):
    """Interface for series lookup, editing, revisions, browsing and search."""

    def get(self, name: str) -> Optional[SeriesRecord]:
        """
        Retrieve the current version of a series.

        Args:
            name: Primary name (matched case-insensitively)

        Returns:
            The series if found, None otherwise
        """
        ...

    def get_many(self, names: List[str]) -> List[DownloadResult[SeriesRecord]]:
        """
        Retrieve several series, reporting missing names inline.

        Args:
            names: Primary names, in request order

        Returns:
            One result per requested name
        """
        ...

    def get_many_meta(self, names: List[str]) -> List[DownloadResult[Entity]]:
        """Retrieve metadata only for several series."""
        ...

    def create_or_replace(
        self,
        candidate: SeriesRecord,
        expected_last_modified: Optional[datetime] = None,
        force_replace: bool = False,
    ) -> datetime:
        """
        Create a series or replace an existing one.

        Args:
            candidate: The new series, carrying its primary name in metadata
            expected_last_modified: Last-modified timestamp the caller observed
            force_replace: Replace regardless of the last-modified timestamp

        Returns:
            The new last-modified timestamp

        Raises:
            InvalidOperationError: If the series cannot be edited
            ConflictError: If the optimistic-concurrency check fails
        """
        ...

    def delete(self, name: str) -> bool:
        """
        Delete a series and remove it from every listing.

        Args:
            name: Primary name

        Returns:
            True if deleted, False if not found
        """
        ...

    def load_vintage(self, name: str, timestamp: datetime) -> SeriesRecord:
        """
        Load a revision-tracked series as known at ``timestamp``.

        Raises:
            NotFoundError: If the series does not track revisions
        """
        ...

    def list_vintages(self, name: str) -> List[VintageInfo]:
        """List vintage timestamps and labels of a revision-tracked series."""
        ...

    def load_release(self, name: str, nth_release: int) -> SeriesRecord:
        """Load the n-th release of a revision-tracked series."""
        ...

    def load_complete_history(self, name: str) -> Dict[datetime, SeriesRecord]:
        """Load every vintage of a revision-tracked series keyed by timestamp."""
        ...

    def load_tree(self, reference: Optional[str] = None) -> List[BrowseNode]:
        """
        Load the root of the browse tree, or the node list behind a reference.

        Raises:
            NotFoundError: If the reference is unknown
        """
        ...

    def list_series(self, reference: str) -> Listing:
        """
        Load a listing with the current metadata of every referenced series.

        Raises:
            NotFoundError: If the reference is unknown
        """
        ...

    def search(self, query: str) -> List[Metadata]:
        """
        Find series whose description contains ``query``.

        Raises:
            NotFoundError: If nothing matches
        """
        ...

    def count(self) -> int:
        """Number of editable series currently stored."""
        ...

    def revision_count(self) -> int:
        """Number of revision-tracked series."""
        ...


# ============================================================================
# Exceptions
# ============================================================================


class StorageError(Exception):
    """Base exception for storage operations."""

    pass


class NotFoundError(StorageError):
    """Exception when a series, reference or search result does not exist."""

    pass


class ConflictError(StorageError):
    """Exception for optimistic-concurrency violations on replace."""

    pass


class InvalidOperationError(StorageError):
    """Exception for operations the store structurally disallows."""

    pass


class InvalidSeriesError(InvalidOperationError):
    """Exception for series data that cannot be decoded or is inconsistent."""

    pass
