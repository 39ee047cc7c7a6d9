"""
Shared type definitions for the series provider.

This module contains the value types used across the store, the revision
ledger, the browse/listing indexes and the HTTP adapter. Every model here is
immutable: edits produce new instances.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, Generic, Mapping, Optional, Tuple, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ============================================================================
# Well-known metadata keys
# ============================================================================

PRIM_NAME = "PrimName"
DESCRIPTION = "Description"
LAST_MODIFIED = "LastModifiedTimeStamp"
REVISION_SERIES_TYPE = "RevisionSeriesType"
REVISION_TIMESTAMP = "RevisionTimeStamp"
REVISION_SERIES_NTH = "RevisionSeriesNth"
STORES_REVISION_HISTORY = "StoresRevisionHistory"
FIRST_REVISION_TIMESTAMP = "FirstRevisionTimeStamp"
LAST_REVISION_TIMESTAMP = "LastRevisionTimeStamp"

SERIES_NOT_FOUND = "Series could not be found!"


# ============================================================================
# Metadata values
# ============================================================================

MetaValue = Union[int, float, str, datetime, Tuple[str, ...]]
Metadata = Dict[str, MetaValue]


class MetaKind(str, Enum):
    """Kind of a metadata value."""

    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    DATE = "date"
    STRING_ARRAY = "string_array"


def meta_kind(value: MetaValue) -> MetaKind:
    """
    Classify a metadata value.

    Args:
        value: A decoded metadata value

    Returns:
        The kind of the value

    Raises:
        TypeError: If the value is not one of the supported kinds
    """
    # bool is an int subclass and is never a valid metadata value
    if isinstance(value, bool):
        raise TypeError("Boolean metadata values are not supported")
    if isinstance(value, int):
        return MetaKind.INTEGER
    if isinstance(value, float):
        return MetaKind.FLOAT
    if isinstance(value, str):
        return MetaKind.STRING
    if isinstance(value, datetime):
        return MetaKind.DATE
    if isinstance(value, tuple) and all(isinstance(v, str) for v in value):
        return MetaKind.STRING_ARRAY
    raise TypeError(f"Unsupported metadata value: {value!r}")


def merge_metadata(*layers: Optional[Mapping[str, MetaValue]]) -> Metadata:
    """Merge metadata maps left to right; later layers win on key collisions."""
    merged: Metadata = {}
    for layer in layers:
        if layer:
            merged.update(layer)
    return merged


# ============================================================================
# Series
# ============================================================================


class SeriesRecord(BaseModel):
    """
    A time series: metadata, values and optional dates / per-value metadata.

    Values are floats; missing observations are NaN. When ``dates`` is present
    it is index-aligned with ``values``, otherwise the index is implicit.
    """

    model_config = ConfigDict(frozen=True)

    metadata: Metadata = Field(default_factory=dict)
    values: Tuple[float, ...] = ()
    dates: Optional[Tuple[datetime, ...]] = None
    per_value_metadata: Optional[Tuple[Optional[Metadata], ...]] = None

    @model_validator(mode="after")
    def _check_alignment(self) -> "SeriesRecord":
        if self.dates is not None and len(self.dates) != len(self.values):
            raise ValueError(
                f"dates has {len(self.dates)} entries but values has {len(self.values)}"
            )
        if self.per_value_metadata is not None and len(self.per_value_metadata) != len(self.values):
            raise ValueError(
                f"per_value_metadata has {len(self.per_value_metadata)} entries "
                f"but values has {len(self.values)}"
            )
        return self

    @property
    def name(self) -> Optional[str]:
        """Primary name, if the metadata carries one."""
        name = self.metadata.get(PRIM_NAME)
        return name if isinstance(name, str) else None

    @property
    def last_modified(self) -> Optional[datetime]:
        stamp = self.metadata.get(LAST_MODIFIED)
        return stamp if isinstance(stamp, datetime) else None

    def with_metadata(self, metadata: Mapping[str, MetaValue]) -> "SeriesRecord":
        """Return a copy of this record whose metadata is replaced."""
        return self.model_copy(update={"metadata": dict(metadata)})

    def overlay(self, overlay: Mapping[str, MetaValue]) -> "SeriesRecord":
        """Return a copy of this record with ``overlay`` merged over its metadata."""
        return self.with_metadata(merge_metadata(self.metadata, overlay))


class Entity(BaseModel):
    """Metadata-only view of a series."""

    model_config = ConfigDict(frozen=True)

    metadata: Metadata


T = TypeVar("T")


class DownloadResult(BaseModel, Generic[T]):
    """
    Per-item result inside a batch load.

    Exactly one of ``data`` and ``error`` is set.
    """

    model_config = ConfigDict(frozen=True)

    data: Optional[T] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _check_exclusive(self) -> "DownloadResult":
        if (self.data is None) == (self.error is None):
            raise ValueError("DownloadResult needs exactly one of data or error")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None


class VintageInfo(BaseModel):
    """Timestamp and optional label of one vintage."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    label: Optional[str] = None


# ============================================================================
# Browse tree and listings
# ============================================================================


class BrowseNode(BaseModel):
    """
    A node in the browse tree.

    A node carries exactly one of: inline ``children``, a
    ``children_reference`` to another node list, or a ``series_reference`` to
    a listing.
    """

    model_config = ConfigDict(frozen=True)

    description: str
    children: Optional[Tuple["BrowseNode", ...]] = None
    children_reference: Optional[str] = None
    series_reference: Optional[str] = None

    @model_validator(mode="after")
    def _check_single_target(self) -> "BrowseNode":
        targets = [
            self.children is not None,
            self.children_reference is not None,
            self.series_reference is not None,
        ]
        if sum(targets) != 1:
            raise ValueError(
                f"Browse node {self.description!r} must have exactly one of "
                "children, children_reference or series_reference"
            )
        return self


BrowseNode.model_rebuild()


class Aspect(BaseModel):
    """A display-only tab label of a listing."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""


class SeriesRow(BaseModel):
    """One row of a listing, referencing one or more series side by side."""

    model_config = ConfigDict(frozen=True)

    description: str = ""
    indentation: Optional[int] = 0
    emphasized: Optional[bool] = False
    space_above: Optional[bool] = False
    names: Tuple[str, ...] = ()
    entity_meta: Optional[Tuple[Optional[Metadata], ...]] = None

    def without_name(self, name: str) -> "SeriesRow":
        """Return a copy with every occurrence of ``name`` removed (case-insensitive)."""
        key = name.casefold()
        return self.model_copy(
            update={"names": tuple(n for n in self.names if n.casefold() != key)}
        )

    def references(self, name: str) -> bool:
        key = name.casefold()
        return any(n.casefold() == key for n in self.names)


class ListingGroup(BaseModel):
    """A named group of rows in a listing."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    rows: Tuple[SeriesRow, ...] = ()


class Listing(BaseModel):
    """A table of series rows displayed for a browse tree leaf."""

    model_config = ConfigDict(frozen=True)

    aspects: Optional[Tuple[Aspect, ...]] = None
    groups: Tuple[ListingGroup, ...] = ()


# ============================================================================
# Capabilities
# ============================================================================


class Capabilities(BaseModel):
    """Optional operations this server implements."""

    model_config = ConfigDict(frozen=True)

    browse: bool = True
    search: bool = True
    edit_series: bool = True
    allow_multiple_series_per_request: bool = True
    meta: bool = True
    revisions: bool = True
    revisions_release: bool = True
    revisions_complete_history: bool = True
