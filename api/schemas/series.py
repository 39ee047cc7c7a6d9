"""
Series API schemas.

Request and response bodies use the provider's camelCase property names;
browse tree nodes use PascalCase. Metadata maps are free-form and carry
their keys unchanged. Values inside them are converted by
``series_store.codec``.
"""

from datetime import datetime
from typing import Any, Dict, Generic, List, Mapping, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel, to_pascal

from series_store.codec import encode_datetime, encode_metadata, encode_value
from series_store.types import (
    BrowseNode,
    Capabilities,
    DownloadResult,
    Entity,
    Listing,
    SeriesRecord,
    SeriesRow,
    VintageInfo,
)


class CapabilitiesResponse(BaseModel):
    """Optional operations implemented by this server."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    browse: bool
    search: bool
    edit_series: bool
    allow_multiple_series_per_request: bool
    meta: bool
    revisions: bool
    revisions_release: bool
    revisions_complete_history: bool

    @classmethod
    def from_capabilities(cls, capabilities: Capabilities) -> "CapabilitiesResponse":
        return cls(**capabilities.model_dump())


class SeriesPayload(BaseModel):
    """Series body of a create-or-replace request."""

    meta_data: Dict[str, Any] = Field(..., alias="metaData", description="Series metadata")
    values: List[Any] = Field(..., description="Values; numbers or \"NaN\"")
    dates: Optional[List[str]] = Field(None, description="ISO 8601 date per value")
    per_value_meta_data: Optional[List[Optional[Dict[str, Any]]]] = Field(
        None, alias="perValueMetaData", description="Optional metadata per value"
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "metaData": {
                    "PrimName": "myseries",
                    "Description": "My series",
                    "Frequency": "annual",
                    "StartDate": "2020-01-01T00:00:00",
                },
                "values": [1.0, "NaN", 3.5],
            }
        },
    )

    def to_wire(self) -> Dict[str, Any]:
        """The body as a wire-format dictionary for the codec."""
        body: Dict[str, Any] = {"metaData": self.meta_data, "values": self.values}
        if self.dates is not None:
            body["dates"] = self.dates
        if self.per_value_meta_data is not None:
            body["perValueMetaData"] = self.per_value_meta_data
        return body


# ============================================================================
# Series responses
# ============================================================================


class SeriesResponse(BaseModel):
    """A series with its metadata, values and optional dates."""

    meta_data: Dict[str, Any] = Field(..., description="Series metadata")
    values: List[Union[float, str]] = Field(
        ..., description="Values; missing observations are \"NaN\""
    )
    dates: Optional[List[str]] = Field(None, description="ISO 8601 date per value")
    per_value_meta_data: Optional[List[Optional[Dict[str, Any]]]] = Field(
        None, description="Optional metadata per value"
    )

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "metaData": {
                    "PrimName": "pltour0001",
                    "Description": "Tourism, Arrivals, Total",
                    "Frequency": "annual",
                    "StartDate": "2003-01-01T00:00:00",
                    "LastModifiedTimeStamp": "2019-04-12T09:30:00",
                },
                "values": [4319590.0, 4595806.0, "NaN"],
            }
        },
    )


class EntityResponse(BaseModel):
    """Metadata-only view of a series."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    meta_data: Dict[str, Any] = Field(..., description="Series metadata")


DataT = TypeVar("DataT")


class DownloadResultResponse(BaseModel, Generic[DataT]):
    """One item of a batch load: the payload or the reason it is missing."""

    data: Optional[DataT] = Field(None, description="Payload when the series was found")
    error: Optional[str] = Field(None, description="Error message when it was not")


class VintageResponse(BaseModel):
    """Timestamp and optional label of one vintage."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    time_stamp: str = Field(..., description="Vintage timestamp (ISO 8601, UTC)")
    label: Optional[str] = Field(None, description="Optional vintage label")


def series_to_response(record: SeriesRecord) -> SeriesResponse:
    """Convert a series record to its API schema."""
    return SeriesResponse(
        meta_data=encode_metadata(record.metadata),
        values=[encode_value(v) for v in record.values],
        dates=[encode_datetime(d) for d in record.dates] if record.dates is not None else None,
        per_value_meta_data=(
            [encode_metadata(m) for m in record.per_value_metadata]
            if record.per_value_metadata is not None
            else None
        ),
    )


def series_result_to_response(
    result: DownloadResult[SeriesRecord],
) -> DownloadResultResponse[SeriesResponse]:
    if result.error is not None:
        return DownloadResultResponse[SeriesResponse](error=result.error)
    return DownloadResultResponse[SeriesResponse](data=series_to_response(result.data))


def entity_result_to_response(
    result: DownloadResult[Entity],
) -> DownloadResultResponse[EntityResponse]:
    if result.error is not None:
        return DownloadResultResponse[EntityResponse](error=result.error)
    return DownloadResultResponse[EntityResponse](
        data=EntityResponse(meta_data=encode_metadata(result.data.metadata))
    )


def vintage_to_response(info: VintageInfo) -> VintageResponse:
    return VintageResponse(time_stamp=encode_datetime(info.timestamp), label=info.label)


def history_to_response(history: Mapping[datetime, SeriesRecord]) -> Dict[str, SeriesResponse]:
    """Key every vintage by its ISO 8601 timestamp."""
    return {encode_datetime(ts): series_to_response(record) for ts, record in history.items()}


# ============================================================================
# Browse tree and listing responses
# ============================================================================


class BrowseNodeResponse(BaseModel):
    """
    A browse tree node.

    Exactly one of ``Children``, ``ChildrenReference`` and
    ``SeriesReference`` is present.
    """

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)

    description: str = Field(..., description="Node caption")
    children: Optional[List["BrowseNodeResponse"]] = Field(None, description="Inline child nodes")
    children_reference: Optional[str] = Field(None, description="Reference to a node list")
    series_reference: Optional[str] = Field(None, description="Reference to a listing")


BrowseNodeResponse.model_rebuild()


class AspectResponse(BaseModel):
    """A display-only tab label of a listing."""

    name: str
    description: str = ""


class SeriesRowResponse(BaseModel):
    """One listing row with the current metadata of every series it names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    description: str = Field("", description="Row caption")
    indentation: Optional[int] = Field(None, description="Indentation level")
    emphasized: Optional[bool] = Field(None, description="Display in bold")
    space_above: Optional[bool] = Field(None, description="Leave a blank line above")
    entity_meta: List[Optional[Dict[str, Any]]] = Field(
        default_factory=list, description="Metadata per name; null for names that do not resolve"
    )
    names: List[str] = Field(default_factory=list, description="Series names")


class GroupResponse(BaseModel):
    """A named group of listing rows."""

    name: str = Field("", description="Group caption")
    series: List[SeriesRowResponse] = Field(default_factory=list, description="Rows")


class ListingResponse(BaseModel):
    """A table of series rows displayed for a browse tree leaf."""

    aspects: Optional[List[AspectResponse]] = Field(None, description="Optional tab labels")
    groups: List[GroupResponse] = Field(default_factory=list, description="Row groups")


def browse_node_to_response(node: BrowseNode) -> BrowseNodeResponse:
    return BrowseNodeResponse(
        description=node.description,
        children=(
            [browse_node_to_response(c) for c in node.children]
            if node.children is not None
            else None
        ),
        children_reference=node.children_reference,
        series_reference=node.series_reference,
    )


def series_row_to_response(row: SeriesRow) -> SeriesRowResponse:
    return SeriesRowResponse(
        description=row.description,
        indentation=row.indentation,
        emphasized=row.emphasized,
        space_above=row.space_above,
        entity_meta=[encode_metadata(m) for m in (row.entity_meta or ())],
        names=list(row.names),
    )


def listing_to_response(listing: Listing) -> ListingResponse:
    """Convert a resolved listing to its API schema."""
    return ListingResponse(
        aspects=(
            [AspectResponse(name=a.name, description=a.description) for a in listing.aspects]
            if listing.aspects is not None
            else None
        ),
        groups=[
            GroupResponse(name=g.name, series=[series_row_to_response(r) for r in g.rows])
            for g in listing.groups
        ],
    )
