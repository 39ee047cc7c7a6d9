"""
Wire codec for series data.

Incoming JSON is decoded into the typed models here, once, at the boundary:
the HTTP adapter uses it for request bodies and query timestamps and the
seed loader uses it for the bundled data file. The rest of the code only
ever sees ``MetaValue`` kinds and frozen models.

On the way out, response shapes are declared by the API schemas; this module
only converts the values they hold. UTC datetimes end in ``Z`` and
non-finite numbers are written as strings such as ``"NaN"``.
"""

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from series_store.storage.interfaces import InvalidSeriesError
from series_store.types import (
    Aspect,
    BrowseNode,
    Listing,
    ListingGroup,
    MetaKind,
    MetaValue,
    Metadata,
    SeriesRecord,
    SeriesRow,
    meta_kind,
)


_ISO_DATETIME = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})"
    r"(?:[T ](?P<time>\d{2}:\d{2}(?::\d{2}(?:\.\d{1,7})?)?))?"
    r"(?P<offset>Z|[+-]\d{2}:?\d{2})?$"
)


# ============================================================================
# Decoding
# ============================================================================


def _parse_offset(offset: str) -> timezone:
    if offset == "Z":
        return timezone.utc
    digits = offset[1:].replace(":", "")
    delta = timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
    return timezone(-delta if offset[0] == "-" else delta)


def parse_datetime(text: str) -> datetime:
    """
    Parse an ISO-8601 date or date-time.

    A trailing ``Z`` is read as UTC, on dates as well as date-times, and
    fractional seconds longer than six digits are truncated to microseconds.

    Raises:
        ValueError: If ``text`` is not an ISO-8601 date or date-time
    """
    match = _ISO_DATETIME.match(text.strip())
    if match is None:
        raise ValueError(f"Not an ISO-8601 date: {text!r}")

    date_text, time_text, offset = match.group("date", "time", "offset")
    clock, _, fraction = (time_text or "00:00").partition(".")
    value = datetime.fromisoformat(f"{date_text}T{clock}")
    if fraction:
        value = value.replace(microsecond=int(fraction[:6].ljust(6, "0")))
    if offset:
        value = value.replace(tzinfo=_parse_offset(offset))
    return value


def looks_like_datetime(text: str) -> bool:
    return bool(_ISO_DATETIME.match(text.strip()))


def decode_meta_value(key: str, raw: Any) -> MetaValue:
    """
    Convert one JSON metadata value to its typed kind.

    Args:
        key: Metadata key, used in error messages
        raw: Parsed JSON value

    Returns:
        int, float, str, datetime or a tuple of str

    Raises:
        InvalidSeriesError: For null and object values
    """
    if isinstance(raw, bool):
        return str(raw)
    if isinstance(raw, (int, float)):
        return raw
    if isinstance(raw, list):
        return tuple(_element_text(v) for v in raw)
    if isinstance(raw, str):
        if looks_like_datetime(raw):
            try:
                return parse_datetime(raw)
            except ValueError:
                return raw
        return raw
    raise InvalidSeriesError(f"Invalid value for metadata {key!r}: {raw!r}")


def _element_text(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, bool):
        return str(raw)
    if raw is None:
        return ""
    return str(raw)


def decode_metadata(raw: Optional[Mapping[str, Any]]) -> Metadata:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise InvalidSeriesError("Series metadata must be an object")
    return {key: decode_meta_value(key, value) for key, value in raw.items()}


def decode_value(raw: Any) -> float:
    """
    Convert one JSON series value to a float.

    Numbers are taken as they are; the string ``"NaN"`` (any case) is a
    missing value and ``"Infinity"`` / ``"-Infinity"`` are the infinities.

    Raises:
        InvalidSeriesError: For anything else
    """
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return float(raw)
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text == "nan":
            return math.nan
        if text in ("infinity", "-infinity"):
            return float(text)
    raise InvalidSeriesError(f"Invalid value in series values: {raw!r}")


def decode_dates(raw: Optional[Sequence[Any]]) -> Optional[tuple]:
    if raw is None:
        return None
    dates = []
    for item in raw:
        if isinstance(item, datetime):
            dates.append(item)
            continue
        if not isinstance(item, str):
            raise InvalidSeriesError(f"Invalid date in series dates: {item!r}")
        try:
            dates.append(parse_datetime(item))
        except ValueError as e:
            raise InvalidSeriesError(str(e)) from e
    return tuple(dates)


def decode_series(raw: Mapping[str, Any]) -> SeriesRecord:
    """
    Build a series record from its JSON form.

    Args:
        raw: Object with ``metaData``, ``values`` and optionally ``dates``
            and ``perValueMetaData``

    Returns:
        The decoded, validated record

    Raises:
        InvalidSeriesError: If any part cannot be decoded or lengths differ
    """
    if not isinstance(raw, Mapping):
        raise InvalidSeriesError("Series must be an object")
    values = raw.get("values")
    if values is None:
        raise InvalidSeriesError("Series values are required")

    per_value = raw.get("perValueMetaData")
    try:
        return SeriesRecord(
            metadata=decode_metadata(raw.get("metaData")),
            values=tuple(decode_value(v) for v in values),
            dates=decode_dates(raw.get("dates")),
            per_value_metadata=(
                tuple(decode_metadata(m) if m is not None else None for m in per_value)
                if per_value is not None
                else None
            ),
        )
    except ValidationError as e:
        raise InvalidSeriesError(f"Invalid series: {e.errors()[0]['msg']}") from e


def decode_browse_node(raw: Mapping[str, Any]) -> BrowseNode:
    children = raw.get("Children")
    try:
        return BrowseNode(
            description=raw.get("Description", ""),
            children=tuple(decode_browse_node(c) for c in children) if children is not None else None,
            children_reference=raw.get("ChildrenReference"),
            series_reference=raw.get("SeriesReference"),
        )
    except ValidationError as e:
        raise InvalidSeriesError(f"Invalid browse node: {e.errors()[0]['msg']}") from e


def decode_browse_tree(raw: Mapping[str, Sequence[Mapping[str, Any]]]) -> Dict[str, List[BrowseNode]]:
    return {ref: [decode_browse_node(n) for n in nodes] for ref, nodes in raw.items()}


def decode_listing(raw: Mapping[str, Any]) -> Listing:
    aspects = raw.get("aspects")
    groups = []
    for group in raw.get("groups", []):
        rows = tuple(
            SeriesRow(
                description=row.get("description", ""),
                indentation=row.get("indentation", 0),
                emphasized=row.get("emphasized", False),
                space_above=row.get("spaceAbove", False),
                names=tuple(row.get("names", [])),
            )
            for row in group.get("series", [])
        )
        groups.append(ListingGroup(name=group.get("name", ""), rows=rows))
    return Listing(
        aspects=tuple(Aspect(**a) for a in aspects) if aspects is not None else None,
        groups=tuple(groups),
    )


# ============================================================================
# Encoding
# ============================================================================


def encode_datetime(value: datetime) -> str:
    """ISO-8601 text; UTC values end in ``Z``."""
    offset = value.utcoffset()
    if offset is not None and offset.total_seconds() == 0:
        return value.replace(tzinfo=None).isoformat() + "Z"
    return value.isoformat()


def encode_meta_value(value: MetaValue) -> Any:
    kind = meta_kind(value)
    if kind is MetaKind.DATE:
        return encode_datetime(value)
    if kind is MetaKind.STRING_ARRAY:
        return list(value)
    if kind is MetaKind.FLOAT:
        return encode_value(value)
    return value


def encode_metadata(metadata: Optional[Mapping[str, MetaValue]]) -> Optional[Dict[str, Any]]:
    if metadata is None:
        return None
    return {key: encode_meta_value(value) for key, value in metadata.items()}


def encode_value(value: float) -> Any:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return value
