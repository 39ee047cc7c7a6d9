"""
Unit tests for the API response schemas and their converters.
"""

from datetime import datetime, timezone

from api.schemas.series import (
    browse_node_to_response,
    entity_result_to_response,
    history_to_response,
    listing_to_response,
    series_result_to_response,
    series_to_response,
    vintage_to_response,
)
from series_store.codec import decode_browse_node, decode_listing
from series_store.types import DownloadResult, Entity, SeriesRecord, VintageInfo


def dump(model):
    return model.model_dump(by_alias=True, exclude_none=True)


def test_series_response_omits_absent_parts():
    """Test that null optional properties are left out."""
    record = SeriesRecord(metadata={"Region": ("pl",)}, values=(1.5, float("nan")))

    assert dump(series_to_response(record)) == {"metaData": {"Region": ["pl"]}, "values": [1.5, "NaN"]}


def test_series_response_with_dates_and_per_value_metadata():
    """Test dates and date metadata are ISO text and null entries stay."""
    record = SeriesRecord(
        metadata={"StartDate": datetime(2020, 1, 1)},
        values=(1.0, 2.0),
        dates=(datetime(2020, 1, 1), datetime(2021, 1, 1)),
        per_value_metadata=(None, {"Note": "revised"}),
    )

    body = dump(series_to_response(record))

    assert body["metaData"]["StartDate"] == "2020-01-01T00:00:00"
    assert body["dates"] == ["2020-01-01T00:00:00", "2021-01-01T00:00:00"]
    assert body["perValueMetaData"] == [None, {"Note": "revised"}]


def test_download_result_responses():
    """Test batch items carry either data or error."""
    missing = series_result_to_response(DownloadResult[SeriesRecord](error="gone"))
    assert dump(missing) == {"error": "gone"}

    found = entity_result_to_response(DownloadResult[Entity](data=Entity(metadata={"PrimName": "x"})))
    assert dump(found) == {"data": {"metaData": {"PrimName": "x"}}}


def test_vintage_response_omits_missing_label():
    """Test that unlabelled vintages have no label property."""
    info = VintageInfo(timestamp=datetime(2018, 1, 1, tzinfo=timezone.utc))
    assert dump(vintage_to_response(info)) == {"timeStamp": "2018-01-01T00:00:00Z"}

    labelled = VintageInfo(timestamp=datetime(2018, 1, 1, tzinfo=timezone.utc), label="Initial")
    assert dump(vintage_to_response(labelled))["label"] == "Initial"


def test_history_response_keys():
    """Test that history is keyed by ISO timestamps."""
    ts = datetime(2017, 1, 1, tzinfo=timezone.utc)
    history = history_to_response({ts: SeriesRecord(values=(1.0,))})
    assert list(history) == ["2017-01-01T00:00:00Z"]


def test_browse_node_response_shape():
    """Test PascalCase node properties with nested children."""
    raw = {
        "Description": "Poland",
        "Children": [{"Description": "Arrivals", "SeriesReference": "PolandTourismArrivals"}],
    }
    assert dump(browse_node_to_response(decode_browse_node(raw))) == raw


def test_listing_response_shape():
    """Test camelCase row properties and null-safe entity metadata."""
    listing = decode_listing(
        {
            "aspects": [{"name": "A", "description": "First"}],
            "groups": [{"name": "", "series": [{"description": "", "emphasized": True, "names": ["x", "y"]}]}],
        }
    )
    row = listing.groups[0].rows[0].model_copy(update={"entity_meta": ({"PrimName": "x"}, None)})
    listing = listing.model_copy(
        update={"groups": (listing.groups[0].model_copy(update={"rows": (row,)}),)}
    )

    body = dump(listing_to_response(listing))

    assert body["aspects"] == [{"name": "A", "description": "First"}]
    assert body["groups"][0]["series"][0] == {
        "description": "",
        "indentation": 0,
        "emphasized": True,
        "spaceAbove": False,
        "entityMeta": [{"PrimName": "x"}, None],
        "names": ["x", "y"],
    }


def test_listing_response_without_aspects():
    """Test that a listing without aspects leaves the property out."""
    body = dump(listing_to_response(decode_listing({"groups": [{"name": "G", "series": []}]})))
    assert body == {"groups": [{"name": "G", "series": []}]}
