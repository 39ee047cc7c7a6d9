"""
Tests for the bundled seed data and its loader.
"""

import json
import logging
import math
from datetime import datetime, timezone

import pytest

from series_store.seed import build_ledger, build_store, load_seed
from series_store.storage.interfaces import InvalidSeriesError
from tests.fixtures import SEED_PATH


@pytest.fixture(scope="module")
def seed_document():
    with open(SEED_PATH, "r", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def store():
    return load_seed(SEED_PATH)


def test_seed_loads(store):
    """Test that the bundled seed builds a store."""
    assert store.count() == 15
    assert store.revision_count() == 1
    assert store.dangling_references() == []


def test_every_seed_series_has_a_stamp(store):
    """Test that series without a last-modified stamp got one."""
    for result in store.get_many(["setrad2195", "pltour0001"]):
        assert isinstance(result.data.last_modified, datetime)


def test_seed_metadata_kinds(store):
    """Test that seed metadata decodes to typed values."""
    meta = store.get("pltour0001").metadata
    assert meta["Region"] == ("pl", "se")
    assert meta["StartDate"] == datetime(2003, 1, 1)


def test_seed_revision_series(store):
    """Test the bundled revision-tracked series."""
    vintages = store.list_vintages("withrev")
    assert [v.label for v in vintages] == ["Initial", None, None, "Update"]
    assert vintages[-1].timestamp == datetime(2019, 1, 1, 12, tzinfo=timezone.utc)

    release = store.load_release("withrev", 2)
    assert all(math.isnan(v) for v in release.values)


def test_every_listing_name_resolves(store):
    """Test that the seed listings only name existing series."""
    for reference in store.listing_references():
        listing = store.list_series(reference)
        for group in listing.groups:
            for row in group.rows:
                assert None not in row.entity_meta, f"{reference} names a missing series"


def test_build_store_warns_about_dangling_references(seed_document, caplog):
    """Test that broken tree references are logged, not fatal."""
    document = dict(seed_document)
    document["tree"] = dict(seed_document["tree"])
    document["tree"]["Broken"] = [{"Description": "x", "SeriesReference": "Nowhere"}]

    with caplog.at_level(logging.WARNING, logger="series_store.seed"):
        build_store(document)

    assert any("Nowhere" in r.getMessage() for r in caplog.records)


def test_build_store_rejects_bad_series(seed_document):
    """Test that undecodable seed series fail loudly."""
    document = dict(seed_document)
    document["series"] = [{"metaData": {"PrimName": "x"}, "values": ["bad"]}]
    with pytest.raises(InvalidSeriesError):
        build_store(document)


def test_build_ledger_from_seed(seed_document):
    """Test decoding the bundled revision series on its own."""
    ledger = build_ledger(seed_document["revisionSeries"][0])

    assert ledger.metadata["PrimName"] == "withrev"
    assert ledger.release_count == 3
    assert ledger.first_timestamp == datetime(2017, 1, 1, tzinfo=timezone.utc)
