"""
Test fixtures and sample data.

This module provides helpers for creating series, ledgers and stores used
across the unit and API tests.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Iterator, List, Optional

from series_store.revisions import RevisionLedger, Vintage
from series_store.storage.memory import InMemorySeriesStore
from series_store.types import (
    DESCRIPTION,
    LAST_MODIFIED,
    PRIM_NAME,
    BrowseNode,
    Listing,
    ListingGroup,
    SeriesRecord,
    SeriesRow,
)


SEED_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    "series_store",
    "data",
    "seed.json",
)


# ============================================================================
# Sample Series
# ============================================================================


def create_sample_series(
    name: str = "sample",
    description: str = "Sample series",
    values: Optional[List[float]] = None,
    last_modified: Optional[datetime] = None,
) -> SeriesRecord:
    """Create a sample series record."""
    metadata = {
        PRIM_NAME: name,
        DESCRIPTION: description,
        "Frequency": "annual",
        "StartDate": datetime(2020, 1, 1),
    }
    if last_modified is not None:
        metadata[LAST_MODIFIED] = last_modified
    return SeriesRecord(
        metadata=metadata,
        values=tuple(values if values is not None else [1.0, 2.0, 3.0]),
    )


# ============================================================================
# Sample Revision Ledger
# ============================================================================


VINTAGE_TIMES = [
    datetime(2017, 1, 1, tzinfo=timezone.utc),
    datetime(2018, 1, 1, tzinfo=timezone.utc),
    datetime(2019, 1, 1, 12, tzinfo=timezone.utc),
]


def create_sample_ledger(name: str = "withrev") -> RevisionLedger:
    """Create a ledger with three vintages and two releases."""
    vintages = [
        Vintage(
            timestamp=VINTAGE_TIMES[0],
            label="Initial",
            series=SeriesRecord(values=(10.0,)),
        ),
        Vintage(
            timestamp=VINTAGE_TIMES[1],
            series=SeriesRecord(metadata={"StartDate": datetime(2016, 1, 1)}, values=(10.0, 20.0)),
        ),
        Vintage(
            timestamp=VINTAGE_TIMES[2],
            label="Update",
            series=SeriesRecord(values=(10.0, 20.0, 30.0)),
        ),
    ]
    releases = [
        SeriesRecord(values=(10.0, 20.0, 25.0)),
        SeriesRecord(values=(float("nan"), float("nan"), 30.0)),
    ]
    metadata = {
        PRIM_NAME: name,
        DESCRIPTION: "Series with revisions",
        "Frequency": "annual",
        "StartDate": datetime(2017, 1, 1),
    }
    return RevisionLedger(metadata, vintages, releases)


# ============================================================================
# Sample Store
# ============================================================================


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 9, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


class FrozenClock:
    """Clock that always returns the same instant."""

    def __init__(self, instant: datetime = datetime(2024, 1, 1, 9, 0, 0)):
        self.instant = instant

    def __call__(self) -> datetime:
        return self.instant


def create_sample_listings() -> dict:
    return {
        "Other": Listing(groups=(ListingGroup(name=""),)),
        "Mixed": Listing(
            groups=(
                ListingGroup(
                    name="First",
                    rows=(
                        SeriesRow(description="Pair", names=("alpha", "beta")),
                        SeriesRow(description="Alone", names=("gamma",)),
                    ),
                ),
                ListingGroup(
                    name="Second",
                    rows=(SeriesRow(description="Gamma again", names=("GAMMA",)),),
                ),
            )
        ),
        "Revisions": Listing(
            groups=(ListingGroup(rows=(SeriesRow(names=("withrev", "missing")),)),)
        ),
    }


def create_sample_tree() -> dict:
    return {
        "": [
            BrowseNode(
                description="Everything",
                children=(
                    BrowseNode(description="Mixed", series_reference="Mixed"),
                    BrowseNode(description="More", children_reference="More"),
                ),
            ),
            BrowseNode(description="Other", series_reference="Other"),
        ],
        "More": [BrowseNode(description="Revisions", series_reference="Revisions")],
    }


def create_sample_store(clock=None) -> InMemorySeriesStore:
    """Create a small store with three editable series and one ledger."""
    series = [
        create_sample_series("alpha", "Alpha arrivals", last_modified=datetime(2019, 1, 1)),
        create_sample_series("beta", "Beta departures", last_modified=datetime(2019, 1, 1)),
        create_sample_series("gamma", "Gamma Arrivals total"),
    ]
    return InMemorySeriesStore(
        series=series,
        ledgers={"withrev": create_sample_ledger()},
        tree=create_sample_tree(),
        listings=create_sample_listings(),
        clock=clock or StepClock(),
    )


def iter_names(listing: Listing) -> Iterator[str]:
    for group in listing.groups:
        for row in group.rows:
            yield from row.names
