"""
Revision ledger for series that keep their publication history.

A ledger offers two independent views over the same history:

- vintages answer "what was known as of calendar time T" and are ordered by
  timestamp;
- releases answer "what did the k-th published update contain" and are
  ordered by release number, regardless of when each release landed.

Clients tell the views apart by the ``RevisionSeriesType`` tag in the
returned metadata, so both are kept verbatim.
"""

import bisect
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from series_store.types import (
    FIRST_REVISION_TIMESTAMP,
    LAST_REVISION_TIMESTAMP,
    REVISION_SERIES_NTH,
    REVISION_SERIES_TYPE,
    REVISION_TIMESTAMP,
    STORES_REVISION_HISTORY,
    MetaValue,
    Metadata,
    SeriesRecord,
    VintageInfo,
    merge_metadata,
)


REVISION_TYPE_VINTAGE = "vintage"
REVISION_TYPE_NTH = "nth"


class Vintage(BaseModel):
    """A full snapshot of a series as it was known at ``timestamp``."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    label: Optional[str] = None
    series: SeriesRecord


def as_utc(timestamp: datetime) -> datetime:
    """Treat naive timestamps as UTC so they compare with ledger timestamps."""
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp


class RevisionLedger:
    """
    Vintages and releases of one revision-tracked series.

    The ledger is read-only once constructed.
    """

    def __init__(
        self,
        metadata: Mapping[str, MetaValue],
        vintages: Sequence[Vintage],
        releases: Sequence[SeriesRecord],
    ):
        if not vintages:
            raise ValueError("A revision ledger needs at least one vintage")
        if not releases:
            raise ValueError("A revision ledger needs at least one release")

        vintages = [v.model_copy(update={"timestamp": as_utc(v.timestamp)}) for v in vintages]
        for earlier, later in zip(vintages, vintages[1:]):
            if later.timestamp <= earlier.timestamp:
                raise ValueError(
                    f"Vintage timestamps must be strictly increasing: "
                    f"{later.timestamp.isoformat()} follows {earlier.timestamp.isoformat()}"
                )

        self._metadata: Metadata = dict(metadata)
        self._vintages: List[Vintage] = vintages
        self._timestamps: List[datetime] = [v.timestamp for v in vintages]
        self._releases: List[SeriesRecord] = list(releases)

    @property
    def metadata(self) -> Metadata:
        return dict(self._metadata)

    @property
    def first_timestamp(self) -> datetime:
        return self._timestamps[0]

    @property
    def last_timestamp(self) -> datetime:
        return self._timestamps[-1]

    @property
    def release_count(self) -> int:
        return len(self._releases)

    def current(self) -> SeriesRecord:
        """
        The latest vintage with the ledger metadata.

        The ledger's revision-history tags are derived from the vintages so
        they always agree with what ``list_vintages`` reports.
        """
        meta = merge_metadata(
            self._metadata,
            {
                STORES_REVISION_HISTORY: "1",
                FIRST_REVISION_TIMESTAMP: self.first_timestamp,
                LAST_REVISION_TIMESTAMP: self.last_timestamp,
            },
        )
        return self._vintages[-1].series.with_metadata(meta)

    def at_vintage(self, timestamp: datetime) -> SeriesRecord:
        """
        Select the latest vintage whose timestamp is at or before ``timestamp``.

        A timestamp earlier than the first vintage falls back to the first
        vintage instead of failing.

        Args:
            timestamp: Point in time; naive values are treated as UTC

        Returns:
            The vintage snapshot tagged with its revision type and timestamp
        """
        index = bisect.bisect_right(self._timestamps, as_utc(timestamp)) - 1
        chosen = self._vintages[max(index, 0)]
        meta = merge_metadata(
            self._metadata,
            {
                REVISION_SERIES_TYPE: REVISION_TYPE_VINTAGE,
                REVISION_TIMESTAMP: chosen.timestamp,
            },
        )
        return chosen.series.with_metadata(meta)

    def vintage_infos(self) -> List[VintageInfo]:
        return [VintageInfo(timestamp=v.timestamp, label=v.label) for v in self._vintages]

    def release(self, nth_release: int) -> SeriesRecord:
        """
        Select release ``nth_release``; numbers past the end clamp to the last release.

        Raises:
            ValueError: If ``nth_release`` is negative
        """
        if nth_release < 0:
            raise ValueError(f"Release number must be >= 0, got {nth_release}")
        chosen = self._releases[min(nth_release, len(self._releases) - 1)]
        meta = merge_metadata(
            self._metadata,
            {
                REVISION_SERIES_TYPE: REVISION_TYPE_NTH,
                REVISION_SERIES_NTH: nth_release,
            },
        )
        return chosen.with_metadata(meta)

    def complete_history(self) -> Dict[datetime, SeriesRecord]:
        """
        Every vintage keyed by its timestamp.

        Each vintage's own metadata takes precedence over the shared ledger
        metadata.
        """
        history: Dict[datetime, SeriesRecord] = {}
        for vintage in self._vintages:
            meta = merge_metadata(
                self._metadata,
                {
                    REVISION_SERIES_TYPE: REVISION_TYPE_VINTAGE,
                    REVISION_TIMESTAMP: vintage.timestamp,
                },
                vintage.series.metadata,
            )
            history[vintage.timestamp] = vintage.series.with_metadata(meta)
        return history
