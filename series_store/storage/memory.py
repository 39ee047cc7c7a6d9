"""
In-memory series repository.

This module provides the process-wide series store: current records of
editable series, revision ledgers of read-only series, and the browse,
listing and search indexes that refer to them. Everything is held in
dictionaries and guarded by one re-entrant lock, so every public operation
is atomic with respect to every other.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from series_store.browse import ROOT_REFERENCE, BrowseIndex, ListingIndex
from series_store.observability.metrics import (
    record_store_operation,
    store_series_gauge,
    track_store_operation,
)
from series_store.revisions import RevisionLedger
from series_store.search import SearchIndex
from series_store.storage.interfaces import (
    ConflictError,
    InvalidOperationError,
    NotFoundError,
)
from series_store.types import (
    DESCRIPTION,
    LAST_MODIFIED,
    SERIES_NOT_FOUND,
    BrowseNode,
    DownloadResult,
    Entity,
    Listing,
    Metadata,
    SeriesRecord,
    SeriesRow,
    VintageInfo,
)

logger = logging.getLogger(__name__)

DEFAULT_CATCH_ALL_LISTING = "Other"


def _key(name: str) -> str:
    return name.casefold()


def to_local_naive(timestamp: datetime) -> datetime:
    """Convert an offset-bearing timestamp to naive local time; naive values pass through."""
    if timestamp.tzinfo is None:
        return timestamp
    return timestamp.astimezone().replace(tzinfo=None)


class InMemorySeriesStore:
    """
    Series repository backed by dictionaries.

    Names are matched case-insensitively everywhere. Editable series live in
    ``_records``; revision-tracked series live in ``_ledgers`` and cannot be
    created, replaced or deleted.
    """

    def __init__(
        self,
        series: Iterable[SeriesRecord] = (),
        ledgers: Optional[Mapping[str, RevisionLedger]] = None,
        tree: Optional[Mapping[str, Sequence[BrowseNode]]] = None,
        listings: Optional[Mapping[str, Listing]] = None,
        catch_all_listing: str = DEFAULT_CATCH_ALL_LISTING,
        search_field: str = DESCRIPTION,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the store from seed data.

        Args:
            series: Editable series; each must carry a string ``PrimName``.
                Records without a last-modified stamp get one.
            ledgers: Revision ledgers keyed by series name
            tree: Browse tree reference table; defaults to an empty root
            listings: Listing reference table
            catch_all_listing: Listing that newly created series are added to
            search_field: Metadata field matched by ``search``
            clock: Source of naive local time for last-modified stamps

        Raises:
            ValueError: If a series has no name or a name is used twice
        """
        self._lock = threading.RLock()
        self._clock = clock
        self._last_issued: Optional[datetime] = None
        self.catch_all_listing = catch_all_listing

        self._ledgers: Dict[str, RevisionLedger] = {
            _key(name): ledger for name, ledger in (ledgers or {}).items()
        }
        self._records: Dict[str, SeriesRecord] = {}
        for record in series:
            self._seed_record(record)

        self._browse = BrowseIndex(tree if tree is not None else {ROOT_REFERENCE: []})
        self._listings = ListingIndex(listings or {})
        self._search = SearchIndex(search_field)
        self._update_gauges()

    def _seed_record(self, record: SeriesRecord) -> None:
        name = record.name
        if name is None or not name.strip():
            raise ValueError(f"Seed series has no PrimName: {record.metadata!r}")
        key = _key(name)
        if key in self._records or key in self._ledgers:
            raise ValueError(f"Seed series {name} is defined twice")

        stamp = record.last_modified
        if stamp is None:
            stamp = self._next_timestamp()
            logger.debug(f"Stamped seed series {name} with {stamp.isoformat()}")
        else:
            stamp = to_local_naive(stamp)
            if self._last_issued is None or stamp > self._last_issued:
                self._last_issued = stamp
        self._records[key] = record.overlay({LAST_MODIFIED: stamp})

    def _next_timestamp(self) -> datetime:
        now = self._clock()
        if self._last_issued is not None and now <= self._last_issued:
            now = self._last_issued + timedelta(microseconds=1)
        self._last_issued = now
        return now

    def _update_gauges(self) -> None:
        store_series_gauge.labels(kind="editable").set(len(self._records))
        store_series_gauge.labels(kind="revision").set(len(self._ledgers))

    def _ledger(self, name: str, operation: str) -> RevisionLedger:
        ledger = self._ledgers.get(_key(name))
        if ledger is None:
            record_store_operation(operation, "not_found")
            raise NotFoundError(f"Series {name} has no revision history")
        return ledger

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @track_store_operation("get")
    def get(self, name: str) -> Optional[SeriesRecord]:
        with self._lock:
            record = self._resolve(name)
        record_store_operation("get", "ok" if record is not None else "not_found")
        return record

    def _resolve(self, name: str) -> Optional[SeriesRecord]:
        key = _key(name)
        ledger = self._ledgers.get(key)
        if ledger is not None:
            return ledger.current()
        record = self._records.get(key)
        if record is None:
            return None
        return record.with_metadata(record.metadata)

    @track_store_operation("get_many")
    def get_many(self, names: List[str]) -> List[DownloadResult[SeriesRecord]]:
        results: List[DownloadResult[SeriesRecord]] = []
        with self._lock:
            for name in names:
                record = self._resolve(name)
                if record is None:
                    results.append(DownloadResult[SeriesRecord](error=SERIES_NOT_FOUND))
                else:
                    results.append(DownloadResult[SeriesRecord](data=record))
        record_store_operation("get_many")
        return results

    @track_store_operation("get_many_meta")
    def get_many_meta(self, names: List[str]) -> List[DownloadResult[Entity]]:
        results: List[DownloadResult[Entity]] = []
        with self._lock:
            for name in names:
                record = self._resolve(name)
                if record is None:
                    results.append(DownloadResult[Entity](error=SERIES_NOT_FOUND))
                else:
                    results.append(DownloadResult[Entity](data=Entity(metadata=record.metadata)))
        record_store_operation("get_many_meta")
        return results

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def revision_count(self) -> int:
        with self._lock:
            return len(self._ledgers)

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    @track_store_operation("create_or_replace")
    def create_or_replace(
        self,
        candidate: SeriesRecord,
        expected_last_modified: Optional[datetime] = None,
        force_replace: bool = False,
    ) -> datetime:
        """
        Create a series or replace an existing one.

        A new series is also added to the catch-all listing. Replacing needs
        either ``force_replace`` or the last-modified timestamp the caller
        last saw; a mismatch means someone else changed the series first.

        Args:
            candidate: The new series, carrying its primary name in metadata
            expected_last_modified: Last-modified timestamp the caller observed
            force_replace: Replace regardless of the last-modified timestamp

        Returns:
            The new last-modified timestamp

        Raises:
            InvalidOperationError: If the series has no name or tracks revisions
            ConflictError: If the optimistic-concurrency check fails
        """
        name = candidate.name
        if name is None or not name.strip():
            record_store_operation("create_or_replace", "invalid")
            raise InvalidOperationError("Series metadata has no PrimName")

        key = _key(name)
        with self._lock:
            if key in self._ledgers:
                record_store_operation("create_or_replace", "invalid")
                logger.warning(f"Refused to edit revision-tracked series {name}")
                raise InvalidOperationError(f"Series {name} stores revision history and cannot be edited")

            existing = self._records.get(key)
            if existing is not None and not force_replace:
                if expected_last_modified is None:
                    record_store_operation("create_or_replace", "conflict")
                    logger.warning(f"Create of existing series {name} refused")
                    raise ConflictError("Series with that name already exists")
                if to_local_naive(expected_last_modified) != existing.last_modified:
                    record_store_operation("create_or_replace", "conflict")
                    logger.warning(
                        f"Stale replace of {name}: expected {expected_last_modified.isoformat()}, "
                        f"stored {existing.last_modified}"
                    )
                    raise ConflictError("LastModified does not match")

            stamp = self._next_timestamp()
            self._records[key] = candidate.overlay({LAST_MODIFIED: stamp})

            if existing is None:
                row = SeriesRow(description=name, names=(name,))
                if not self._listings.append_row(self.catch_all_listing, row):
                    logger.warning(
                        f"Catch-all listing {self.catch_all_listing} does not exist, "
                        f"{name} is not browsable"
                    )
                self._update_gauges()
                logger.info(f"Created series {name} at {stamp.isoformat()}")
            else:
                logger.info(f"Replaced series {name} at {stamp.isoformat()}")

        record_store_operation("create_or_replace")
        return stamp

    @track_store_operation("delete")
    def delete(self, name: str) -> bool:
        key = _key(name)
        with self._lock:
            if key not in self._records:
                record_store_operation("delete", "not_found")
                return False
            del self._records[key]
            pruned = self._listings.prune_name(name)
            self._update_gauges()

        record_store_operation("delete")
        logger.info(f"Deleted series {name}, pruned {pruned} listing rows")
        return True

    # ------------------------------------------------------------------
    # Revisions
    # ------------------------------------------------------------------

    @track_store_operation("load_vintage")
    def load_vintage(self, name: str, timestamp: datetime) -> SeriesRecord:
        with self._lock:
            record = self._ledger(name, "load_vintage").at_vintage(timestamp)
        record_store_operation("load_vintage")
        return record

    @track_store_operation("list_vintages")
    def list_vintages(self, name: str) -> List[VintageInfo]:
        with self._lock:
            infos = self._ledger(name, "list_vintages").vintage_infos()
        record_store_operation("list_vintages")
        return infos

    @track_store_operation("load_release")
    def load_release(self, name: str, nth_release: int) -> SeriesRecord:
        if nth_release < 0:
            record_store_operation("load_release", "invalid")
            raise InvalidOperationError(f"Release number must be >= 0, got {nth_release}")
        with self._lock:
            record = self._ledger(name, "load_release").release(nth_release)
        record_store_operation("load_release")
        return record

    @track_store_operation("load_complete_history")
    def load_complete_history(self, name: str) -> Dict[datetime, SeriesRecord]:
        with self._lock:
            history = self._ledger(name, "load_complete_history").complete_history()
        record_store_operation("load_complete_history")
        return history

    # ------------------------------------------------------------------
    # Browse, listing and search
    # ------------------------------------------------------------------

    @track_store_operation("load_tree")
    def load_tree(self, reference: Optional[str] = None) -> List[BrowseNode]:
        with self._lock:
            nodes = self._browse.load(reference)
        if nodes is None:
            record_store_operation("load_tree", "not_found")
            raise NotFoundError(f"Unknown browse reference {reference}")
        record_store_operation("load_tree")
        return nodes

    @track_store_operation("list_series")
    def list_series(self, reference: str) -> Listing:
        with self._lock:
            listing = self._listings.resolve(reference, self._resolve_meta)
        if listing is None:
            record_store_operation("list_series", "not_found")
            raise NotFoundError(f"Unknown listing reference {reference}")
        record_store_operation("list_series")
        return listing

    def _resolve_meta(self, name: str) -> Optional[Metadata]:
        record = self._resolve(name)
        return record.metadata if record is not None else None

    @track_store_operation("search")
    def search(self, query: str) -> List[Metadata]:
        with self._lock:
            candidates = [r.metadata for r in self._records.values()]
            candidates.extend(ledger.current().metadata for ledger in self._ledgers.values())
            matches = self._search.search(candidates, query)
        if not matches:
            record_store_operation("search", "not_found")
            raise NotFoundError(f"No series matches {query!r}")
        record_store_operation("search")
        return matches

    def listing_references(self) -> List[str]:
        with self._lock:
            return self._listings.keys()

    def dangling_references(self) -> List[str]:
        """Browse tree references that point at neither a node list nor a listing."""
        with self._lock:
            return self._browse.dangling_references(self._listings.keys())
