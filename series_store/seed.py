"""
Seed data loader.

Builds the process-wide store from a JSON document with four sections:
``series`` (editable series), ``revisionSeries`` (revision ledgers),
``tree`` (browse tree reference table) and ``listings``.
"""

import json
import logging
from typing import Any, Dict, Mapping, Optional

from series_store import config
from series_store.codec import (
    decode_browse_tree,
    decode_listing,
    decode_metadata,
    decode_series,
    parse_datetime,
)
from series_store.revisions import RevisionLedger, Vintage
from series_store.storage.memory import InMemorySeriesStore
from series_store.types import PRIM_NAME

logger = logging.getLogger(__name__)


def build_ledger(raw: Mapping[str, Any]) -> RevisionLedger:
    """
    Decode one ``revisionSeries`` entry.

    Args:
        raw: Object with ``metaData``, ``vintages`` and ``releases``

    Returns:
        The revision ledger
    """
    vintages = [
        Vintage(
            timestamp=parse_datetime(v["timeStamp"]),
            label=v.get("label"),
            series=decode_series(v["series"]),
        )
        for v in raw.get("vintages", [])
    ]
    releases = [decode_series(r) for r in raw.get("releases", [])]
    ledger = RevisionLedger(decode_metadata(raw.get("metaData")), vintages, releases)
    logger.debug(
        f"Decoded revision series {ledger.metadata.get(PRIM_NAME)} with "
        f"{len(vintages)} vintages and {ledger.release_count} releases"
    )
    return ledger


def build_store(
    document: Mapping[str, Any],
    catch_all_listing: Optional[str] = None,
    search_field: Optional[str] = None,
) -> InMemorySeriesStore:
    """
    Build a store from a parsed seed document.

    Args:
        document: Parsed seed JSON
        catch_all_listing: Listing for newly created series (default from config)
        search_field: Metadata field searched (default from config)

    Returns:
        A populated store

    Raises:
        InvalidSeriesError: If a series cannot be decoded
        ValueError: If the seed is structurally inconsistent
    """
    series = [decode_series(s) for s in document.get("series", [])]

    ledgers: Dict[str, RevisionLedger] = {}
    for raw in document.get("revisionSeries", []):
        ledger = build_ledger(raw)
        name = ledger.metadata.get(PRIM_NAME)
        if not isinstance(name, str):
            raise ValueError("Revision series has no PrimName")
        ledgers[name] = ledger

    store = InMemorySeriesStore(
        series=series,
        ledgers=ledgers,
        tree=decode_browse_tree(document.get("tree", {"": []})),
        listings={ref: decode_listing(raw) for ref, raw in document.get("listings", {}).items()},
        catch_all_listing=catch_all_listing or config.CATCH_ALL_LISTING,
        search_field=search_field or config.SEARCH_FIELD,
    )

    for reference in store.dangling_references():
        logger.warning(f"Browse tree reference {reference} points at nothing")
    if store.catch_all_listing not in store.listing_references():
        logger.warning(f"Catch-all listing {store.catch_all_listing} is not in the seed")

    logger.info(
        f"Seeded store with {store.count()} series and {store.revision_count()} revision series"
    )
    return store


def load_seed(path: Optional[str] = None, **kwargs) -> InMemorySeriesStore:
    """
    Build a store from a seed file.

    Args:
        path: Seed JSON path (default ``config.SEED_PATH``)
        **kwargs: Passed to ``build_store``

    Returns:
        A populated store
    """
    path = path or config.SEED_PATH
    logger.info(f"Loading seed data from {path}")
    with open(path, "r", encoding="utf-8") as f:
        document = json.load(f)
    return build_store(document, **kwargs)
