"""
Browse tree and listing indexes.

The browse index maps a reference key to a list of tree nodes; the empty key
is the root. Nodes point at other node lists or at listings by key, so one
target can be shared by several paths.

The listing index maps a reference key to a table of series rows. Rows hold
series names only; their metadata is resolved when the listing is served.
Neither index locks: the owning store serializes access.
"""

import logging
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from series_store.types import (
    BrowseNode,
    Listing,
    ListingGroup,
    Metadata,
    SeriesRow,
)

logger = logging.getLogger(__name__)

ROOT_REFERENCE = ""

MetadataResolver = Callable[[str], Optional[Metadata]]


def _is_blank(reference: Optional[str]) -> bool:
    return reference is None or not reference.strip()


class BrowseIndex:
    """Reference table of browse tree node lists."""

    def __init__(self, tree: Mapping[str, Sequence[BrowseNode]]):
        if ROOT_REFERENCE not in tree:
            raise ValueError("Browse tree has no root node list")
        self._tree: Dict[str, List[BrowseNode]] = {k: list(v) for k, v in tree.items()}

    def load(self, reference: Optional[str] = None) -> Optional[List[BrowseNode]]:
        """
        Return the node list behind ``reference``.

        Args:
            reference: Reference key; blank or None selects the root

        Returns:
            The nodes, or None if the reference is unknown
        """
        if _is_blank(reference):
            return list(self._tree[ROOT_REFERENCE])
        nodes = self._tree.get(reference)
        return list(nodes) if nodes is not None else None

    def dangling_references(self, listing_keys: Sequence[str]) -> List[str]:
        """References in the tree that point at nothing."""
        known_listings = set(listing_keys)
        missing: List[str] = []

        def walk(nodes: Sequence[BrowseNode]) -> None:
            for node in nodes:
                if node.children is not None:
                    walk(node.children)
                elif node.children_reference is not None:
                    if node.children_reference not in self._tree:
                        missing.append(node.children_reference)
                elif node.series_reference not in known_listings:
                    missing.append(node.series_reference)

        for nodes in self._tree.values():
            walk(nodes)
        return missing


class ListingIndex:
    """Reference table of series listings."""

    def __init__(self, listings: Mapping[str, Listing]):
        self._listings: Dict[str, Listing] = dict(listings)

    def keys(self) -> List[str]:
        return list(self._listings)

    def get(self, reference: str) -> Optional[Listing]:
        if _is_blank(reference):
            return None
        return self._listings.get(reference)

    def resolve(self, reference: str, resolver: MetadataResolver) -> Optional[Listing]:
        """
        Return the listing with every row's names resolved to current metadata.

        Names that do not resolve get a None entry instead of failing the
        listing. The stored table is left untouched.

        Args:
            reference: Listing key
            resolver: Maps a series name to its current metadata or None

        Returns:
            A new listing with ``entity_meta`` filled, or None if unknown
        """
        listing = self.get(reference)
        if listing is None:
            return None

        groups = []
        for group in listing.groups:
            rows = tuple(
                row.model_copy(
                    update={"entity_meta": tuple(resolver(name) for name in row.names)}
                )
                for row in group.rows
            )
            groups.append(group.model_copy(update={"rows": rows}))
        return listing.model_copy(update={"groups": tuple(groups)})

    def append_row(self, reference: str, row: SeriesRow) -> bool:
        """
        Append ``row`` to the first group of a listing.

        A listing without groups gets an unnamed one.

        Returns:
            True if the listing exists
        """
        listing = self._listings.get(reference)
        if listing is None:
            return False

        groups = list(listing.groups) or [ListingGroup()]
        first = groups[0]
        groups[0] = first.model_copy(update={"rows": first.rows + (row,)})
        self._listings[reference] = listing.model_copy(update={"groups": tuple(groups)})
        return True

    def prune_name(self, name: str) -> int:
        """
        Remove ``name`` from every row of every listing.

        Rows left without names are dropped; groups left without rows stay.

        Returns:
            Number of rows that referenced the name
        """
        touched = 0
        for reference, listing in list(self._listings.items()):
            if not any(row.references(name) for g in listing.groups for row in g.rows):
                continue

            groups = []
            for group in listing.groups:
                rows = []
                for row in group.rows:
                    if row.references(name):
                        touched += 1
                        row = row.without_name(name)
                        if not row.names:
                            continue
                    rows.append(row)
                groups.append(group.model_copy(update={"rows": tuple(rows)}))
            self._listings[reference] = listing.model_copy(update={"groups": tuple(groups)})
            logger.debug(f"Pruned {name} from listing {reference}")
        return touched
