"""
Free-text search over series metadata.

Search is a case-insensitive substring match of the query against one
metadata field. There is no ranking and no tokenization.
"""

from typing import Iterable, List

from series_store.types import DESCRIPTION, Metadata


class SearchIndex:
    """Derived view over stored metadata that supports substring queries."""

    def __init__(self, field: str = DESCRIPTION):
        self.field = field

    def matches(self, metadata: Metadata, query: str) -> bool:
        text = metadata.get(self.field)
        if not isinstance(text, str):
            return False
        return query.casefold() in text.casefold()

    def search(self, candidates: Iterable[Metadata], query: str) -> List[Metadata]:
        """
        Return the metadata of every candidate whose field contains ``query``.

        Args:
            candidates: Metadata maps to scan, in the order results are wanted
            query: Text to look for

        Returns:
            Matching metadata maps (copies), possibly empty
        """
        return [dict(meta) for meta in candidates if self.matches(meta, query)]
