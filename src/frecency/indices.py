"""
Frecency Indices

Container types backing the frecency aggregate:
- QueryIndex: query string -> ordered selections, with an explicit compact step
- RecencyList: bounded most-recent-first id index used as the eviction queue
"""

from collections import OrderedDict
from typing import Dict, Iterable, Iterator, List, Optional, Tuple


class QueryIndex:
    """
    Mapping of query string to the selections made for it, in insertion order.

    Buckets left empty by a removal are dropped by compact(); a query key
    never maps to an empty list once compact() has run.
    """

    def __init__(self, buckets: Optional[Dict[str, list]] = None):
        self._buckets: Dict[str, list] = {}
        for query, selections in (buckets or {}).items():
            self._buckets[query] = list(selections)
        self.compact()

    def __contains__(self, query: str) -> bool:
        return query in self._buckets

    def __iter__(self) -> Iterator[str]:
        return iter(self._buckets)

    def __len__(self) -> int:
        return len(self._buckets)

    def __getitem__(self, query: str) -> list:
        return self._buckets[query]

    def get(self, query: str) -> Optional[list]:
        return self._buckets.get(query)

    def items(self) -> Iterable[Tuple[str, list]]:
        return self._buckets.items()

    def find(self, query: str, selection_id: str):
        """Get the selection for selection_id under query, or None."""
        for selection in self._buckets.get(query, ()):
            if selection.id == selection_id:
                return selection
        return None

    def append(self, query: str, selection) -> None:
        """Add a selection to the end of the query's bucket."""
        self._buckets.setdefault(query, []).append(selection)

    def remove_id(self, query: str, selection_id: str) -> int:
        """
        Remove every selection for selection_id from a query's bucket.

        Args:
            query: Query whose bucket is filtered
            selection_id: Id to drop

        Returns:
            Number of selections removed
        """
        bucket = self._buckets.get(query)
        if bucket is None:
            return 0

        kept = [s for s in bucket if s.id != selection_id]
        self._buckets[query] = kept
        self.compact()
        return len(bucket) - len(kept)

    def compact(self) -> int:
        """Drop empty buckets. Returns the number of buckets dropped."""
        empty = [query for query, bucket in self._buckets.items() if not bucket]
        for query in empty:
            del self._buckets[query]
        return len(empty)

    def matching_prefix(self, prefix: str) -> List[str]:
        """Stored queries starting with prefix, lexicographically sorted."""
        return sorted(query for query in self._buckets if query.startswith(prefix))


class RecencyList:
    """
    Most-recently-selected-first list of distinct ids, bounded to limit.

    Backed by an OrderedDict whose front is the most recent id, so
    move-to-front and evict-from-back are both O(1).
    """

    def __init__(self, limit: int, ids: Iterable[str] = ()):
        self.limit = limit
        self._order: 'OrderedDict[str, None]' = OrderedDict()
        for selection_id in ids:
            if selection_id not in self._order:
                self._order[selection_id] = None

    def __contains__(self, selection_id: str) -> bool:
        return selection_id in self._order

    def __iter__(self) -> Iterator[str]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def to_list(self) -> List[str]:
        return list(self._order)

    def touch(self, selection_id: str) -> Optional[str]:
        """
        Mark selection_id as the most recent selection.

        An id already tracked moves to the front. A new id is prepended; if
        the list was full the least recently selected id is evicted first.

        Returns:
            The evicted id, or None if nothing was evicted
        """
        if selection_id in self._order:
            self._order.move_to_end(selection_id, last=False)
            return None

        evicted = None
        if len(self._order) >= self.limit:
            evicted, _ = self._order.popitem(last=True)

        self._order[selection_id] = None
        self._order.move_to_end(selection_id, last=False)
        return evicted

    def shrink(self) -> List[str]:
        """Evict from the back until within limit. Returns evicted ids."""
        evicted = []
        while len(self._order) > self.limit:
            selection_id, _ = self._order.popitem(last=True)
            evicted.append(selection_id)
        return evicted
