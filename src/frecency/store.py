"""
Frecency Store - Bounded Selection History

Records query -> selection events for one resource type and keeps the
three indices of the aggregate in sync:
- queries: selections made under each query string
- selections: per-id totals with back-references to queries
- recent_selections: eviction queue, most recent first

Once recent_selections is full, selecting a new id evicts the least
recently selected one from every index, so the persisted size stays
bounded by recent_selections_limit * timestamps_limit.

Every record() re-reads the persisted aggregate before updating it to pick
up writes from other instances. There is no locking: two instances racing
on the same key can lose an update (last write wins).
"""

import logging
import time
from typing import Callable, Dict, Optional

from .config import FrecencyOptions
from .errors import StorageError, StorageFormatError
from .models import FrecencyData, IdSelection, QuerySelection
from .redis_client import RedisClient

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class FrecencyStore:
    """
    Persisted frecency aggregate for a single resource type.

    The aggregate is loaded into an in-memory cache at construction and
    replaced after every successful record(). snapshot() returns the cache
    without touching storage.
    """

    def __init__(self, options: FrecencyOptions, storage=None,
                 clock: Optional[Callable[[], int]] = None):
        """
        Initialize store and load the current aggregate.

        Args:
            options: Resource type and limits
            storage: Provider with get(key) and set(key, value); defaults to
                a RedisClient built from REDIS_URL
            clock: Returns the current time in epoch milliseconds
        """
        self.options = options
        self.storage = storage if storage is not None else RedisClient()
        self._clock = clock or now_ms
        self._frecency = self._load()

    @property
    def key(self) -> str:
        return self.options.key

    # =========================================================================
    # Load / Save
    # =========================================================================

    def _load(self) -> FrecencyData:
        limit = self.options.recent_selections_limit
        raw = self.storage.get(self.key)
        if not raw:
            return FrecencyData.empty(limit)

        try:
            frecency = FrecencyData.from_json(raw, limit)
        except StorageFormatError:
            if self.options.strict_format:
                raise
            logger.warning("Discarding malformed frecency data at %s", self.key,
                           exc_info=True)
            return FrecencyData.empty(limit)

        # Limits may have been lowered since the data was written
        for selection_id in frecency.recent_selections.shrink():
            frecency.purge(selection_id)
        timestamps_limit = self.options.timestamps_limit
        for selection in frecency.selections.values():
            del selection.selected_at[:-timestamps_limit]
        for _, bucket in frecency.queries.items():
            for selection in bucket:
                del selection.selected_at[:-timestamps_limit]

        logger.debug("Loaded %d selections from %s",
                     len(frecency.selections), self.key)
        return frecency

    def _save(self, frecency: FrecencyData) -> None:
        if not self.storage.set(self.key, frecency.to_json()):
            raise StorageError(f"Failed to write frecency data to {self.key}")

    def refresh(self) -> FrecencyData:
        """Reload the cached aggregate from storage."""
        self._frecency = self._load()
        return self._frecency

    def snapshot(self) -> FrecencyData:
        """Get the cached aggregate. Callers must not mutate it."""
        return self._frecency

    # =========================================================================
    # Recording Selections
    # =========================================================================

    def record(self, search_query: str, selected_id: str) -> None:
        """
        Record that selected_id was chosen for search_query.

        Empty queries or ids are ignored.

        Args:
            search_query: Query the user typed
            selected_id: Id of the chosen result

        Raises:
            StorageError: If the provider reports a failed write
        """
        if not search_query or not selected_id:
            return
        # Ids are stored as strings so the cache matches what storage reloads
        selected_id = str(selected_id)

        now = self._clock()
        frecency = self._load()

        self._update_by_query(frecency, search_query, selected_id, now)
        self._update_by_id(frecency, search_query, selected_id, now)
        self._update_recent_selections(frecency, selected_id)

        self._save(frecency)
        self._frecency = frecency

    def _update_by_query(self, frecency: FrecencyData, search_query: str,
                         selected_id: str, now: int) -> None:
        previous = frecency.queries.find(search_query, selected_id)
        if previous is None:
            frecency.queries.append(
                search_query, QuerySelection(id=selected_id, selected_at=[now]))
            return

        previous.mark_selected(now, self.options.timestamps_limit)

    def _update_by_id(self, frecency: FrecencyData, search_query: str,
                      selected_id: str, now: int) -> None:
        previous = frecency.selections.get(selected_id)
        if previous is None:
            frecency.selections[selected_id] = IdSelection(
                selected_at=[now], queries={search_query})
            return

        previous.mark_selected(now, self.options.timestamps_limit)
        previous.queries.add(search_query)

    def _update_recent_selections(self, frecency: FrecencyData,
                                  selected_id: str) -> None:
        evicted = frecency.recent_selections.touch(selected_id)
        if evicted is not None:
            logger.debug("Evicting %s from %s", evicted, self.key)
            frecency.purge(evicted)

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_stats(self) -> Dict:
        """Get statistics about the cached aggregate."""
        frecency = self._frecency
        return {
            'resource_type': self.options.resource_type,
            'key': self.key,
            'queries_tracked': len(frecency.queries),
            'ids_tracked': len(frecency.selections),
            'recent_selections': len(frecency.recent_selections),
            'timestamps_stored': sum(
                len(s.selected_at) for s in frecency.selections.values()),
            'timestamps_limit': self.options.timestamps_limit,
            'recent_selections_limit': self.options.recent_selections_limit,
        }
