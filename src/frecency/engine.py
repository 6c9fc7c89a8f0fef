"""
Frecency Engine

One long-lived engine per resource type: records selections into a
FrecencyStore and ranks search results against its cached snapshot.
"""

from typing import Callable, Dict, List, Optional, Sequence

from .config import FrecencyOptions
from .scorer import Scorer
from .store import FrecencyStore


class Frecency:
    """
    Frecency engine for a single resource type.

    Usage:
        frecency = Frecency('products')
        frecency.record('shoes', 'p1')
        results = frecency.rank('sho', results, 'id')
    """

    def __init__(self, resource_type: Optional[str] = None, storage=None,
                 timestamps_limit: Optional[int] = None,
                 recent_selections_limit: Optional[int] = None,
                 clock: Optional[Callable[[], int]] = None,
                 options: Optional[FrecencyOptions] = None):
        """
        Initialize engine and load persisted data.

        Args:
            resource_type: Identifies the persisted data (required unless
                options is given)
            storage: Provider with get/set (defaults to RedisClient)
            timestamps_limit: Max timestamps kept per selection (default 10)
            recent_selections_limit: Max ids tracked (default 100)
            clock: Returns the current time in epoch milliseconds
            options: Prebuilt options, overrides the individual arguments

        Raises:
            ConfigurationError: If no resource type is given
        """
        self.options = options or FrecencyOptions(
            resource_type=resource_type,
            timestamps_limit=timestamps_limit,
            recent_selections_limit=recent_selections_limit,
        )
        self.store = FrecencyStore(self.options, storage=storage, clock=clock)
        self.scorer = Scorer(clock=clock)

    @property
    def resource_type(self) -> str:
        return self.options.resource_type

    def record(self, search_query: str, selected_id: str) -> None:
        """Record a selection. Empty queries or ids are ignored."""
        self.store.record(search_query, selected_id)

    def rank(self, search_query: str, candidates: Sequence,
             id_field: str = 'id') -> List:
        """Reorder candidates by frecency, using the cached snapshot only."""
        return self.scorer.rank(self.store.snapshot(), search_query,
                                candidates, id_field)

    def refresh(self) -> None:
        """Reload the snapshot from storage."""
        self.store.refresh()

    def get_stats(self) -> Dict:
        return self.store.get_stats()
