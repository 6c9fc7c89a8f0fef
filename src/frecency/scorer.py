"""
Frecency Scorer - Result Ranking by Selection History

Scores candidates against a frecency snapshot and reorders them.

Score lookup, first match wins:
1. Exact query: the candidate was selected for this exact query (x1.0)
2. Sub-query: selected for a longer stored query this query is a prefix of,
   e.g. "sho" while "shoes" is stored (x0.75)
3. Id only: selected for any query (x0.5)
4. No history: 0

Candidates without history keep their upstream order after the scored ones.
"""

from collections.abc import Mapping, MutableMapping
from typing import Any, Callable, List, Optional, Sequence, Tuple

from .models import FrecencyData
from .store import now_ms

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS


class Scorer:
    """
    Time-decayed frequency scorer.

    Each selection timestamp is weighted by its age using fixed buckets,
    most recent first. The base score is times_selected multiplied by the
    mean weight over the retained timestamps.
    """

    # (max age in ms, weight); older than the last bucket weighs 0
    DECAY_BUCKETS = [
        (3 * HOUR_MS, 100),
        (DAY_MS, 80),
        (3 * DAY_MS, 60),
        (7 * DAY_MS, 30),
        (14 * DAY_MS, 10),
    ]

    # Multipliers per match tier
    EXACT_MATCH = 1.0
    SUBQUERY_MATCH = 0.75
    ID_MATCH = 0.5

    # Key (or attribute) holding the score on ranked candidates
    SCORE_FIELD = '_frecency_score'

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        """
        Initialize scorer.

        Args:
            clock: Returns the current time in epoch milliseconds
        """
        self._clock = clock or now_ms

    # =========================================================================
    # Base Score
    # =========================================================================

    def decay_weight(self, timestamp: int, now: int) -> int:
        """Weight of a single selection timestamp given the current time."""
        age = now - timestamp
        for max_age, weight in self.DECAY_BUCKETS:
            if age <= max_age:
                return weight
        return 0

    def base_score(self, times_selected: int, selected_at: Sequence[int],
                   now: Optional[int] = None) -> float:
        """
        Calculate the decayed frequency score of a selection.

        Args:
            times_selected: How often the candidate was selected
            selected_at: Retained selection timestamps (epoch ms)
            now: Current time (defaults to the scorer's clock)

        Returns:
            times_selected * mean decay weight, or 0 for no timestamps
        """
        if not selected_at:
            return 0.0

        now = self._clock() if now is None else now
        total = sum(self.decay_weight(t, now) for t in selected_at)
        return times_selected * (total / len(selected_at))

    # =========================================================================
    # Tiered Lookup
    # =========================================================================

    def score(self, frecency: FrecencyData, search_query: str,
              candidate_id: Any, now: Optional[int] = None) -> float:
        """
        Score one candidate against a frecency snapshot.

        When several stored queries extend search_query, the
        lexicographically smallest one holding the candidate is used.

        Args:
            frecency: Snapshot to score against
            search_query: Current query
            candidate_id: Id of the candidate
            now: Current time (defaults to the scorer's clock)

        Returns:
            Frecency score (0 when there is no history)
        """
        if candidate_id is None:
            return 0.0
        candidate_id = str(candidate_id)
        search_query = search_query or ''
        now = self._clock() if now is None else now

        selection = frecency.queries.find(search_query, candidate_id)
        if selection is not None:
            return self.EXACT_MATCH * self.base_score(
                selection.times_selected, selection.selected_at, now)

        for query in frecency.queries.matching_prefix(search_query):
            selection = frecency.queries.find(query, candidate_id)
            if selection is not None:
                return self.SUBQUERY_MATCH * self.base_score(
                    selection.times_selected, selection.selected_at, now)

        by_id = frecency.selections.get(candidate_id)
        if by_id is not None:
            return self.ID_MATCH * self.base_score(
                by_id.times_selected, by_id.selected_at, now)

        return 0.0

    # =========================================================================
    # Ranking
    # =========================================================================

    def rank(self, frecency: FrecencyData, search_query: str,
             candidates: Sequence, id_field: str) -> List:
        """
        Reorder candidates by frecency score.

        Every candidate is annotated with SCORE_FIELD. Candidates with a
        positive score come first, highest score first; ties keep their
        input order. The rest follow in input order.

        Args:
            frecency: Snapshot to score against
            search_query: Current query
            candidates: Mappings or objects carrying an id
            id_field: Key (or attribute) holding each candidate's id

        Returns:
            New list with the same candidates
        """
        now = self._clock()

        scored: List[Tuple[float, Any]] = []
        unscored: List[Any] = []
        for candidate in candidates:
            value = self.score(frecency, search_query,
                               _get_field(candidate, id_field), now)
            _set_field(candidate, self.SCORE_FIELD, value)
            if value > 0:
                scored.append((value, candidate))
            else:
                unscored.append(candidate)

        scored.sort(key=lambda x: x[0], reverse=True)
        return [candidate for _, candidate in scored] + unscored


def _get_field(candidate, name: str):
    if isinstance(candidate, Mapping):
        return candidate.get(name)
    return getattr(candidate, name, None)


def _set_field(candidate, name: str, value) -> None:
    if isinstance(candidate, MutableMapping):
        candidate[name] = value
    else:
        setattr(candidate, name, value)
