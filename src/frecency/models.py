"""
Frecency Data Model

The persisted aggregate for one resource type:
- queries: query string -> selections made for that query (QueryIndex)
- selections: candidate id -> IdSelection with back-references to queries
- recent_selections: distinct ids, most recent first (RecencyList)

Serialized as JSON with the field names used by the browser frecency
library, so blobs written by either side stay readable:

    {"queries": {"shoes": [{"id": "p1", "timesSelected": 1, "selectedAt": [...]}]},
     "selections": {"p1": {"timesSelected": 1, "selectedAt": [...], "queries": {"shoes": true}}},
     "recentSelections": ["p1"]}

Timestamps are epoch milliseconds.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, List, Set

from .errors import StorageFormatError
from .indices import QueryIndex, RecencyList


class _Timestamped:
    """Selection count plus a bounded, ascending list of selection times."""

    times_selected: int
    selected_at: List[int]

    def mark_selected(self, now: int, timestamps_limit: int) -> None:
        self.times_selected += 1
        # Keep the sequence non-decreasing even if the clock stepped back
        if self.selected_at and now < self.selected_at[-1]:
            now = self.selected_at[-1]
        self.selected_at.append(now)
        del self.selected_at[:-timestamps_limit]


@dataclass
class QuerySelection(_Timestamped):
    """A candidate selected for a specific query."""
    id: str
    times_selected: int = 1
    selected_at: List[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'timesSelected': self.times_selected,
            'selectedAt': list(self.selected_at),
        }

    @classmethod
    def from_dict(cls, d: dict) -> 'QuerySelection':
        return cls(
            id=str(d['id']),
            times_selected=int(d['timesSelected']),
            selected_at=[int(t) for t in d['selectedAt']],
        )


@dataclass
class IdSelection(_Timestamped):
    """All selections of a candidate, across queries."""
    times_selected: int = 1
    selected_at: List[int] = field(default_factory=list)
    queries: Set[str] = field(default_factory=set)

    def to_dict(self) -> dict:
        return {
            'timesSelected': self.times_selected,
            'selectedAt': list(self.selected_at),
            'queries': {query: True for query in sorted(self.queries)},
        }

    @classmethod
    def from_dict(cls, d: dict) -> 'IdSelection':
        queries = d.get('queries') or {}
        if isinstance(queries, dict):
            queries = [query for query, present in queries.items() if present]
        return cls(
            times_selected=int(d['timesSelected']),
            selected_at=[int(t) for t in d['selectedAt']],
            queries=set(queries),
        )


@dataclass
class FrecencyData:
    """The full frecency aggregate for one resource type."""
    queries: QueryIndex
    selections: Dict[str, IdSelection]
    recent_selections: RecencyList

    @classmethod
    def empty(cls, recent_selections_limit: int) -> 'FrecencyData':
        return cls(
            queries=QueryIndex(),
            selections={},
            recent_selections=RecencyList(recent_selections_limit),
        )

    def purge(self, selection_id: str) -> None:
        """Remove an id from selections and from every query that references it."""
        selection = self.selections.pop(selection_id, None)
        if selection is None:
            return
        for query in selection.queries:
            self.queries.remove_id(query, selection_id)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict:
        return {
            'queries': {
                query: [s.to_dict() for s in bucket]
                for query, bucket in self.queries.items()
            },
            'selections': {
                selection_id: selection.to_dict()
                for selection_id, selection in self.selections.items()
            },
            'recentSelections': self.recent_selections.to_list(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(',', ':'))

    @classmethod
    def from_dict(cls, d: dict, recent_selections_limit: int) -> 'FrecencyData':
        """
        Build an aggregate from its decoded JSON form.

        Raises:
            StorageFormatError: If the structure does not match the model
        """
        try:
            queries = QueryIndex({
                str(query): [QuerySelection.from_dict(s) for s in bucket]
                for query, bucket in d.get('queries', {}).items()
            })
            selections = {
                str(selection_id): IdSelection.from_dict(s)
                for selection_id, s in d.get('selections', {}).items()
            }
            recent = RecencyList(
                recent_selections_limit,
                [str(i) for i in d.get('recentSelections', [])],
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise StorageFormatError(f"Malformed frecency data: {e}") from e

        return cls(queries=queries, selections=selections, recent_selections=recent)

    @classmethod
    def from_json(cls, data: str, recent_selections_limit: int) -> 'FrecencyData':
        try:
            decoded = json.loads(data)
        except (TypeError, ValueError) as e:
            raise StorageFormatError(f"Frecency data is not valid JSON: {e}") from e
        if not isinstance(decoded, dict):
            raise StorageFormatError(
                f"Frecency data must be an object, got {type(decoded).__name__}")
        return cls.from_dict(decoded, recent_selections_limit)
