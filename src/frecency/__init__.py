"""
Frecency - Search Result Ranking by Selection History

Ranks search results using a user's past selections:
- Frequency: How often was the result selected?
- Recency: How long ago were those selections?
- Query match: Was it selected for this query, a longer one, or any?

Usage:
    from frecency import Frecency

    frecency = Frecency('products')

    # When the user picks a result
    frecency.record('shoes', 'p1')

    # When rendering results
    results = frecency.rank('sho', results, 'id')
"""

from .config import FrecencyOptions
from .engine import Frecency
from .errors import ConfigurationError, FrecencyError, StorageError, StorageFormatError
from .models import FrecencyData, IdSelection, QuerySelection
from .redis_client import RedisClient
from .scorer import Scorer
from .store import FrecencyStore

__all__ = [
    'ConfigurationError', 'Frecency', 'FrecencyData', 'FrecencyError',
    'FrecencyOptions', 'FrecencyStore', 'IdSelection', 'QuerySelection',
    'RedisClient', 'Scorer', 'StorageError', 'StorageFormatError',
]
