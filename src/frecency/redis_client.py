"""
Redis Client for Frecency

Wraps redis-py as the key-value persistence provider for frecency stores.
Each resource type is stored as a single JSON string under its own key.
"""

import os
from typing import List, Optional

import redis


class RedisClient:
    """Redis client wrapper implementing the frecency storage contract."""

    def __init__(self, url: Optional[str] = None, db: Optional[int] = None):
        """
        Initialize Redis connection.

        Args:
            url: Redis URL (defaults to REDIS_URL env var or localhost)
            db: Database number (overrides URL's db if provided)
        """
        self.url = url or os.environ.get('REDIS_URL', 'redis://localhost:6379/0')
        self._client: Optional[redis.Redis] = None
        self._db_override = db

    @property
    def client(self) -> redis.Redis:
        """Lazy-initialize Redis connection."""
        if self._client is None:
            self._client = redis.from_url(self.url, decode_responses=True)
            if self._db_override is not None:
                self._client.select(self._db_override)
        return self._client

    def ping(self) -> bool:
        """Check if Redis is available."""
        try:
            return self.client.ping()
        except redis.ConnectionError:
            return False

    # =========================================================================
    # Storage Contract
    # =========================================================================

    def get(self, key: str) -> Optional[str]:
        """Get the stored blob for key, or None if absent."""
        return self.client.get(key)

    def set(self, key: str, value: str) -> bool:
        """
        Store a blob under key, replacing any previous value.

        Args:
            key: Storage key
            value: Serialized frecency data

        Returns:
            True if Redis acknowledged the write
        """
        return bool(self.client.set(key, value))

    def keys(self, pattern: str) -> List[str]:
        """Get all keys matching pattern."""
        return self.client.keys(pattern)
