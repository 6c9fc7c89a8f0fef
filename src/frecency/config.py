"""
Frecency Configuration

Options for a single resource type's frecency store. Limits that are unset
or zero fall back to the defaults.
"""

import os
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError

DEFAULT_TIMESTAMPS_LIMIT = 10
DEFAULT_RECENT_SELECTIONS_LIMIT = 100
DEFAULT_KEY_PREFIX = "frecency_"


@dataclass
class FrecencyOptions:
    """
    Configuration for a frecency store.

    Attributes:
        resource_type: Identifies the persisted aggregate (required)
        timestamps_limit: Max timestamps retained per selection entry
        recent_selections_limit: Max distinct ids tracked
        key_prefix: Prepended to resource_type to build the storage key
        strict_format: Raise on a malformed persisted blob instead of
            starting over with empty data
    """
    resource_type: str
    timestamps_limit: Optional[int] = None
    recent_selections_limit: Optional[int] = None
    key_prefix: str = DEFAULT_KEY_PREFIX
    strict_format: bool = False

    def __post_init__(self):
        if not self.resource_type:
            raise ConfigurationError("Resource type is required.")

        self.timestamps_limit = _limit(
            'timestamps_limit', self.timestamps_limit, DEFAULT_TIMESTAMPS_LIMIT)
        self.recent_selections_limit = _limit(
            'recent_selections_limit', self.recent_selections_limit,
            DEFAULT_RECENT_SELECTIONS_LIMIT)

    @property
    def key(self) -> str:
        """Storage key for this resource type."""
        return f"{self.key_prefix}{self.resource_type}"

    @classmethod
    def from_env(cls, resource_type: Optional[str] = None) -> 'FrecencyOptions':
        """
        Build options from FRECENCY_* environment variables.

        Args:
            resource_type: Overrides FRECENCY_RESOURCE_TYPE if provided

        Returns:
            FrecencyOptions instance
        """
        return cls(
            resource_type=resource_type or os.environ.get('FRECENCY_RESOURCE_TYPE', ''),
            timestamps_limit=_env_int('FRECENCY_TIMESTAMPS_LIMIT'),
            recent_selections_limit=_env_int('FRECENCY_RECENT_SELECTIONS_LIMIT'),
            key_prefix=os.environ.get('FRECENCY_KEY_PREFIX', DEFAULT_KEY_PREFIX),
            strict_format=os.environ.get('FRECENCY_STRICT_FORMAT', '').lower()
            in ('1', 'true', 'yes'),
        )


def _limit(name: str, value: Optional[int], default: int) -> int:
    if not value:
        return default
    if value < 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return int(value)


def _env_int(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")
