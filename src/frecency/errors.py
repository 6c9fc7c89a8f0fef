"""
Frecency Errors

All errors raised by the frecency package derive from FrecencyError.
"""


class FrecencyError(Exception):
    """Base class for frecency errors."""


class ConfigurationError(FrecencyError, ValueError):
    """Engine or store was constructed with invalid options."""


class StorageFormatError(FrecencyError):
    """Persisted frecency blob could not be decoded."""


class StorageError(FrecencyError):
    """Persistence provider reported a failed write."""
