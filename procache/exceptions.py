"""Custom exceptions for procache."""


class ProCacheError(Exception):
    """Base exception for all procache errors."""


class ConfigError(ProCacheError):
    """Configuration-related errors."""


class RemoteSourceError(ProCacheError):
    """Remote system of record errors."""


class RemoteNetworkError(RemoteSourceError):
    """Request to the remote source failed."""


class RemoteParseError(RemoteSourceError):
    """Remote response could not be parsed."""


class PersistenceError(ProCacheError):
    """Snapshot persistence errors."""


class SnapshotError(PersistenceError):
    """Persisted snapshot is missing fields or malformed."""


class RefreshError(ProCacheError):
    """Cache refresh errors."""


class UninitializedStoreError(ProCacheError):
    """Operation invoked before a record store exists."""
