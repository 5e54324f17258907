"""Tests for procache/exceptions.py"""

import pytest

from procache.exceptions import (
    ConfigError,
    PersistenceError,
    ProCacheError,
    RefreshError,
    RemoteNetworkError,
    RemoteParseError,
    RemoteSourceError,
    SnapshotError,
    UninitializedStoreError,
)


class TestExceptionHierarchy:
    """Test exception inheritance."""

    def test_all_inherit_from_procache_error(self):
        for exc_type in (
            ConfigError,
            RemoteSourceError,
            PersistenceError,
            RefreshError,
            UninitializedStoreError,
        ):
            assert issubclass(exc_type, ProCacheError)

    def test_remote_errors_inherit_from_remote_source_error(self):
        """Fetch failures are contained by catching RemoteSourceError."""
        assert issubclass(RemoteNetworkError, RemoteSourceError)
        assert issubclass(RemoteParseError, RemoteSourceError)

    def test_snapshot_error_is_persistence_error(self):
        assert issubclass(SnapshotError, PersistenceError)

    def test_procache_error_is_exception(self):
        assert issubclass(ProCacheError, Exception)


class TestExceptionMessages:
    """Test exception message handling."""

    def test_exception_message_preserved(self):
        msg = "Test error message"

        assert str(ProCacheError(msg)) == msg
        assert str(RemoteNetworkError(msg)) == msg
        assert str(SnapshotError(msg)) == msg

    def test_catch_by_base(self):
        with pytest.raises(ProCacheError):
            raise RemoteParseError("bad page")
