"""Work order cache storage."""
from procache.cache.integrity import verify_integrity
from procache.cache.store import CacheFreshness, RecordStore

__all__ = ["RecordStore", "CacheFreshness", "verify_integrity"]
