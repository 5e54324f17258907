"""Snapshot persistence backends."""

from procache.config import PersistenceConfig
from procache.database.connection import Database
from procache.persistence.base import PersistenceAdapter, snapshot_filename
from procache.persistence.json_snapshot import JsonSnapshotAdapter
from procache.persistence.sqlite_snapshot import SqliteSnapshotAdapter

__all__ = [
    "PersistenceAdapter",
    "JsonSnapshotAdapter",
    "SqliteSnapshotAdapter",
    "create_persistence",
    "snapshot_filename",
]


def create_persistence(config: PersistenceConfig, db: Database | None = None) -> PersistenceAdapter:
    """Build the adapter selected by ``config.backend``.

    The sqlite backend needs a connected Database.
    """
    if config.backend == "sqlite":
        if db is None:
            raise ValueError("sqlite persistence requires a Database")
        return SqliteSnapshotAdapter(db)
    return JsonSnapshotAdapter(config.snapshot_path, archive_dir=config.archive_dir)
