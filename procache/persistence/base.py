"""Persistence adapter interface for cache snapshots."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional, Protocol

from procache.models.snapshot import CacheSnapshot, SaveAcknowledgement

if TYPE_CHECKING:
    from procache.refresh.service import RefreshResult


class PersistenceAdapter(Protocol):
    async def load(self) -> Optional[CacheSnapshot]:
        """Return the persisted snapshot, or None when nothing was saved yet.

        Raises:
            SnapshotError: When the stored snapshot is malformed
        """
        ...

    async def save(self, snapshot: CacheSnapshot) -> SaveAcknowledgement:
        ...

    async def record_update(self, result: "RefreshResult") -> None:
        ...

    async def load_history(self, limit: int = 10) -> list[dict]:
        ...


def snapshot_filename(when: Optional[datetime] = None, suffix: str = ".pro_cache") -> str:
    """Archive file name in the ``2026-1-9@08-05.pro_cache`` form."""
    when = when or datetime.now()
    return f"{when.year}-{when.month}-{when.day}@{when.hour:02d}-{when.minute:02d}{suffix}"


def history_row(result: "RefreshResult") -> dict:
    return {
        "started_at": result.started_at.isoformat(),
        "finished_at": result.finished_at.isoformat(),
        "status": result.status,
        "queued": result.queued,
        "processed": result.processed,
        "failed": len(result.failed),
        "error_message": result.error_message,
    }
