"""Refresh service for the ProShop work order cache."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from procache.cache.integrity import verify_integrity
from procache.cache.store import CacheFreshness, RecordStore
from procache.config import UpdateCriteria
from procache.exceptions import RefreshError, UninitializedStoreError
from procache.models.snapshot import SaveAcknowledgement
from procache.models.work_order import WorkOrderRecord, WorkOrderStatus
from procache.persistence.base import PersistenceAdapter
from procache.refresh.fetcher import DEFAULT_CONCURRENCY, FetchScheduler
from procache.refresh.notify import Notifier, NullNotifier
from procache.refresh.progress import RefreshProgress
from procache.refresh.queue_builder import FetchQueue, QueueBuilder
from procache.remote.base import RemoteRecordSource

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    """Result of a refresh pass."""

    status: str
    queued: int
    processed: int
    started_at: datetime
    finished_at: datetime
    failed: list[str] = field(default_factory=list)
    error_message: Optional[str] = None


class RefreshService:
    """Own the record store and coordinate refresh passes against ProShop."""

    def __init__(
        self,
        source: RemoteRecordSource,
        persistence: PersistenceAdapter,
        criteria: UpdateCriteria,
        notifier: Optional[Notifier] = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        progress: Optional[RefreshProgress] = None,
    ):
        self.source = source
        self.persistence = persistence
        self.criteria = criteria
        self.progress = progress
        self.notifier = notifier or progress or NullNotifier()
        self.concurrency = concurrency
        self._store: Optional[RecordStore] = None
        self._queue: Optional[FetchQueue] = None
        self._lock = asyncio.Lock()
        self._running = False

    @property
    def store(self) -> RecordStore:
        if self._store is None:
            raise UninitializedStoreError("Tried to access uninitialized cache")
        return self._store

    def is_initialized(self) -> bool:
        return self._store is not None

    def is_running(self) -> bool:
        return self._running or self._lock.locked()

    def register_notifier(self, notifier: Optional[Notifier]) -> None:
        self.notifier = notifier or NullNotifier()

    # =========================================================================
    # Store lifecycle
    # =========================================================================

    def new_store(self) -> RecordStore:
        """Discard every cached record and start from an empty store."""
        if self.is_running():
            raise RefreshError("Cannot reset the cache while a refresh is running")
        self._store = RecordStore()
        self._queue = None
        self.notifier.notify("Created new cache")
        return self._store

    reset = new_store

    async def load_snapshot(self) -> bool:
        """Restore the persisted snapshot as the active store.

        Returns False when nothing was persisted or the snapshot failed the
        integrity check; the current store is kept in both cases.
        """
        if self.is_running():
            raise RefreshError("Cannot load a snapshot while a refresh is running")

        snapshot = await self.persistence.load()
        if snapshot is None:
            self.notifier.notify("No saved cache found")
            return False

        self.notifier.notify("Imported database")
        self.notifier.notify("Verifying integrity")
        if not verify_integrity(snapshot.workorders):
            self.notifier.notify("ERROR: Database failed integrity test")
            logger.error("Rejected snapshot with duplicate work order indices")
            return False

        self._store = RecordStore.from_snapshot(snapshot)
        self._queue = None
        self.notifier.notify("All checks passed")
        logger.info("Loaded %d work orders from snapshot", len(self._store))
        return True

    async def save_snapshot(self) -> SaveAcknowledgement:
        store = self.store
        saved_at = datetime.now()
        snapshot = store.to_snapshot()
        snapshot.timestamp_save = saved_at
        self.notifier.notify("Saving cache")
        acknowledgement = await self.persistence.save(snapshot)
        # Only a persisted snapshot clears UNSAVED_CHANGES
        store.mark_saved(saved_at)
        return acknowledgement

    # =========================================================================
    # Refresh pass
    # =========================================================================

    async def run_refresh(self, criteria: Optional[UpdateCriteria] = None) -> RefreshResult:
        if self.is_running():
            raise RefreshError("Refresh task already running")

        store = self.store
        criteria = criteria or self.criteria

        async with self._lock:
            self._running = True
            started_at = datetime.now()
            queue: Optional[FetchQueue] = None

            try:
                if self.progress:
                    self.progress.start()

                queue = await QueueBuilder(self.notifier).build(criteria, store, self.source)
                self._queue = queue
                if self.progress:
                    self.progress.update(
                        "fetch", f"Updating {queue.total} work orders", total=queue.total
                    )
                summary = await FetchScheduler(
                    self.notifier, concurrency=self.concurrency
                ).run(queue, store, self.source)
                if self.progress:
                    self.progress.update(
                        "finalize",
                        f"{summary.processed} of {summary.total} work orders updated",
                        processed=summary.processed,
                        failed=len(summary.failed),
                    )
                    self.progress.finish_success()

                result = RefreshResult(
                    status="success",
                    queued=summary.total,
                    processed=summary.processed,
                    started_at=started_at,
                    finished_at=datetime.now(),
                    failed=summary.failed,
                )
                await self.persistence.record_update(result)
                return result

            except Exception as exc:
                if self.progress:
                    self.progress.finish_error(str(exc))
                result = RefreshResult(
                    status="error",
                    queued=queue.total if queue else 0,
                    processed=queue.processed if queue else 0,
                    started_at=started_at,
                    finished_at=datetime.now(),
                    error_message=str(exc),
                )
                await self.persistence.record_update(result)
                raise
            finally:
                self._running = False

    # =========================================================================
    # Read access
    # =========================================================================

    def freshness(self) -> CacheFreshness:
        if self._store is None:
            return CacheFreshness.EMPTY
        return self._store.freshness()

    def matching_work_orders(
        self,
        status: Optional[WorkOrderStatus] = None,
        resource: Optional[str] = None,
    ) -> list[WorkOrderRecord]:
        return self.store.filter(status=status, resource=resource)

    def remaining(self) -> int:
        """Work orders still waiting in the current (or last) pass."""
        return self._queue.remaining if self._queue else 0

    def counts(self) -> tuple[int, int]:
        """(processed, total) of the current (or last) pass."""
        if self._queue is None:
            return 0, 0
        return self._queue.processed, self._queue.total
