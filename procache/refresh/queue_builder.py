"""Build the list of work orders a refresh pass will fetch."""

from __future__ import annotations

import logging
from typing import Optional

from procache.cache.store import RecordStore
from procache.config import UpdateCriteria
from procache.exceptions import RemoteSourceError
from procache.models.work_order import WorkOrderStatus
from procache.refresh.criteria import matches
from procache.refresh.notify import Notifier, NullNotifier
from procache.remote.base import RemoteRecordSource

logger = logging.getLogger(__name__)


class FetchQueue:
    """Pending work order indices for one pass.

    Pops are LIFO. An index is accepted at most once per queue, even after
    it has been popped.
    """

    def __init__(self) -> None:
        self._pending: list[str] = []
        self._seen: set[str] = set()
        self.processed = 0
        self.total = 0

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, index: object) -> bool:
        return index in self._seen

    def enqueue(self, index: str) -> bool:
        if not index or index in self._seen:
            return False
        self._seen.add(index)
        self._pending.append(index)
        return True

    def pop(self) -> Optional[str]:
        if not self._pending:
            return None
        return self._pending.pop()

    def pending(self) -> list[str]:
        return list(self._pending)

    def seal(self) -> None:
        """Freeze the counters before scheduling starts."""
        self.total = len(self._pending)
        self.processed = 0

    def mark_processed(self) -> int:
        if self.processed < self.total:
            self.processed += 1
        return self.processed

    @property
    def remaining(self) -> int:
        return self.total - self.processed


class QueueBuilder:
    """Assemble a deduplicated refresh queue from remote queries and the cache."""

    def __init__(self, notifier: Optional[Notifier] = None):
        self.notifier = notifier or NullNotifier()

    async def build(
        self,
        criteria: UpdateCriteria,
        store: RecordStore,
        source: RemoteRecordSource,
    ) -> FetchQueue:
        queue = FetchQueue()

        if criteria.fetch_external:
            for query_id in criteria.queries:
                await self._add_query_results(query_id, criteria, store, source, queue)

        if criteria.fetch_internal:
            self.notifier.notify("Searching internal cache")
            added = 0
            for record in store:
                if matches(record, criteria) and queue.enqueue(record.index):
                    added += 1
            self.notifier.notify(f"Found {added} matching criteria")

        unknowns = store.indices_with_status(WorkOrderStatus.UNKNOWN)
        if unknowns:
            self.notifier.notify(
                f"Found {len(unknowns)} of unknown status, attempting to update"
            )
            for index in unknowns:
                queue.enqueue(index)

        queue.seal()
        logger.info("Refresh queue built with %d work orders", queue.total)
        return queue

    async def _add_query_results(
        self,
        query_id: str,
        criteria: UpdateCriteria,
        store: RecordStore,
        source: RemoteRecordSource,
        queue: FetchQueue,
    ) -> None:
        self.notifier.notify(f"Processing query: {query_id}")
        try:
            results = await source.search(query_id)
        except RemoteSourceError as exc:
            logger.warning("Query %s failed, skipping: %s", query_id, exc)
            self.notifier.notify(f"Query {query_id} failed: {exc}")
            return

        added = 0
        for result in results:
            if result.index not in store:
                # Never seen before, always fetch
                added += queue.enqueue(result.index)
            elif result.reported_status in criteria.statuses:
                added += queue.enqueue(result.index)

        self.notifier.notify(f"Found {len(results)} entries for {query_id}")
        self.notifier.notify(f"Found {added} matching criteria")
