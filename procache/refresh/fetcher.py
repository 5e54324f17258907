"""Bounded-concurrency fetch-and-merge pass over a refresh queue."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from procache.cache.store import RecordStore
from procache.exceptions import RemoteSourceError
from procache.refresh.notify import Notifier, NullNotifier
from procache.refresh.queue_builder import FetchQueue
from procache.remote.base import RemoteRecordSource

logger = logging.getLogger(__name__)

# Concurrent requests against ProShop
DEFAULT_CONCURRENCY = 3


@dataclass
class FetchSummary:
    """Outcome of one fetch pass."""

    processed: int
    total: int
    updated: int = 0
    created: int = 0
    failed: list[str] = field(default_factory=list)


class FetchScheduler:
    """Drain a FetchQueue with a fixed pool of worker coroutines.

    Workers share the queue; a pop never awaits, so two workers can never
    take the same index. Store merges happen between awaits as well.
    """

    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        clock: Callable[[], datetime] = datetime.now,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.notifier = notifier or NullNotifier()
        self.concurrency = concurrency
        self.clock = clock

    async def run(
        self,
        queue: FetchQueue,
        store: RecordStore,
        source: RemoteRecordSource,
    ) -> FetchSummary:
        if queue.total == 0:
            queue.seal()
        summary = FetchSummary(processed=queue.processed, total=queue.total)
        worker_count = min(self.concurrency, len(queue))
        logger.info(
            "Fetching %d work orders with %d workers", len(queue), worker_count
        )

        await asyncio.gather(
            *(self._worker(n, queue, store, source, summary) for n in range(worker_count))
        )

        store.mark_synced(self.clock())
        summary.processed = queue.processed
        summary.total = queue.total
        if summary.failed:
            logger.warning(
                "Fetch pass finished with %d failures: %s",
                len(summary.failed), ", ".join(summary.failed),
            )
        return summary

    async def _worker(
        self,
        worker_id: int,
        queue: FetchQueue,
        store: RecordStore,
        source: RemoteRecordSource,
        summary: FetchSummary,
    ) -> None:
        while True:
            index = queue.pop()
            if index is None:
                return

            try:
                detail = await source.fetch_detail(index)
            except RemoteSourceError as exc:
                logger.warning("Worker %d: fetching %s failed: %s", worker_id, index, exc)
                summary.failed.append(index)
                self.notifier.notify(f"Failed to update {index}: {exc}")
            else:
                if store.merge_detail(index, detail):
                    summary.updated += 1
                else:
                    summary.created += 1

            processed = queue.mark_processed()
            self.notifier.notify(f"{processed} of {queue.total} work orders updated")
