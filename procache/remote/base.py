"""Interface the refresh engine expects from the system of record."""

from __future__ import annotations

from typing import Protocol, Sequence

from procache.models.work_order import SearchResult, WorkOrderDetail


class RemoteRecordSource(Protocol):
    async def search(self, query_id: str) -> Sequence[SearchResult]:
        """Run a saved query and list the work orders it reports."""
        ...

    async def fetch_detail(self, index: str) -> WorkOrderDetail:
        """Fetch one work order.

        Raises:
            RemoteNetworkError: When the remote source cannot be reached
            RemoteParseError: When the response does not look like a work order
        """
        ...
