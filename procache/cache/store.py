"""In-memory store of cached work orders."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Iterator, Optional

from procache.cache.integrity import verify_integrity
from procache.models.snapshot import CacheSnapshot
from procache.models.work_order import WorkOrderDetail, WorkOrderRecord, WorkOrderStatus


class CacheFreshness(str, Enum):
    EMPTY = "EMPTY"
    OUTDATED = "OUTDATED"
    OK = "OK"
    UNSAVED_CHANGES = "UNSAVED_CHANGES"
    ERROR = "ERROR"


class RecordStore:
    """Keyed collection of work orders plus sync/save timestamps.

    Records keep their insertion order. Callers only ever receive copies;
    the stored records are mutated through ``upsert`` and ``merge_detail``.
    """

    def __init__(
        self,
        data_timestamp: Optional[datetime] = None,
        save_timestamp: Optional[datetime] = None,
    ):
        self.data_timestamp = data_timestamp
        self.save_timestamp = save_timestamp
        self._records: list[WorkOrderRecord] = []
        self._positions: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, index: object) -> bool:
        return index in self._positions

    def __iter__(self) -> Iterator[WorkOrderRecord]:
        for record in self._records:
            yield record.model_copy(deep=True)

    def lookup(self, index: str) -> Optional[WorkOrderRecord]:
        position = self._positions.get(index)
        if position is None:
            return None
        return self._records[position].model_copy(deep=True)

    def upsert(self, record: WorkOrderRecord) -> None:
        """Replace the record sharing ``record.index`` in place, else append."""
        stored = record.model_copy(deep=True)
        position = self._positions.get(stored.index)
        if position is None:
            self._positions[stored.index] = len(self._records)
            self._records.append(stored)
        else:
            self._records[position] = stored

    def merge_detail(self, index: str, detail: WorkOrderDetail) -> bool:
        """Apply freshly fetched fields to ``index``.

        Returns True when an existing record was updated in place and False
        when a new record had to be created.
        """
        position = self._positions.get(index)
        if position is None:
            self.upsert(WorkOrderRecord.from_detail(index, detail))
            return False
        self._records[position].apply_detail(detail)
        return True

    def filter(
        self,
        status: Optional[WorkOrderStatus] = None,
        resource: Optional[str] = None,
    ) -> list[WorkOrderRecord]:
        matches = []
        for record in self._records:
            if status is not None and record.status != status:
                continue
            if resource is not None and not record.has_resource_prefix(resource):
                continue
            matches.append(record.model_copy(deep=True))
        return matches

    def indices(self) -> list[str]:
        return [record.index for record in self._records]

    def indices_with_status(self, status: WorkOrderStatus) -> list[str]:
        return [record.index for record in self._records if record.status == status]

    def mark_synced(self, when: Optional[datetime] = None) -> None:
        self.data_timestamp = when or datetime.now()

    def mark_saved(self, when: Optional[datetime] = None) -> None:
        self.save_timestamp = when or datetime.now()

    def freshness(self, today: Optional[date] = None) -> CacheFreshness:
        today = today or date.today()
        if self.data_timestamp is None:
            return CacheFreshness.EMPTY
        if self.data_timestamp.date() != today:
            return CacheFreshness.OUTDATED
        if self.save_timestamp is None or self.data_timestamp > self.save_timestamp:
            return CacheFreshness.UNSAVED_CHANGES
        if self.data_timestamp.date() == today:
            return CacheFreshness.OK
        return CacheFreshness.ERROR

    def verify_integrity(self) -> bool:
        return verify_integrity(self._records)

    def to_snapshot(self) -> CacheSnapshot:
        return CacheSnapshot(
            timestamp_data=self.data_timestamp,
            timestamp_save=self.save_timestamp,
            workorders=[record.model_copy(deep=True) for record in self._records],
        )

    @classmethod
    def from_snapshot(cls, snapshot: CacheSnapshot) -> "RecordStore":
        """Build a store from a snapshot that already passed verify_integrity."""
        store = cls(
            data_timestamp=snapshot.timestamp_data,
            save_timestamp=snapshot.timestamp_save,
        )
        for record in snapshot.workorders:
            store.upsert(record)
        return store
