"""Persisted snapshot document for the work order cache."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from procache.models.work_order import WorkOrderRecord


class CacheSnapshot(BaseModel):
    """Serialized form of a RecordStore."""

    timestamp_data: Optional[datetime] = None
    timestamp_save: Optional[datetime] = None
    workorders: list[WorkOrderRecord] = Field(default_factory=list)


class SaveAcknowledgement(BaseModel):
    """Returned by persistence adapters after a successful save."""

    location: str
    records_saved: int
    saved_at: Optional[datetime] = None
