"""Pydantic models for procache."""

from procache.models.refresh import (
    CacheStatusResponse,
    RefreshStatusResponse,
    RefreshTriggerRequest,
)
from procache.models.snapshot import CacheSnapshot, SaveAcknowledgement
from procache.models.work_order import (
    OperationRow,
    SearchResult,
    TrackingRow,
    WorkOrderDetail,
    WorkOrderRecord,
    WorkOrderStatus,
    parse_status,
)

__all__ = [
    "OperationRow",
    "TrackingRow",
    "WorkOrderDetail",
    "WorkOrderRecord",
    "WorkOrderStatus",
    "SearchResult",
    "parse_status",
    "CacheSnapshot",
    "SaveAcknowledgement",
    "RefreshTriggerRequest",
    "RefreshStatusResponse",
    "CacheStatusResponse",
]
