"""Pydantic models for ProShop work orders."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class WorkOrderStatus(str, Enum):
    """Closed set of work order states reported by ProShop."""

    ACTIVE = "ACTIVE"
    CANCELED = "CANCELED"
    COMPLETE = "COMPLETE"
    INVOICED = "INVOICED"
    MANUFACTURING_COMPLETE = "MANUFACTURING_COMPLETE"
    ON_HOLD = "ON_HOLD"
    SHIPPED = "SHIPPED"
    UNKNOWN = "UNKNOWN"


# Normalized display text -> status. Anything not listed maps to UNKNOWN.
STATUS_LOOKUP: dict[str, WorkOrderStatus] = {
    "active": WorkOrderStatus.ACTIVE,
    "canceled": WorkOrderStatus.CANCELED,
    "cancelled": WorkOrderStatus.CANCELED,
    "complete": WorkOrderStatus.COMPLETE,
    "invoiced": WorkOrderStatus.INVOICED,
    "manufacturing complete": WorkOrderStatus.MANUFACTURING_COMPLETE,
    "on hold": WorkOrderStatus.ON_HOLD,
    "shipped": WorkOrderStatus.SHIPPED,
}


def parse_status(text: Optional[str]) -> WorkOrderStatus:
    """Map ProShop status text (any case, padded) to a WorkOrderStatus."""
    if not text:
        return WorkOrderStatus.UNKNOWN
    normalized = " ".join(text.split()).lower()
    return STATUS_LOOKUP.get(normalized, WorkOrderStatus.UNKNOWN)


class OperationRow(BaseModel):
    """One routing step of a work order, tied to a resource."""

    op: str
    description: str = ""
    resource: str = ""
    complete: bool = False
    complete_total: Decimal = Decimal("0")
    complete_date: Optional[datetime] = None


class TrackingRow(BaseModel):
    """Recorded machine run time against a work order."""

    date_started: datetime
    date_ended: Optional[datetime] = None
    op: str = ""
    resource: str = ""
    quantity_start: Decimal = Decimal("0")
    quantity_end: Decimal = Decimal("0")
    run_total: Decimal = Decimal("0")


class WorkOrderDetail(BaseModel):
    """Mutable part of a work order as fetched from the remote source."""

    status: WorkOrderStatus = WorkOrderStatus.UNKNOWN
    order_quantity: int = 0
    routing_rows: list[OperationRow] = Field(default_factory=list)
    tracking_rows: list[TrackingRow] = Field(default_factory=list)
    scheduled_start_date: Optional[datetime] = None


class WorkOrderRecord(WorkOrderDetail):
    """Cached work order keyed by its ProShop index (e.g. ``21-0001``)."""

    index: str

    @classmethod
    def from_detail(cls, index: str, detail: WorkOrderDetail) -> "WorkOrderRecord":
        return cls(index=index, **detail.model_dump())

    def apply_detail(self, detail: WorkOrderDetail) -> None:
        """Replace mutable fields in place. ``index`` is never touched."""
        self.status = detail.status
        self.order_quantity = detail.order_quantity
        self.routing_rows = [row.model_copy() for row in detail.routing_rows]
        self.tracking_rows = [row.model_copy() for row in detail.tracking_rows]
        self.scheduled_start_date = detail.scheduled_start_date

    def has_resource_prefix(self, prefix: str) -> bool:
        """Case-insensitive prefix match against any routing row resource."""
        needle = prefix.lower()
        return any(row.resource.lower().startswith(needle) for row in self.routing_rows)


class SearchResult(BaseModel):
    """One row of a ProShop saved-query result list."""

    index: str
    reported_status: WorkOrderStatus = WorkOrderStatus.UNKNOWN
