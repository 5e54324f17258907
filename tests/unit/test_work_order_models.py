"""Tests for procache/models/work_order.py"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from procache.models.work_order import (
    OperationRow,
    WorkOrderDetail,
    WorkOrderRecord,
    WorkOrderStatus,
    parse_status,
)
from tests.fixtures.sample_data import make_detail, make_record


class TestParseStatus:
    """Tests for parse_status."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Active", WorkOrderStatus.ACTIVE),
            ("  ACTIVE  ", WorkOrderStatus.ACTIVE),
            ("On Hold", WorkOrderStatus.ON_HOLD),
            ("on   hold", WorkOrderStatus.ON_HOLD),
            ("Manufacturing Complete", WorkOrderStatus.MANUFACTURING_COMPLETE),
            ("Complete", WorkOrderStatus.COMPLETE),
            ("Invoiced", WorkOrderStatus.INVOICED),
            ("Shipped", WorkOrderStatus.SHIPPED),
        ],
    )
    def test_known_statuses(self, text, expected):
        """Display text maps to its status regardless of case and padding."""
        assert parse_status(text) == expected

    def test_both_cancel_spellings(self):
        """ProShop writes both canceled and cancelled."""
        assert parse_status("Canceled") == WorkOrderStatus.CANCELED
        assert parse_status("Cancelled") == WorkOrderStatus.CANCELED

    def test_unrecognized_text_is_unknown(self):
        assert parse_status("Quoted") == WorkOrderStatus.UNKNOWN

    def test_empty_is_unknown(self):
        assert parse_status("") == WorkOrderStatus.UNKNOWN
        assert parse_status(None) == WorkOrderStatus.UNKNOWN


class TestWorkOrderRecord:
    """Tests for WorkOrderRecord."""

    def test_index_is_required(self):
        with pytest.raises(ValidationError):
            WorkOrderRecord(status="ACTIVE")

    def test_status_accepts_enum_value(self):
        record = WorkOrderRecord(index="24-0001", status="ON_HOLD")
        assert record.status is WorkOrderStatus.ON_HOLD

    def test_defaults(self):
        record = WorkOrderRecord(index="24-0001")
        assert record.status == WorkOrderStatus.UNKNOWN
        assert record.order_quantity == 0
        assert record.routing_rows == []
        assert record.tracking_rows == []
        assert record.scheduled_start_date is None

    def test_from_detail(self):
        detail = make_detail("ACTIVE", ["MILL-3"], order_quantity=40)
        record = WorkOrderRecord.from_detail("24-0002", detail)

        assert record.index == "24-0002"
        assert record.order_quantity == 40
        assert record.routing_rows[0].resource == "MILL-3"

    def test_apply_detail_keeps_index(self):
        """Merging fresh data replaces every field except the index."""
        record = make_record("24-0003", "ACTIVE", ["SAW-1"])
        record.apply_detail(make_detail("SHIPPED", ["MILL-1", "LATHE-2"], order_quantity=7))

        assert record.index == "24-0003"
        assert record.status == WorkOrderStatus.SHIPPED
        assert record.order_quantity == 7
        assert [row.resource for row in record.routing_rows] == ["MILL-1", "LATHE-2"]

    def test_apply_detail_copies_rows(self):
        detail = make_detail("ACTIVE", ["MILL-1"])
        record = make_record("24-0004")
        record.apply_detail(detail)

        detail.routing_rows[0].resource = "CHANGED"
        assert record.routing_rows[0].resource == "MILL-1"


class TestResourcePrefix:
    """Tests for WorkOrderRecord.has_resource_prefix."""

    def test_case_insensitive_prefix(self):
        record = make_record("10-0100", "ACTIVE", ["SAW-1", "MILL-3"])
        assert record.has_resource_prefix("mill")
        assert record.has_resource_prefix("MILL-3")
        assert record.has_resource_prefix("saw")

    def test_not_substring(self):
        record = make_record("10-0100", "ACTIVE", ["CNC-MILL"])
        assert not record.has_resource_prefix("mill")

    def test_no_routing_rows(self):
        assert not make_record("10-0100").has_resource_prefix("mill")


class TestOperationRow:
    """Tests for OperationRow."""

    def test_decimal_total(self):
        row = OperationRow(op="10", complete_total="12.50")
        assert row.complete_total == Decimal("12.50")

    def test_incomplete_by_default(self):
        row = OperationRow(op="10")
        assert row.complete is False
        assert row.complete_date is None


class TestWorkOrderDetail:
    """Tests for WorkOrderDetail."""

    def test_rejects_unknown_status_value(self):
        with pytest.raises(ValidationError):
            WorkOrderDetail(status="QUOTED")
