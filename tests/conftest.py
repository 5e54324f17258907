"""Shared fixtures for procache tests."""

import tempfile
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from tests.fixtures.sample_data import RecordingNotifier, make_record

# Configure pytest-asyncio
pytest_plugins = ("pytest_asyncio",)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def temp_db_path() -> AsyncGenerator[Path, None]:
    """Create temporary database file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        yield db_path


@pytest_asyncio.fixture
async def test_database(temp_db_path: Path):
    """Initialized test database."""
    from procache.database.connection import Database

    db = Database(temp_db_path)
    await db.connect()
    yield db
    await db.close()


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def proshop_config():
    """ProShopConfig pointing at a fake server, with no retry delay."""
    from procache.config import ProShopConfig

    return ProShopConfig(
        base_url="http://proshop.test",
        cookie="JSESSIONID=abc123",
        max_retries=2,
        retry_delay=0,
    )


@pytest.fixture
def default_criteria():
    """UpdateCriteria with the default statuses and queries."""
    from procache.config import UpdateCriteria

    return UpdateCriteria()


@pytest.fixture
def mill_criteria():
    """Internal-only criteria targeting ACTIVE work orders on MILL machines."""
    from procache.config import UpdateCriteria
    from procache.models.work_order import WorkOrderStatus

    return UpdateCriteria(
        statuses={WorkOrderStatus.ACTIVE, WorkOrderStatus.UNKNOWN},
        queries=[],
        machines=["mill"],
        fetch_external=False,
        fetch_internal=True,
    )


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_record():
    """Fully populated WorkOrderRecord."""
    from procache.models.work_order import OperationRow, TrackingRow, WorkOrderRecord

    return WorkOrderRecord(
        index="24-0312",
        status="ACTIVE",
        order_quantity=25,
        scheduled_start_date=datetime(2024, 3, 11, 7, 0),
        routing_rows=[
            OperationRow(
                op="10",
                description="Saw cut",
                resource="SAW-1",
                complete=True,
                complete_total=Decimal("25"),
                complete_date=datetime(2024, 3, 12, 14, 15, 33),
            ),
            OperationRow(op="20", description="Mill profile", resource="MILL-3"),
        ],
        tracking_rows=[
            TrackingRow(
                date_started=datetime(2024, 3, 13, 15, 0, 0),
                date_ended=datetime(2024, 3, 13, 17, 30, 0),
                op="20",
                resource="MILL-3",
                quantity_start=Decimal("0"),
                quantity_end=Decimal("12"),
                run_total=Decimal("2.5"),
            ),
        ],
    )


@pytest.fixture
def populated_store():
    """RecordStore holding a mix of statuses and machines."""
    from procache.cache.store import RecordStore

    store = RecordStore()
    store.upsert(make_record("10-0100", "ACTIVE", ["SAW-1", "MILL-3"]))
    store.upsert(make_record("10-0101", "ACTIVE", ["LATHE-2"]))
    store.upsert(make_record("10-0102", "SHIPPED", ["MILL-1"]))
    store.upsert(make_record("21-0001", "UNKNOWN", []))
    return store


@pytest.fixture
def notifier():
    """Notifier that records every message."""
    return RecordingNotifier()


# ============================================================================
# Progress Fixtures
# ============================================================================


@pytest.fixture
def temp_reports_dir():
    """Temporary reports directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def refresh_progress(temp_reports_dir):
    """RefreshProgress with temporary file."""
    from procache.refresh.progress import RefreshProgress

    return RefreshProgress(temp_reports_dir / "refresh_status.json")
