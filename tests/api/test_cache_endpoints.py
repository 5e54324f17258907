"""Tests for /api/cache/* endpoints."""

from datetime import datetime

import pytest

from procache.models.snapshot import CacheSnapshot
from tests.fixtures.sample_data import make_record


class TestCacheStatus:
    """Tests for GET /api/cache/status."""

    @pytest.mark.asyncio
    async def test_uninitialized(self, api_client):
        response = await api_client.get("/api/cache/status")

        assert response.status_code == 200
        data = response.json()
        assert data["initialized"] is False
        assert data["freshness"] == "EMPTY"

    @pytest.mark.asyncio
    async def test_unsaved_changes(self, api_client, refresh_service):
        store = refresh_service.new_store()
        store.upsert(make_record("24-0001"))
        store.mark_synced(datetime.now())

        response = await api_client.get("/api/cache/status")

        data = response.json()
        assert data["initialized"] is True
        assert data["freshness"] == "UNSAVED_CHANGES"
        assert data["entries"] == 1

    @pytest.mark.asyncio
    async def test_ok_after_save(self, api_client, refresh_service):
        refresh_service.new_store().mark_synced(datetime.now())

        await api_client.post("/api/cache/save")
        response = await api_client.get("/api/cache/status")

        assert response.json()["freshness"] == "OK"


class TestSaveLoadReset:
    """Tests for save, load and reset."""

    @pytest.mark.asyncio
    async def test_save(self, api_client, refresh_service, memory_persistence):
        refresh_service.new_store().upsert(make_record("24-0001"))

        response = await api_client.post("/api/cache/save")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "saved"
        assert data["records_saved"] == 1
        assert memory_persistence.saves == 1

    @pytest.mark.asyncio
    async def test_save_uninitialized_returns_409(self, api_client):
        response = await api_client.post("/api/cache/save")
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_load(self, api_client, refresh_service, memory_persistence):
        memory_persistence.snapshot = CacheSnapshot(
            workorders=[make_record("24-0001"), make_record("24-0002")]
        )

        response = await api_client.post("/api/cache/load")

        assert response.status_code == 200
        assert response.json() == {"status": "loaded", "entries": 2}
        assert refresh_service.store.indices() == ["24-0001", "24-0002"]

    @pytest.mark.asyncio
    async def test_load_rejects_duplicates(self, api_client, refresh_service, memory_persistence):
        refresh_service.new_store().upsert(make_record("10-0001"))
        memory_persistence.snapshot = CacheSnapshot(
            workorders=[make_record("24-0001"), make_record("24-0001")]
        )

        response = await api_client.post("/api/cache/load")

        assert response.status_code == 404
        assert refresh_service.store.indices() == ["10-0001"]

    @pytest.mark.asyncio
    async def test_reset(self, api_client, refresh_service):
        refresh_service.new_store().upsert(make_record("24-0001"))

        response = await api_client.post("/api/cache/reset")

        assert response.status_code == 200
        assert len(refresh_service.store) == 0

    @pytest.mark.asyncio
    async def test_reset_while_running_returns_409(self, api_client, refresh_service):
        refresh_service.new_store()
        refresh_service._running = True

        response = await api_client.post("/api/cache/reset")

        assert response.status_code == 409


class TestWorkOrders:
    """Tests for GET /api/cache/workorders."""

    @pytest.fixture(autouse=True)
    def _populate(self, refresh_service, populated_store):
        refresh_service._store = populated_store

    @pytest.mark.asyncio
    async def test_list_all(self, api_client):
        response = await api_client.get("/api/cache/workorders")

        assert response.status_code == 200
        assert [wo["index"] for wo in response.json()] == [
            "10-0100", "10-0101", "10-0102", "21-0001",
        ]

    @pytest.mark.asyncio
    async def test_filter_by_status_and_resource(self, api_client):
        response = await api_client.get(
            "/api/cache/workorders", params={"status": "ACTIVE", "resource": "mill"}
        )

        assert [wo["index"] for wo in response.json()] == ["10-0100"]

    @pytest.mark.asyncio
    async def test_invalid_status(self, api_client):
        response = await api_client.get("/api/cache/workorders", params={"status": "QUOTED"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_get_one(self, api_client):
        response = await api_client.get("/api/cache/workorders/10-0100")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ACTIVE"
        assert [row["resource"] for row in data["routing_rows"]] == ["SAW-1", "MILL-3"]

    @pytest.mark.asyncio
    async def test_get_missing(self, api_client):
        response = await api_client.get("/api/cache/workorders/99-9999")

        assert response.status_code == 404
        assert response.json()["error_code"] == "not_found"

    @pytest.mark.asyncio
    async def test_integrity(self, api_client):
        response = await api_client.get("/api/cache/integrity")

        assert response.json() == {"ok": True, "entries": 4}


class TestUninitializedStore:
    @pytest.mark.asyncio
    async def test_workorders_before_init_returns_409(self, api_client):
        response = await api_client.get("/api/cache/workorders")

        assert response.status_code == 409
        assert response.json()["error_code"] == "conflict"
