"""Cache management API endpoints."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request

from procache.api.middleware.rate_limit import SNAPSHOT_SAVE_LIMIT, limiter
from procache.models.refresh import CacheStatusResponse
from procache.models.work_order import WorkOrderStatus

router = APIRouter(prefix="/api/cache", tags=["cache"])


def _service(request: Request):
    service = request.app.state.refresh_service
    if service.is_running():
        raise HTTPException(status_code=409, detail="Refresh task already running")
    return service


@router.get("/status")
async def get_cache_status(request: Request) -> CacheStatusResponse:
    """Freshness of the cache: EMPTY, OUTDATED, OK or UNSAVED_CHANGES."""
    service = request.app.state.refresh_service
    if not service.is_initialized():
        return CacheStatusResponse(initialized=False, freshness=service.freshness().value)

    store = service.store
    return CacheStatusResponse(
        initialized=True,
        freshness=service.freshness().value,
        entries=len(store),
        data_timestamp=store.data_timestamp,
        save_timestamp=store.save_timestamp,
        remaining=service.remaining(),
    )


@router.get("/integrity")
async def check_integrity(request: Request):
    service = request.app.state.refresh_service
    return {"ok": service.store.verify_integrity(), "entries": len(service.store)}


@router.post("/save")
@limiter.limit(SNAPSHOT_SAVE_LIMIT)
async def save_cache(request: Request):
    ack = await _service(request).save_snapshot()
    return {"status": "saved", **ack.model_dump(mode="json")}


@router.post("/load")
async def load_cache(request: Request):
    loaded = await _service(request).load_snapshot()
    if not loaded:
        raise HTTPException(status_code=404, detail="No valid saved cache found")
    return {"status": "loaded", "entries": len(request.app.state.refresh_service.store)}


@router.post("/reset")
async def reset_cache(request: Request):
    """Discard all cached work orders and start with an empty cache."""
    _service(request).reset()
    return {"status": "reset"}


@router.get("/workorders")
async def list_work_orders(
    request: Request,
    status: Optional[WorkOrderStatus] = Query(None, description="Exact status"),
    resource: Optional[str] = Query(None, description="Machine name prefix"),
):
    service = request.app.state.refresh_service
    records = service.matching_work_orders(status=status, resource=resource)
    return [record.model_dump(mode="json") for record in records]


@router.get("/workorders/{index}")
async def get_work_order(index: str, request: Request):
    record = request.app.state.refresh_service.store.lookup(index)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Work order {index} not cached")
    return record.model_dump(mode="json")
