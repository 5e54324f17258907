"""Refresh-related API endpoints."""

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Query, Request

from procache.api.middleware.rate_limit import REFRESH_TRIGGER_LIMIT, limiter
from procache.config import UpdateCriteria
from procache.models.refresh import RefreshStatusResponse, RefreshTriggerRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/refresh", tags=["refresh"])


def _criteria_for(body: RefreshTriggerRequest, default: UpdateCriteria) -> UpdateCriteria:
    overrides = body.model_dump(exclude_none=True)
    if not overrides:
        return default
    return UpdateCriteria(**{**default.model_dump(), **overrides})


def log_refresh_outcome(task: asyncio.Task) -> None:
    """Done callback for background refresh tasks."""
    if task.cancelled():
        logger.info("Refresh task cancelled")
    elif task.exception():
        logger.error("Refresh failed: %s", task.exception())


@router.post("/trigger")
@limiter.limit(REFRESH_TRIGGER_LIMIT)
async def trigger_refresh(request: Request, body: RefreshTriggerRequest):
    refresh_service = request.app.state.refresh_service

    if not refresh_service.is_initialized():
        raise HTTPException(status_code=409, detail="Cache is not initialized")
    if refresh_service.is_running():
        raise HTTPException(status_code=409, detail="Refresh task already running")

    criteria = _criteria_for(body, request.app.state.config.refresh.criteria)
    task = asyncio.create_task(refresh_service.run_refresh(criteria))
    task.add_done_callback(log_refresh_outcome)
    request.app.state.refresh_task = task
    return {"status": "refresh_started"}


@router.get("/status")
async def get_refresh_status(request: Request) -> RefreshStatusResponse:
    progress = request.app.state.refresh_progress.load()
    refresh_service = request.app.state.refresh_service
    processed, total = refresh_service.counts()

    return RefreshStatusResponse(
        is_running=refresh_service.is_running(),
        status=progress.status,
        phase=progress.phase,
        message=progress.message,
        processed=processed,
        total=total,
        started_at=progress.started_at,
        finished_at=progress.finished_at,
        error=progress.error,
    )


@router.get("/history")
async def get_refresh_history(
    request: Request,
    limit: int = Query(10, ge=1, le=100),
):
    persistence = request.app.state.refresh_service.persistence
    return await persistence.load_history(limit)
