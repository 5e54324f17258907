"""Pydantic models for refresh and cache APIs."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RefreshTriggerRequest(BaseModel):
    """Request to trigger a manual refresh pass."""

    model_config = ConfigDict(populate_by_name=True)

    statuses: Optional[list[str]] = Field(None, description="Override target statuses")
    queries: Optional[list[str]] = Field(None, description="Override remote query ids")
    machines: Optional[list[str]] = Field(None, description="Override resource prefixes")
    fetch_external: Optional[bool] = Field(None, alias="external")
    fetch_internal: Optional[bool] = Field(None, alias="internal")


class RefreshStatusResponse(BaseModel):
    """Refresh progress response."""

    is_running: bool
    status: str
    phase: str
    message: str
    processed: int = 0
    total: int = 0
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    error: Optional[str] = None


class CacheStatusResponse(BaseModel):
    """Cache freshness response."""

    initialized: bool
    freshness: str
    entries: int = 0
    data_timestamp: Optional[datetime] = None
    save_timestamp: Optional[datetime] = None
    remaining: int = 0
