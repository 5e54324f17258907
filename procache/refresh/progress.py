"""Refresh progress tracking utilities."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Number of notification messages kept in the status file
MAX_RECENT_MESSAGES = 50


class RefreshProgressData(BaseModel):
    status: str = "idle"
    phase: str = ""
    message: str = ""
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    progress: dict = Field(default_factory=dict)
    messages: list[str] = Field(default_factory=list)
    error: Optional[str] = None


class RefreshProgress:
    """Persist refresh progress to disk for API consumption.

    Also acts as the Notifier for a refresh pass: every message is logged,
    kept in a bounded history and written to the status file.
    """

    def __init__(self, status_file: Path):
        self.status_file = status_file
        self._data = RefreshProgressData()

    def start(self) -> None:
        self._data = RefreshProgressData(
            status="running",
            phase="init",
            message="Starting refresh...",
            started_at=datetime.now(timezone.utc),
        )
        self._save()

    def update(self, phase: str, message: str, **progress) -> None:
        self._data.phase = phase
        self._data.message = message
        self._data.progress.update(progress)
        self._save()

    def notify(self, message: str) -> None:
        logger.info(message)
        self._data.message = message
        self._data.messages.append(message)
        del self._data.messages[:-MAX_RECENT_MESSAGES]
        self._save()

    def finish_success(self) -> None:
        self._data.status = "success"
        self._data.finished_at = datetime.now(timezone.utc)
        self._data.message = "Refresh completed successfully"
        self._save()

    def finish_error(self, error: str) -> None:
        self._data.status = "error"
        self._data.finished_at = datetime.now(timezone.utc)
        self._data.error = error
        self._save()

    def _save(self) -> None:
        self.status_file.parent.mkdir(parents=True, exist_ok=True)
        with self.status_file.open("w", encoding="utf-8") as handle:
            json.dump(self._data.model_dump(mode="json"), handle, indent=2, default=str)

    def load(self) -> RefreshProgressData:
        if self.status_file.exists():
            with self.status_file.open("r", encoding="utf-8") as handle:
                return RefreshProgressData(**json.load(handle))
        return RefreshProgressData()
