"""Automatic refresh scheduler."""

from __future__ import annotations

import asyncio
import logging
import threading
import time

import schedule

from procache.config import RefreshConfig
from procache.refresh.service import RefreshService

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Schedule periodic refresh passes using the schedule library."""

    def __init__(
        self,
        config: RefreshConfig,
        refresh_service: RefreshService,
        loop: asyncio.AbstractEventLoop,
    ):
        self.config = config
        self.refresh_service = refresh_service
        self.loop = loop
        self._scheduler = schedule.Scheduler()
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

    def start(self) -> None:
        """Start auto refresh scheduler."""
        if not self.config.auto_refresh.enabled:
            logger.info("Auto-refresh scheduler disabled in config")
            return

        self._scheduler.clear()
        for time_str in self.config.auto_refresh.schedule:
            self._scheduler.every().day.at(time_str).do(self._refresh_job)

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_scheduler, daemon=True)
        self._thread.start()
        logger.info(
            "Auto-refresh scheduler started with schedule: %s",
            self.config.auto_refresh.schedule,
        )

    def stop(self) -> None:
        """Stop the scheduler."""
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=2)
        self._scheduler.clear()

    def _refresh_job(self) -> None:
        self.config.reload()
        if not self.refresh_service.is_initialized():
            logger.info("Auto-refresh skipped - cache not initialized")
            return
        if self.refresh_service.is_running():
            logger.info("Auto-refresh skipped - refresh already running")
            return
        logger.info("Auto-refresh triggered")
        asyncio.run_coroutine_threadsafe(self._refresh_and_save(), self.loop)

    async def _refresh_and_save(self) -> None:
        result = await self.refresh_service.run_refresh(self.config.criteria)
        logger.info(
            "Auto-refresh finished: %d of %d work orders updated, %d failed",
            result.processed, result.queued, len(result.failed),
        )
        if self.config.auto_refresh.save_after_refresh:
            await self.refresh_service.save_snapshot()

    def _run_scheduler(self) -> None:
        while not self._stop_event.is_set():
            self._scheduler.run_pending()
            time.sleep(1)
