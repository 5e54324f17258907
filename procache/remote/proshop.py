"""
ProShop HTTP client

Responsibilities:
1. Fetch saved query result lists, work order pages, tracking reports
   and the job progress widget
2. Retry transport failures (the refresh engine itself never retries)
3. Hand pages to the HTML parser and translate failures into
   RemoteNetworkError / RemoteParseError
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, TYPE_CHECKING

import httpx

from procache.exceptions import RemoteNetworkError, RemoteParseError
from procache.models.work_order import SearchResult, WorkOrderDetail
from procache.remote.parser import (
    is_login_page,
    parse_scheduled_start,
    parse_search_results,
    parse_tracking_page,
    parse_work_order_page,
)

if TYPE_CHECKING:
    from procache.config import ProShopConfig

logger = logging.getLogger(__name__)

SEARCH_PATH = "/procnc/workorders/searchresults$queryScope=global&queryName={query}&pName=workorders"
WORK_ORDER_PATH = "/procnc/workorders/{index}"
TRACKING_PATH = (
    "/procnc/procncAdmin/viewTimeTracking$viewType=byworkorder"
    "&currentYearWos={index}&userId=all"
)
SCHEDULE_PATH = "/procnc/workorders/{index}$formName=ajaxhomejobprogress"


class ProShopClient:
    """RemoteRecordSource backed by the ProShop web interface."""

    def __init__(
        self,
        config: "ProShopConfig",
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        if http_client is None:
            headers = {"Cookie": config.cookie} if config.cookie else None
            http_client = httpx.AsyncClient(
                base_url=config.base_url,
                headers=headers,
                follow_redirects=True,
                timeout=httpx.Timeout(config.request_timeout, connect=config.connect_timeout),
            )
        self._client = http_client

    async def close(self) -> None:
        await self._client.aclose()

    async def _get_html(self, path: str) -> str:
        """GET ``path`` and return the body, retrying transport failures."""
        attempts = self.config.max_retries + 1
        last_error: Exception | None = None

        for attempt in range(attempts):
            try:
                response = await self._client.get(path)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                last_error = exc
                logger.warning(
                    "ProShop request failed (attempt %d/%d) %s: %s",
                    attempt + 1, attempts, path, exc,
                )
                if attempt < attempts - 1:
                    await asyncio.sleep(self.config.retry_delay)
                continue

            if is_login_page(response.text):
                raise RemoteNetworkError("ProShop session is not authenticated")
            return response.text

        raise RemoteNetworkError(f"GET {path} failed: {last_error}") from last_error

    async def search(self, query_id: str) -> list[SearchResult]:
        html = await self._get_html(SEARCH_PATH.format(query=query_id))
        results = parse_search_results(html)
        logger.info("Query %s: %d work orders", query_id, len(results))
        return results

    async def fetch_detail(self, index: str) -> WorkOrderDetail:
        page = await self._get_html(WORK_ORDER_PATH.format(index=index))
        page_index, detail = parse_work_order_page(page)
        if page_index != index:
            raise RemoteParseError(f"Requested work order {index}, page shows {page_index}")

        tracking = await self._get_html(TRACKING_PATH.format(index=index))
        detail.tracking_rows = parse_tracking_page(tracking)

        schedule = await self._get_html(SCHEDULE_PATH.format(index=index))
        detail.scheduled_start_date = parse_scheduled_start(schedule)
        return detail
