"""Shared fixtures for API endpoint tests."""

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI, HTTPException

from procache.api.middleware.rate_limit import limiter, setup_rate_limiting
from procache.api.routers import cache, refresh
from procache.config import Config, ProShopConfig, RefreshConfig, UpdateCriteria
from procache.exceptions import UninitializedStoreError
from procache.main import http_exception_handler, uninitialized_store_handler
from procache.refresh.service import RefreshService
from tests.fixtures.sample_data import (
    FakeRemoteSource,
    InMemoryPersistence,
    make_detail,
    search_results,
)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to avoid 429s."""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def fake_source():
    return FakeRemoteSource(
        queries={"query55": search_results(("24-0001", "ACTIVE"), ("24-0002", "ON_HOLD"))},
        details={
            "24-0001": make_detail("ACTIVE", ["MILL-3"]),
            "24-0002": make_detail("ON_HOLD", ["LATHE-1"]),
            "10-0100": make_detail("ACTIVE", ["SAW-1", "MILL-3"]),
        },
    )


@pytest.fixture
def memory_persistence():
    return InMemoryPersistence()


@pytest.fixture
def api_config(tmp_path):
    refresh_config = RefreshConfig(criteria=UpdateCriteria(queries=["query55"]))
    refresh_config._config_path = str(tmp_path / "refresh_config.json")
    return Config(
        proshop=ProShopConfig(base_url="http://proshop.test"),
        refresh=refresh_config,
        reports_dir=tmp_path / "reports",
    )


@pytest.fixture
def refresh_service(fake_source, memory_persistence, api_config, refresh_progress):
    return RefreshService(
        source=fake_source,
        persistence=memory_persistence,
        criteria=api_config.refresh.criteria,
        progress=refresh_progress,
    )


@pytest.fixture
def api_app(api_config, refresh_service, refresh_progress):
    """App with the refresh and cache routers and real services behind them."""
    app = FastAPI()
    setup_rate_limiting(app)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(UninitializedStoreError, uninitialized_store_handler)

    app.state.config = api_config
    app.state.refresh_service = refresh_service
    app.state.refresh_progress = refresh_progress

    app.include_router(refresh.router)
    app.include_router(cache.router)
    return app


@pytest_asyncio.fixture
async def api_client(api_app):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=api_app),
        base_url="http://test",
    ) as client:
        yield client
