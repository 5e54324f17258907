"""FastAPI application entrypoint for the ProShop work order cache."""

import asyncio
import logging
import os
from contextlib import asynccontextmanager

from procache.logging_config import setup_logging

# Configure logging before anything else
setup_logging()
logger = logging.getLogger(__name__)

from fastapi import FastAPI, HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

from procache.api.middleware.rate_limit import setup_rate_limiting
from procache.exceptions import ProCacheError, RemoteSourceError, UninitializedStoreError

# Map HTTP status codes to machine-readable error codes for consistent API responses.
_STATUS_ERROR_CODES = {
    400: "bad_request",
    404: "not_found",
    409: "conflict",
    422: "validation_error",
    429: "rate_limited",
    500: "internal_error",
    502: "proshop_unavailable",
    503: "service_unavailable",
}
from procache.api.routers import cache, refresh
from procache.config import Config
from procache.database.connection import Database
from procache.persistence import create_persistence
from procache.refresh.progress import RefreshProgress
from procache.refresh.scheduler import RefreshScheduler
from procache.refresh.service import RefreshService
from procache.remote.proshop import ProShopClient


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = Config.load()
    config.reports_dir.mkdir(parents=True, exist_ok=True)
    persistence_cfg = config.refresh.persistence

    db = None
    if persistence_cfg.backend == "sqlite":
        persistence_cfg.db_path.parent.mkdir(parents=True, exist_ok=True)
        db = Database(persistence_cfg.db_path)
        await db.connect()
    persistence = create_persistence(persistence_cfg, db=db)

    if not config.proshop.is_valid():
        logger.warning("PROSHOP_BASE_URL is not set; refresh passes will fail")
    proshop_client = ProShopClient(config.proshop)

    progress = RefreshProgress(config.reports_dir / "refresh_status.json")
    refresh_service = RefreshService(
        source=proshop_client,
        persistence=persistence,
        criteria=config.refresh.criteria,
        concurrency=config.refresh.performance.concurrency,
        progress=progress,
    )

    # Resume from the last snapshot when it is present and sound
    if not await refresh_service.load_snapshot():
        refresh_service.new_store()

    loop = asyncio.get_running_loop()
    scheduler = RefreshScheduler(config.refresh, refresh_service, loop=loop)
    scheduler.start()

    app.state.config = config
    app.state.db = db
    app.state.refresh_progress = progress
    app.state.refresh_service = refresh_service
    app.state.scheduler = scheduler

    yield

    scheduler.stop()
    await proshop_client.close()
    if db is not None:
        await db.close()


app = FastAPI(title="ProShop Work Order Cache", lifespan=lifespan)
setup_rate_limiting(app)

cors_origins = os.getenv("PROCACHE_CORS_ORIGINS", "")
if cors_origins:
    from fastapi.middleware.cors import CORSMiddleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in cors_origins.split(",")],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def add_api_version_header(request: Request, call_next):
    response = await call_next(request)
    if request.url.path.startswith("/api/"):
        response.headers["X-API-Version"] = "1"
    return response


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Enrich all HTTPException responses with a consistent error_code field."""
    error_code = _STATUS_ERROR_CODES.get(exc.status_code, "internal_error")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error_code": error_code},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(UninitializedStoreError)
async def uninitialized_store_handler(request: Request, exc: UninitializedStoreError):
    return JSONResponse(
        status_code=409,
        content={"detail": str(exc), "error_code": "conflict"},
    )


@app.exception_handler(RemoteSourceError)
async def remote_source_handler(request: Request, exc: RemoteSourceError):
    logger.error("ProShop error: %s", exc)
    return JSONResponse(
        status_code=502,
        content={"detail": "ProShop unavailable", "error_code": "proshop_unavailable"},
    )


@app.exception_handler(ProCacheError)
async def procache_error_handler(request: Request, exc: ProCacheError):
    logger.error("Application error: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error_code": "internal_error"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error_code": "internal_error"},
    )


app.include_router(refresh.router)
app.include_router(cache.router)


@app.get("/health")
async def health():
    return {"status": "healthy"}
