"""
FastAPI entry point for the stock sync operator API.

Served by uvicorn from the backend/ directory:
    uvicorn stock_sync.main:app --host 0.0.0.0 --port 8000
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stock_sync.core.config import get_settings
from stock_sync.routes import health_router, v1_router

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan event handler.

    On startup:
    - Report whether the inventory credentials are configured
    - Verify the queue schema (logged, never fatal)
    """
    logger.info("=== Stock Sync Hub Starting ===")

    if not settings.has_inventory_credentials:
        logger.warning("Inventory credentials missing: sync runs will be skipped")

    try:
        from stock_sync.container import get_queue_store
        get_queue_store().ensure_schema()
        logger.info("Queue schema verified")
    except Exception as e:
        logger.warning(f"Queue schema check failed: {e}")

    logger.info(
        f"Full sync {'every ' + str(settings.full_run_interval_minutes) + ' min' if settings.sync_enabled else 'disabled'}, "
        f"drain tick every {settings.sync_drain_interval_seconds}s"
    )
    logger.info("=== Stock Sync Hub Ready ===")

    yield

    logger.info("=== Stock Sync Hub Shutting Down ===")


app = FastAPI(title="Stock Sync Hub", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(v1_router)
