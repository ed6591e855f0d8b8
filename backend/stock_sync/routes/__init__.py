"""
Route aggregator — mounts the sync router under the /api/v1 prefix.

Health routes are exported separately for main.py to mount at root.
Version: 1.0.0
"""
from fastapi import APIRouter

from stock_sync.routes.sync import router as sync_router
from stock_sync.routes.health import router as health_router

v1_router = APIRouter(prefix="/api/v1")

v1_router.include_router(sync_router)

__all__ = ["v1_router", "health_router"]
