"""
Sync routes — operator triggers, run statistics and queue management.

Version: 1.0.0
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from stock_sync.container import get_sync_orchestrator
from stock_sync.core.exceptions import ConfigurationError, StockSyncException
from stock_sync.schemas.sync import QueueClearResponse, SyncStatusResponse, SyncTriggerResponse
from stock_sync.services.sync_orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/sync", tags=["sync"])


def _raise_http(exc: Exception, action: str):
    if isinstance(exc, ConfigurationError):
        raise HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, StockSyncException):
        raise HTTPException(status_code=502, detail=str(exc))
    logger.error(f"Error during {action}: {exc}")
    raise HTTPException(status_code=500, detail=str(exc))


@router.post("/run", response_model=SyncTriggerResponse)
async def trigger_full_sync():
    """Queue a full synchronization run."""
    from stock_sync.celery_app.tasks.sync import run_full_sync

    try:
        result = run_full_sync.delay(triggered_by="operator")
    except Exception as e:
        _raise_http(e, "full sync trigger")

    return SyncTriggerResponse(
        status="queued",
        task_id=result.id,
        message="Full synchronization queued.",
    )


@router.post("/drain", response_model=SyncTriggerResponse)
async def trigger_drain():
    """Queue one drain tick, whether or not the recurring trigger is registered."""
    from stock_sync.celery_app.tasks.sync import drain_tick

    try:
        result = drain_tick.delay(force=True)
    except Exception as e:
        _raise_http(e, "drain trigger")

    return SyncTriggerResponse(
        status="queued",
        task_id=result.id,
        message="Drain tick queued.",
    )


@router.get("/status", response_model=SyncStatusResponse)
async def get_sync_status(orchestrator: SyncOrchestrator = Depends(get_sync_orchestrator)):
    """Cumulative run counters, queue state and drain trigger registration."""
    try:
        return orchestrator.get_status()
    except Exception as e:
        _raise_http(e, "status lookup")


@router.delete("/queue", response_model=QueueClearResponse)
async def clear_queue(orchestrator: SyncOrchestrator = Depends(get_sync_orchestrator)):
    """Delete all pending batches; the next drain tick unregisters the trigger."""
    try:
        deleted = orchestrator.clear_queue()
    except Exception as e:
        _raise_http(e, "queue clear")

    return QueueClearResponse(deleted=deleted, message=f"Deleted {deleted} pending batches.")
