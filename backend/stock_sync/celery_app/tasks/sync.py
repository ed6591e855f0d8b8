"""
Stock sync Celery tasks.

- run_full_sync: full synchronization run (beat, every full-run interval, or operator trigger)
- drain_tick: reconcile one queued batch (beat, every drain interval)

Drain ticks never retry: a failed batch is marked error and the next tick
moves on to the next batch.
"""
import logging
from typing import Any, Dict

from stock_sync.celery_app.celery_config import celery_app
from stock_sync.celery_app.tasks.base import (
    BaseTask,
    get_settings,
    get_sync_orchestrator,
    run_async,
)

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    base=BaseTask,
    name="stock_sync.celery_app.tasks.sync.run_full_sync",
    max_retries=2,
)
def run_full_sync(self, triggered_by: str = "beat") -> Dict[str, Any]:
    """
    Start a full synchronization run.

    Scheduled runs are skipped while SYNC_ENABLED is off; operator-triggered
    runs always go ahead.
    """
    settings = get_settings()
    if triggered_by == "beat" and not settings.sync_enabled:
        logger.info("Scheduled stock sync skipped: SYNC_ENABLED is off")
        return {"status": "disabled"}

    logger.info(f"Full stock sync triggered by {triggered_by}")
    orchestrator = get_sync_orchestrator()
    return run_async(orchestrator.run_sync())


@celery_app.task(
    bind=True,
    base=BaseTask,
    name="stock_sync.celery_app.tasks.sync.drain_tick",
    autoretry_for=(),
    max_retries=0,
)
def drain_tick(self, force: bool = False) -> Dict[str, Any]:
    """
    Drain exactly one queued batch.

    A tick is a no-op unless the drain trigger is registered (set by a
    multi-batch run, cleared once the queue is empty). force=True drains
    regardless, for operators.
    """
    orchestrator = get_sync_orchestrator()
    if not force and not orchestrator.is_drain_registered():
        logger.debug("Drain tick skipped: trigger not registered")
        return {"status": "not_registered"}

    return run_async(orchestrator.drain_next_batch())
