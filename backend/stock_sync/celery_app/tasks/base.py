"""
Base task class with common functionality.

Provides:
- Lazy dependency access through the container
- Standardized logging of task outcomes
- Retry policy limited to transient errors
"""
import asyncio
import logging

from celery import Task

from stock_sync.core.exceptions import NonRetryableError, RetryableError

logger = logging.getLogger(__name__)


class BaseTask(Task):
    """Base task with common functionality for all workers."""

    # Don't create abstract tasks
    abstract = True

    # Default retry settings
    autoretry_for = (RetryableError,)
    dont_autoretry_for = (NonRetryableError,)
    retry_backoff = True
    retry_backoff_max = 300  # 5 minutes max backoff
    retry_jitter = True
    max_retries = 3

    # Track task state
    track_started = True

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        """Called when task fails after all retries exhausted."""
        logger.error(f"Task {self.name}[{task_id}] failed: {exc}")

    def on_retry(self, exc, task_id, args, kwargs, einfo):
        """Called when task is being retried."""
        logger.warning(f"Task {self.name}[{task_id}] retrying (attempt {self.request.retries}): {exc}")

    def on_success(self, retval, task_id, args, kwargs):
        """Called when task succeeds."""
        logger.info(f"Task {self.name}[{task_id}] succeeded")


# ============================================
# Async Helper
# ============================================
def run_async(coro):
    """
    Run async function in sync context.

    Use this to call async methods from Celery tasks.
    Each call creates a new event loop to avoid conflicts.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


# ============================================
# Dependency helpers (lazy loading)
# ============================================
def get_settings():
    """Get cached settings."""
    from stock_sync.core.config import get_settings as _get_settings
    return _get_settings()


def get_sync_orchestrator():
    """
    Get the sync orchestrator.

    Imported lazily so each forked worker builds its own clients.
    """
    from stock_sync.container import get_sync_orchestrator as _get_sync_orchestrator
    return _get_sync_orchestrator()
