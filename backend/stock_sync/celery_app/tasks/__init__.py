"""
Celery tasks package.
Exports all tasks for convenient imports.
"""
from stock_sync.celery_app.tasks.sync import run_full_sync, drain_tick

__all__ = [
    "run_full_sync",
    "drain_tick",
]
