"""
Celery application configuration.
Configures the Redis broker, the sync queue and the beat schedule.

Note: On Windows, Celery's prefork pool doesn't work properly.
Use --pool=solo or --pool=threads on Windows.

=============================================================================
RUNNING WORKERS
=============================================================================

    Terminal 1 - Worker (full runs + drain ticks):
        celery -A stock_sync.celery_app worker -Q sync --concurrency=1 -l info -n sync@%h

    Terminal 2 - Celery Beat (scheduler):
        celery -A stock_sync.celery_app beat -l info

A single-concurrency worker keeps drain ticks from overlapping; the
pending -> processing claim covers the case where they do.

=============================================================================
ENVIRONMENT VARIABLES
=============================================================================
    SYNC_ENABLED: run the full synchronization on a schedule (default: true)
    SYNC_INTERVAL_MINUTES: minutes between full runs (default: 720, minimum 10)
    SYNC_DRAIN_INTERVAL_SECONDS: seconds between drain ticks (default: 60)
    SYNC_DEBUG: DEBUG log level (default: false)
"""
import logging
import platform
from datetime import timedelta

from celery import Celery
from kombu import Queue

from stock_sync.core.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
)
logger = logging.getLogger(__name__)

# Detect Windows platform for pool configuration
IS_WINDOWS = platform.system() == "Windows"

SYNC_QUEUE = "sync"


def build_beat_schedule(config) -> dict:
    """Full run every full_run_interval_minutes (when enabled) and a drain tick every drain interval."""
    schedule = {
        "stock-sync-drain-tick": {
            "task": "stock_sync.celery_app.tasks.sync.drain_tick",
            "schedule": timedelta(seconds=max(1, config.sync_drain_interval_seconds)),
            "options": {"queue": SYNC_QUEUE},
        },
    }
    if config.sync_enabled:
        schedule["stock-sync-full-run"] = {
            "task": "stock_sync.celery_app.tasks.sync.run_full_sync",
            "schedule": timedelta(minutes=config.full_run_interval_minutes),
            "options": {"queue": SYNC_QUEUE},
        }
    return schedule


celery_app = Celery(
    "stock_sync_hub",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "stock_sync.celery_app.tasks.sync",
    ]
)

celery_app.conf.update(
    # Serialization
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,

    task_queues=(
        Queue(SYNC_QUEUE),
    ),
    task_default_queue=SYNC_QUEUE,
    task_routes={
        "stock_sync.celery_app.tasks.sync.*": {"queue": SYNC_QUEUE},
    },

    beat_schedule=build_beat_schedule(settings),

    # Result expiration
    result_expires=3600,  # 1 hour

    # Worker pool configuration for Windows compatibility
    worker_pool="solo" if IS_WINDOWS else "prefork",

    # Visibility timeout (how long before unacknowledged task is redelivered)
    broker_transport_options={"visibility_timeout": 3600},

    worker_log_format="[%(asctime)s: %(levelname)s/%(processName)s] %(message)s",
    worker_task_log_format="[%(asctime)s: %(levelname)s/%(processName)s] [%(task_name)s] %(message)s",
)

logger.info(
    "stock sync schedule: full run %s, drain tick every %ss",
    f"every {settings.full_run_interval_minutes} min" if settings.sync_enabled else "disabled",
    settings.sync_drain_interval_seconds,
)
