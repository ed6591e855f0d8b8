"""
Drain scheduler — Redis-backed registration of the recurring drain trigger.

Celery beat fires the drain tick on a fixed cadence; the tick only does work
while the trigger is registered. Registering stores the interval under one
Redis key, unregistering deletes it, so the state survives worker restarts.
Version: 1.0.0
"""
import logging
from datetime import datetime, timezone
from typing import Optional

import redis

from stock_sync.core.constants.sync import DRAIN_REGISTRATION_KEY

logger = logging.getLogger(__name__)


class DrainScheduler:
    def __init__(self, redis_url: str, key: str = DRAIN_REGISTRATION_KEY) -> None:
        self._redis_url = redis_url
        self._key = key
        self._redis: Optional[redis.Redis] = None

    def _get_redis(self) -> redis.Redis:
        """Create a Redis client from the configured URL."""
        if self._redis is None:
            self._redis = redis.Redis.from_url(self._redis_url, decode_responses=True)
        return self._redis

    def register_recurring(self, interval_seconds: int, callback: str = "drain_tick") -> bool:
        """Register the drain trigger (SET NX).

        Returns True if this call registered it, False if it already was.
        """
        r = self._get_redis()
        value = f"{callback}|{int(interval_seconds)}|{datetime.now(timezone.utc).isoformat()}"
        registered = r.set(self._key, value, nx=True)
        if registered:
            logger.info(f"Drain trigger REGISTERED: every {interval_seconds}s ({callback})")
        else:
            logger.debug("Drain trigger already registered")
        return bool(registered)

    def is_registered(self) -> bool:
        return bool(self._get_redis().exists(self._key))

    def unregister(self) -> None:
        self._get_redis().delete(self._key)
        logger.info("Drain trigger UNREGISTERED")
