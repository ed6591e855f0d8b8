import os
from typing import Optional
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel

from stock_sync.core.constants.sync import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_DRAIN_INTERVAL_SECONDS,
    DEFAULT_FULL_RUN_MINUTES,
    MIN_FULL_RUN_MINUTES,
    MIN_PRICE,
    MIN_REMOTE_TIMEOUT_SECONDS,
)


load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    # Remote inventory API (source of truth)
    inventory_api_url: str = os.getenv("INVENTORY_API_URL", "https://api.cachicamoapp.com/v1")
    inventory_access_token: Optional[str] = os.getenv("INVENTORY_ACCESS_TOKEN")
    inventory_store_uuid: Optional[str] = os.getenv("INVENTORY_STORE_UUID")
    inventory_employee_uuid: Optional[str] = os.getenv("INVENTORY_EMPLOYEE_UUID")
    inventory_timeout_seconds: float = float(
        os.getenv("INVENTORY_TIMEOUT_SECONDS", str(MIN_REMOTE_TIMEOUT_SECONDS))
    )

    @property
    def has_inventory_credentials(self) -> bool:
        """True when both the access token and the store UUID are configured."""
        return bool(self.inventory_access_token) and bool(self.inventory_store_uuid)

    @property
    def reconcile_timeout_seconds(self) -> float:
        """Timeout for the reconciliation call; payloads grow with batch size."""
        return max(self.inventory_timeout_seconds, float(MIN_REMOTE_TIMEOUT_SECONDS))

    # Local catalog (WooCommerce REST v3)
    woocommerce_url: str | None = os.getenv("WOOCOMMERCE_URL")
    woocommerce_consumer_key: str | None = os.getenv("WOOCOMMERCE_CONSUMER_KEY")
    woocommerce_consumer_secret: str | None = os.getenv("WOOCOMMERCE_CONSUMER_SECRET")
    woocommerce_page_size: int = int(os.getenv("WOOCOMMERCE_PAGE_SIZE", "100"))

    # Supabase (queue + run statistics)
    supabase_url: str | None = os.getenv("SUPABASE_URL")
    supabase_key: str | None = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    # Celery
    celery_broker_url: str = os.getenv("CELERY_BROKER_URL", os.getenv("REDIS_URL", "redis://localhost:6379/0"))
    celery_result_backend: str = os.getenv("CELERY_RESULT_BACKEND", os.getenv("REDIS_URL", "redis://localhost:6379/0"))

    # Sync behaviour
    sync_enabled: bool = _env_bool("SYNC_ENABLED", "true")
    sync_batch_size: int = int(os.getenv("SYNC_BATCH_SIZE", str(DEFAULT_BATCH_SIZE)))
    sync_drain_interval_seconds: int = int(
        os.getenv("SYNC_DRAIN_INTERVAL_SECONDS", str(DEFAULT_DRAIN_INTERVAL_SECONDS))
    )
    sync_interval_minutes: int = int(os.getenv("SYNC_INTERVAL_MINUTES", str(DEFAULT_FULL_RUN_MINUTES)))
    sync_min_price: float = float(os.getenv("SYNC_MIN_PRICE", str(MIN_PRICE)))

    @property
    def full_run_interval_minutes(self) -> int:
        """Full-run cadence; values under the minimum fall back to the default."""
        if self.sync_interval_minutes < MIN_FULL_RUN_MINUTES:
            return DEFAULT_FULL_RUN_MINUTES
        return self.sync_interval_minutes

    debug: bool = _env_bool("SYNC_DEBUG", "false")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
