"""
Lazy DI container — singleton access to clients, stores, and services.

Works in both FastAPI (async) and Celery (sync) contexts. This is the only
place that reads the cached settings; every component receives them through
its constructor.
Version: 1.0.0
"""

from functools import lru_cache

from stock_sync.core.config import get_settings
from stock_sync.clients.supabase_client import SupabaseClient
from stock_sync.clients.inventory_client import InventoryClient
from stock_sync.clients.woocommerce_client import WooCommerceClient
from stock_sync.db.queue_store import QueueStore
from stock_sync.services.batch_processor import BatchProcessor
from stock_sync.services.catalog_service import WooCommerceCatalog
from stock_sync.services.drain_scheduler import DrainScheduler
from stock_sync.services.price_context_service import PriceContextService
from stock_sync.services.sync_orchestrator import SyncOrchestrator


# -- Clients ---------------------------------------------------------------

@lru_cache(maxsize=1)
def get_supabase_client():
    return SupabaseClient(get_settings())


@lru_cache(maxsize=1)
def get_inventory_client():
    return InventoryClient(get_settings())


@lru_cache(maxsize=1)
def get_woocommerce_client():
    return WooCommerceClient(get_settings())


# -- DB Stores -------------------------------------------------------------

@lru_cache(maxsize=1)
def get_queue_store():
    return QueueStore(get_supabase_client())


# -- Sync Services ---------------------------------------------------------

@lru_cache(maxsize=1)
def get_catalog():
    return WooCommerceCatalog(get_woocommerce_client())


@lru_cache(maxsize=1)
def get_drain_scheduler():
    return DrainScheduler(get_settings().redis_url)


@lru_cache(maxsize=1)
def get_price_context_service():
    return PriceContextService(get_inventory_client(), get_catalog())


@lru_cache(maxsize=1)
def get_batch_processor():
    return BatchProcessor(
        inventory_client=get_inventory_client(),
        catalog=get_catalog(),
        min_price=get_settings().sync_min_price,
    )


@lru_cache(maxsize=1)
def get_sync_orchestrator():
    return SyncOrchestrator(
        settings=get_settings(),
        queue_store=get_queue_store(),
        catalog=get_catalog(),
        price_context_service=get_price_context_service(),
        processor=get_batch_processor(),
        scheduler=get_drain_scheduler(),
    )
