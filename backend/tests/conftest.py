"""
Pytest configuration and shared fixtures for Stock Sync Hub tests.

Provides settings, catalog entities, price contexts and chained Supabase
table mocks.
Version: 1.0.0
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from stock_sync.core.config import Settings
from stock_sync.schemas.sync import EntityRef, PriceContext, TaxRate


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_settings():
    """Settings object with test defaults (no real credentials)."""
    return Settings(
        inventory_api_url="https://inventory.test/v1",
        inventory_access_token="test-token",
        inventory_store_uuid="store-uuid",
        inventory_timeout_seconds=30,
        woocommerce_url="https://shop.test",
        woocommerce_consumer_key="ck_test",
        woocommerce_consumer_secret="cs_test",
        woocommerce_page_size=2,
        supabase_url="https://test.supabase.co",
        supabase_key="test-key",
        redis_url="redis://localhost:6379/15",
        sync_enabled=True,
        sync_batch_size=500,
        sync_drain_interval_seconds=60,
        sync_interval_minutes=720,
        sync_min_price=0.01,
    )


# ---------------------------------------------------------------------------
# Catalog entities
# ---------------------------------------------------------------------------

def make_entity(entity_id: int, sku: str = "", **overrides) -> EntityRef:
    data = {
        "entity_id": entity_id,
        "sku": sku,
        "display_name": f"Product {entity_id}",
    }
    data.update(overrides)
    return EntityRef(**data)


@pytest.fixture
def entity_factory():
    return make_entity


@pytest.fixture
def sample_entities():
    """A simple product, a variation and a virtual product."""
    return [
        make_entity(1, "SKU-A"),
        make_entity(2, "SKU-B", parent_id=10, kind="variant"),
        make_entity(3, "", is_virtual=True),
    ]


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------

@pytest.fixture
def tax_table():
    return [
        TaxRate.model_validate({"uuid": "tax-exempt", "name": "Exento", "type": "IVA", "code": "exempt", "percentage": 0}),
        TaxRate.model_validate({"uuid": "tax-general", "name": "General", "type": "IVA", "code": "General", "percentage": 16}),
        TaxRate.model_validate({"uuid": "tax-reduced", "name": "Reducida", "type": "IVA", "code": "reduced", "percentage": 8}),
    ]


@pytest.fixture
def usd_price_context(tax_table):
    """USD store priced from a USD base, VES available for conversion."""
    return PriceContext(
        tax_rate_table=tax_table,
        currency_rate_table={"USD": 1.0, "VES": 40.0},
        base_currency_iso="USD",
        target_currency_iso="USD",
        store_default_tax_id=None,
    )


# ---------------------------------------------------------------------------
# Supabase
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_supabase_table():
    """Build a chained mock table builder for Supabase."""
    mock_table = MagicMock()
    for method in ("select", "insert", "update", "upsert", "delete", "eq", "order", "limit"):
        getattr(mock_table, method).return_value = mock_table
    mock_table.execute.return_value = MagicMock(data=[], count=0)
    return mock_table


@pytest.fixture
def mock_supabase_client(mock_supabase_table):
    """SupabaseClient wrapper whose .client.table() returns the chained mock."""
    wrapper = MagicMock()
    wrapper.client.table.return_value = mock_supabase_table
    return wrapper


# ---------------------------------------------------------------------------
# Catalog / remote collaborators
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_catalog():
    catalog = MagicMock()
    catalog.enumerate_sellable_entities = AsyncMock(return_value=[])
    catalog.find_by_sku = AsyncMock(return_value=None)
    catalog.find_by_id = AsyncMock(return_value=None)
    catalog.apply_update = AsyncMock(return_value={})
    catalog.get_store_currency = AsyncMock(return_value="USD")
    return catalog


@pytest.fixture
def mock_inventory_client():
    client = MagicMock()
    client.reconcile_inventory = AsyncMock(return_value=[])
    client.get_currencies = AsyncMock(return_value={"USD": 1.0})
    client.get_store_details = AsyncMock(return_value={})
    client.get_taxes = AsyncMock(return_value=[])
    return client
