"""
Price context service — fetch the tax catalog, exchange rates and currencies.

A PriceContext is a read-only snapshot taken at the start of a run and again
on every drain tick, so rates that moved between ticks are picked up.
Version: 1.0.0
"""
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from stock_sync.clients.inventory_client import InventoryClient
from stock_sync.core.constants.pricing import REFERENCE_CURRENCY
from stock_sync.core.exceptions import InvalidResponseError
from stock_sync.schemas.sync import PriceContext, TaxRate
from stock_sync.services.catalog_service import WooCommerceCatalog
from stock_sync.utils.pricing import normalize_currency_code, normalize_rate_table

logger = logging.getLogger("price_context")


def _store_currency(store: Dict[str, Any]) -> Optional[str]:
    currency = store.get("currency")
    if isinstance(currency, dict):
        return currency.get("iso_code") or currency.get("code")
    return store.get("currency_code") or currency


def _store_default_tax(store: Dict[str, Any]) -> Optional[str]:
    tax = store.get("tax")
    if isinstance(tax, dict):
        return tax.get("uuid") or tax.get("id")
    return store.get("tax_uuid") or store.get("default_tax_uuid")


class PriceContextService:
    def __init__(self, inventory_client: InventoryClient, catalog: WooCommerceCatalog) -> None:
        self._inventory = inventory_client
        self._catalog = catalog

    async def fetch(self) -> PriceContext:
        """Build a fresh PriceContext from the remote API and the local store."""
        store = await self._inventory.get_store_details()
        rates = await self._inventory.get_currencies()
        taxes = []
        for row in await self._inventory.get_taxes():
            try:
                taxes.append(TaxRate.model_validate(row))
            except ValidationError:
                logger.debug("skipping malformed tax record %r", row)
        target = await self._catalog.get_store_currency()

        base = _store_currency(store)
        if not base:
            logger.warning("store details carry no currency, assuming %s", REFERENCE_CURRENCY)
            base = REFERENCE_CURRENCY

        context = PriceContext(
            tax_rate_table=taxes,
            currency_rate_table=normalize_rate_table(rates),
            base_currency_iso=normalize_currency_code(base),
            target_currency_iso=normalize_currency_code(target),
            store_default_tax_id=_store_default_tax(store),
        )
        if not context.currency_rate_table:
            raise InvalidResponseError("Inventory API returned an empty currency table")
        logger.info(
            "price context base=%s target=%s taxes=%s currencies=%s",
            context.base_currency_iso, context.target_currency_iso,
            len(context.tax_rate_table), len(context.currency_rate_table),
        )
        return context
