"""
Batch processor — reconcile one batch of tokens against the remote inventory.

One remote call per batch, then for every returned item:
- match the first of its tokens found in the index
- overwrite stock (skipped for virtual entities)
- overwrite price when it can be computed and is above the minimum

The processor never touches queue state or run counters; the caller owns
those. A failed remote call is returned as an error outcome, not raised.
Version: 1.0.0
"""
import logging
from typing import Dict, List, Optional, Sequence, Set

from pydantic import ValidationError

from stock_sync.clients.inventory_client import InventoryClient
from stock_sync.core.constants.sync import MIN_PRICE
from stock_sync.core.exceptions import InvalidResponseError, StockSyncException
from stock_sync.schemas.sync import BatchOutcome, EntityRef, InventoryItem, PriceContext
from stock_sync.services.catalog_service import WooCommerceCatalog
from stock_sync.utils.pricing import compute_final_price, resolve_tax_rate

logger = logging.getLogger("batch_processor")


class BatchProcessor:
    def __init__(
        self,
        inventory_client: InventoryClient,
        catalog: WooCommerceCatalog,
        min_price: float = MIN_PRICE,
    ) -> None:
        self._inventory = inventory_client
        self._catalog = catalog
        self._min_price = min_price

    async def _fetch_items(self, tokens: Sequence[str]) -> List[InventoryItem]:
        rows = await self._inventory.reconcile_inventory(list(tokens))
        try:
            return [InventoryItem.model_validate(row) for row in rows]
        except ValidationError as exc:
            raise InvalidResponseError(f"malformed inventory item: {exc.error_count()} validation errors") from exc

    def price_for(self, item: InventoryItem, context: PriceContext) -> Optional[float]:
        """Final local price of an item, or None when it must not be written."""
        if item.price is None:
            return None
        tax_rate = resolve_tax_rate(
            context.tax_rate_table, item.price.tax_id, context.store_default_tax_id
        )
        final = compute_final_price(
            item.price.amount,
            item.price.source_currency,
            tax_rate,
            context.currency_rate_table,
            context.base_currency_iso,
            context.target_currency_iso,
        )
        if final is None or final < self._min_price:
            logger.info(
                "skipping price write tokens=%s amount=%s currency=%s final=%s",
                item.token_list, item.price.amount, item.price.source_currency, final,
            )
            return None
        return final

    async def process_batch(
        self,
        tokens: Sequence[str],
        index: Dict[str, EntityRef],
        price_context: PriceContext,
    ) -> BatchOutcome:
        """
        Reconcile one batch.

        Args:
            tokens: Tokens of the batch, in queue order
            index: Token -> EntityRef for at least these tokens
            price_context: Taxes, exchange rates and currencies for pricing

        Returns:
            BatchOutcome: synced/errors/not_found counts, or the error variant
            (whole batch errored) when the remote call or its payload failed
        """
        try:
            items = await self._fetch_items(tokens)
        except StockSyncException as exc:
            logger.error(f"Batch reconciliation failed for {len(tokens)} tokens: {exc}")
            return BatchOutcome.failed(len(tokens), str(exc))

        synced = 0
        errors = 0
        not_found: Set[str] = set()
        returned: Set[str] = set()

        for item in items:
            returned.update(item.token_list)
            matched = next((t for t in item.token_list if t in index), None)
            if matched is None:
                not_found.update(item.token_list)
                logger.debug("no local entity for tokens=%s", item.token_list)
                continue

            entity = index[matched]
            quantity = None if entity.is_virtual else item.stock_quantity
            price = self.price_for(item, price_context)
            try:
                await self._catalog.apply_update(entity, quantity=quantity, price=price)
            except StockSyncException as exc:
                errors += 1
                logger.error(f"Catalog write failed for entity {entity.entity_id} ({matched}): {exc}")
                continue

            synced += 1

        for token in tokens:
            if token not in returned:
                not_found.add(token)

        outcome = BatchOutcome(synced=synced, errors=errors, not_found=len(not_found))
        logger.info(
            f"Batch reconciled: {len(tokens)} tokens, {len(items)} items, "
            f"synced={outcome.synced} errors={outcome.errors} not_found={outcome.not_found}"
        )
        return outcome
