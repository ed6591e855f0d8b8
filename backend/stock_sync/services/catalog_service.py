"""
WooCommerce catalog service — sellable entities, lookups and stock/price writes.

Sellable entities are published simple products plus the variations of
published variable products. Variable parents are never written; stock and
price live on their variations.
All methods are async and delegate HTTP calls to WooCommerceClient.
Version: 1.0.0
"""
import logging
from typing import Any, Dict, List, Optional

from stock_sync.clients.woocommerce_client import WooCommerceClient
from stock_sync.core.exceptions import ExternalAPIError, InvalidResponseError
from stock_sync.schemas.sync import EntityRef

logger = logging.getLogger("catalog_service")

_SELLABLE_STATUS = "publish"


def _format_quantity(quantity: float) -> int | float:
    quantity = max(0.0, float(quantity))
    return int(quantity) if quantity.is_integer() else quantity


def _format_price(amount: float) -> str:
    return f"{amount:.4f}"


class WooCommerceCatalog:
    """Local catalog adapter over the WooCommerce REST API."""

    def __init__(self, client: WooCommerceClient) -> None:
        self._client = client

    @staticmethod
    def to_entity(row: Dict[str, Any], parent: Optional[Dict[str, Any]] = None) -> EntityRef:
        """Map a WooCommerce product or variation payload to an EntityRef."""
        is_variant = parent is not None or row.get("type") == "variation"
        parent_id = (parent or {}).get("id") or row.get("parent_id") or None
        name = row.get("name") or ""
        if parent is not None and not name:
            name = parent.get("name") or ""
        return EntityRef(
            entity_id=int(row["id"]),
            parent_id=int(parent_id) if is_variant and parent_id else None,
            kind="variant" if is_variant else "standalone",
            is_virtual=bool(row.get("virtual")),
            display_name=name,
            sku=(row.get("sku") or "").strip(),
        )

    async def enumerate_sellable_entities(self) -> List[EntityRef]:
        """Every sellable entity, in catalog order (variations follow their parent)."""
        products = await self._client.get_all("/products", params={"status": _SELLABLE_STATUS})
        entities: List[EntityRef] = []
        for product in products:
            product_type = product.get("type")
            if product_type == "simple":
                entities.append(self.to_entity(product))
            elif product_type == "variable":
                variations = await self._client.get_all(f"/products/{product['id']}/variations")
                entities.extend(self.to_entity(v, parent=product) for v in variations)
            else:
                logger.debug("skipping non-sellable product id=%s type=%s", product.get("id"), product_type)
        logger.info("catalog enumerated products=%s entities=%s", len(products), len(entities))
        return entities

    async def find_by_sku(self, sku: str) -> Optional[EntityRef]:
        """Look up a product or variation by native SKU."""
        if not sku:
            return None
        data = await self._client.call_woocommerce("GET", "/products", params={"sku": sku})
        rows = data if isinstance(data, list) else []
        for row in rows:
            if (row.get("sku") or "").strip() == sku:
                return self.to_entity(row)
        return None

    async def find_by_id(self, entity_id: int) -> Optional[EntityRef]:
        """Look up a product or variation by numeric id; None when it does not exist."""
        try:
            data = await self._client.call_woocommerce("GET", f"/products/{int(entity_id)}")
        except ExternalAPIError as exc:
            if exc.status_code == 404:
                return None
            raise
        if not isinstance(data, dict) or "id" not in data:
            return None
        if data.get("type") == "variable":
            return None
        return self.to_entity(data)

    def _entity_path(self, entity: EntityRef) -> str:
        if entity.kind == "variant":
            return f"/products/{entity.parent_id}/variations/{entity.entity_id}"
        return f"/products/{entity.entity_id}"

    async def apply_update(
        self,
        entity: EntityRef,
        quantity: Optional[float] = None,
        price: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Overwrite stock and/or price in a single write.

        Stock management is switched on whenever stock is written; stock
        status is in-stock iff the quantity is above zero. Regular price is
        the computed price and the sale price is cleared so the effective
        price equals it.
        """
        payload: Dict[str, Any] = {}
        if quantity is not None:
            stock = _format_quantity(quantity)
            payload.update({
                "manage_stock": True,
                "stock_quantity": stock,
                "stock_status": "instock" if stock > 0 else "outofstock",
            })
        if price is not None:
            payload.update({"regular_price": _format_price(price), "sale_price": ""})
        if not payload:
            return {}

        data = await self._client.call_woocommerce("PUT", self._entity_path(entity), json=payload)
        if not isinstance(data, dict):
            raise InvalidResponseError(f"WooCommerce update of entity {entity.entity_id} returned no object")
        logger.debug("entity updated id=%s fields=%s", entity.entity_id, sorted(payload))
        return data

    async def write_stock(self, entity: EntityRef, quantity: float) -> Dict[str, Any]:
        return await self.apply_update(entity, quantity=quantity)

    async def write_price(self, entity: EntityRef, amount: float) -> Dict[str, Any]:
        return await self.apply_update(entity, price=amount)

    async def get_store_currency(self) -> str:
        """ISO code of the store currency (the target currency of every price)."""
        data = await self._client.call_woocommerce("GET", "/settings/general/woocommerce_currency")
        value = data.get("value") if isinstance(data, dict) else None
        if not value:
            raise InvalidResponseError("WooCommerce currency setting is empty")
        return str(value)
