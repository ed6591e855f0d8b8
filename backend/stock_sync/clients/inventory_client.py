"""
Remote inventory HTTP client — bearer-token REST calls to the source-of-truth catalog.

Endpoints used:
- POST /inventories/sync     stock (+ price) for a list of SKUs
- GET  /currencies           exchange rates keyed by ISO code
- GET  /stores/uuid/<uuid>   store details (base currency, default tax)
- GET  /taxes                tax catalog
Version: 1.0.0
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from stock_sync.core.config import Settings
from stock_sync.core.constants.pricing import REFERENCE_CURRENCY
from stock_sync.core.exceptions import (
    ConfigurationError,
    ConnectionTimeoutError,
    ExternalAPIError,
    InvalidResponseError,
)

logger = logging.getLogger("inventory_client")

SERVICE_NAME = "Inventory"


class InventoryClient:
    def __init__(self, settings: Settings) -> None:
        self._base_url = (settings.inventory_api_url or "").rstrip("/")
        self._token = settings.inventory_access_token
        self._store_uuid = settings.inventory_store_uuid
        self._timeout = settings.inventory_timeout_seconds
        self._reconcile_timeout = settings.reconcile_timeout_seconds

    def _headers(self) -> Dict[str, str]:
        if not (self._token and self._store_uuid):
            raise ConfigurationError(
                "INVENTORY_ACCESS_TOKEN and INVENTORY_STORE_UUID env vars are required"
            )
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-Store-Uuid": self._store_uuid,
        }

    async def _call_inventory(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        headers = self._headers()
        url = f"{self._base_url}{path}"
        logger.info("inventory request method=%s path=%s", method, path)

        try:
            async with httpx.AsyncClient(timeout=timeout or self._timeout) as client:
                resp = await client.request(method=method, url=url, headers=headers, json=json, params=params)
        except httpx.TimeoutException as exc:
            raise ConnectionTimeoutError(f"{SERVICE_NAME} API timeout on {path}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise ExternalAPIError(SERVICE_NAME, f"transport failure on {path}: {exc}") from exc

        logger.info("inventory response status=%s path=%s", resp.status_code, path)
        if resp.status_code >= 400:
            raise ExternalAPIError(SERVICE_NAME, resp.text, status_code=resp.status_code)

        if not resp.text:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise InvalidResponseError(f"{SERVICE_NAME} API returned non-JSON body for {path}") from exc

    async def reconcile_inventory(self, tokens: List[str]) -> List[Dict[str, Any]]:
        """
        Fetch stock and price for a batch of SKUs in a single call.

        Virtual (non-stocked) items are requested too so their price can be
        reconciled.

        Returns:
            list: raw inventory rows, each carrying a sku_list
        """
        body = {
            "sku_list": list(tokens),
            "include_price": True,
            "include_virtual": True,
        }
        data = await self._call_inventory(
            "POST", "/inventories/sync", json=body, timeout=self._reconcile_timeout
        )
        if isinstance(data, dict) and isinstance(data.get("rows"), list):
            return data["rows"]
        if isinstance(data, list):
            return data
        raise InvalidResponseError(f"{SERVICE_NAME} reconciliation response is not a list of items")

    async def get_currencies(self) -> Dict[str, float]:
        """Exchange rates keyed by ISO code; a table without the reference currency is invalid."""
        data = await self._call_inventory("GET", "/currencies")
        if not isinstance(data, dict) or REFERENCE_CURRENCY not in data:
            raise InvalidResponseError(f"{SERVICE_NAME} currencies response lacks {REFERENCE_CURRENCY}")
        rates: Dict[str, float] = {}
        for code, value in data.items():
            # Entries are either bare rates or currency objects carrying one
            rate = value.get("rate") if isinstance(value, dict) else value
            try:
                rates[code] = float(rate)
            except (TypeError, ValueError):
                logger.debug("skipping currency without numeric rate code=%s", code)
        return rates

    async def get_store_details(self) -> Dict[str, Any]:
        data = await self._call_inventory("GET", f"/stores/uuid/{self._store_uuid}")
        if not isinstance(data, dict):
            raise InvalidResponseError(f"{SERVICE_NAME} store details response is not an object")
        return data

    async def get_taxes(self) -> List[Dict[str, Any]]:
        data = await self._call_inventory("GET", "/taxes")
        if isinstance(data, dict) and isinstance(data.get("rows"), list):
            return data["rows"]
        if isinstance(data, list):
            return data
        raise InvalidResponseError(f"{SERVICE_NAME} taxes response is not a list")
