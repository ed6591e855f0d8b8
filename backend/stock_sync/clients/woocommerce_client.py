"""
WooCommerce HTTP client — REST v3 transport for the local catalog.

Authenticates with consumer key/secret (HTTP basic over TLS) and pages
through collection endpoints using the X-WP-TotalPages header.
Version: 1.0.0
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from stock_sync.core.config import Settings
from stock_sync.core.exceptions import (
    ConfigurationError,
    ConnectionTimeoutError,
    ExternalAPIError,
    InvalidResponseError,
)

logger = logging.getLogger("woocommerce_client")

SERVICE_NAME = "WooCommerce"


class WooCommerceClient:
    def __init__(self, settings: Settings) -> None:
        self._store_url = self._normalize_store_url(settings.woocommerce_url)
        self._consumer_key = settings.woocommerce_consumer_key
        self._consumer_secret = settings.woocommerce_consumer_secret
        self._page_size = settings.woocommerce_page_size
        logger.info(f"WooCommerceClient initialized: url={self._store_url}")

    @staticmethod
    def _normalize_store_url(url: Optional[str]) -> Optional[str]:
        """
        Normalize the store URL to an https origin without trailing slash.

        Handles these formats:
        - "shop.example.com" -> "https://shop.example.com"
        - "https://shop.example.com/" -> "https://shop.example.com"
        - "http://localhost:8080" -> "http://localhost:8080" (unchanged scheme)
        """
        if not url:
            return url
        url = url.strip().rstrip("/")
        if not url.startswith(("http://", "https://")):
            url = f"https://{url}"
        return url

    def _base_url(self) -> str:
        if not self._store_url or not self._consumer_key or not self._consumer_secret:
            raise ConfigurationError("WooCommerce env vars missing")
        return f"{self._store_url}/wp-json/wc/v3"

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Any, httpx.Headers]:
        base = self._base_url()
        url = f"{base}{path}"
        logger.debug("woocommerce request method=%s path=%s params=%s", method, path, params)

        try:
            async with httpx.AsyncClient(timeout=30.0) as client:
                resp = await client.request(
                    method=method,
                    url=url,
                    auth=(self._consumer_key, self._consumer_secret),
                    headers={"Content-Type": "application/json", "Accept": "application/json"},
                    json=json,
                    params=params,
                )
        except httpx.TimeoutException as exc:
            raise ConnectionTimeoutError(f"{SERVICE_NAME} timeout on {path}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise ExternalAPIError(SERVICE_NAME, f"transport failure on {path}: {exc}") from exc

        logger.debug("woocommerce response status=%s path=%s", resp.status_code, path)
        if resp.status_code >= 400:
            raise ExternalAPIError(SERVICE_NAME, resp.text, status_code=resp.status_code)

        if not resp.text:
            return {}, resp.headers
        try:
            return resp.json(), resp.headers
        except ValueError as exc:
            raise InvalidResponseError(f"{SERVICE_NAME} returned non-JSON body for {path}") from exc

    async def call_woocommerce(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        data, _ = await self._request(method, path, json=json, params=params)
        return data

    async def get_all(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Fetch every page of a collection endpoint, in server order."""
        rows: List[Dict[str, Any]] = []
        page = 1
        while True:
            page_params = dict(params or {})
            page_params.update({"per_page": self._page_size, "page": page})
            data, headers = await self._request("GET", path, params=page_params)
            batch = data if isinstance(data, list) else []
            rows.extend(batch)

            total_pages = headers.get("x-wp-totalpages")
            if total_pages is not None:
                if page >= int(total_pages):
                    break
            elif len(batch) < self._page_size:
                break
            page += 1
        return rows
