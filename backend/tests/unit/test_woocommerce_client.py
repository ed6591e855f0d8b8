"""
Unit tests for WooCommerceClient HTTP transport layer.

Tests store URL normalization, configuration checks, basic auth,
error handling and pagination.

Version: 1.0.0
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from stock_sync.clients.woocommerce_client import WooCommerceClient
from stock_sync.core.exceptions import (
    ConfigurationError,
    ConnectionTimeoutError,
    ExternalAPIError,
    InvalidResponseError,
)


pytestmark = pytest.mark.unit

PATCH_TARGET = "stock_sync.clients.woocommerce_client.httpx.AsyncClient"


def _response(json_data=None, status_code: int = 200, headers=None, text: str = "body") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    resp.json.return_value = json_data
    resp.headers = httpx.Headers(headers or {})
    return resp


def _patch_http(MockAsyncClient, responses=None, side_effect=None) -> AsyncMock:
    mock_ctx = AsyncMock()
    mock_ctx.request = AsyncMock(side_effect=side_effect or responses)
    MockAsyncClient.return_value.__aenter__ = AsyncMock(return_value=mock_ctx)
    MockAsyncClient.return_value.__aexit__ = AsyncMock(return_value=False)
    return mock_ctx


class TestNormalizeStoreUrl:

    def test_none_returns_none(self):
        assert WooCommerceClient._normalize_store_url(None) is None

    def test_bare_host_gets_https(self):
        assert WooCommerceClient._normalize_store_url("shop.example.com") == "https://shop.example.com"

    def test_trailing_slash_removed(self):
        assert WooCommerceClient._normalize_store_url("https://shop.example.com/") == "https://shop.example.com"

    def test_http_scheme_kept(self):
        assert WooCommerceClient._normalize_store_url("http://localhost:8080") == "http://localhost:8080"


class TestCallWooCommerce:

    @pytest.mark.asyncio
    async def test_missing_keys_raise_configuration_error(self, mock_settings):
        client = WooCommerceClient(mock_settings.model_copy(update={"woocommerce_consumer_key": None}))

        with pytest.raises(ConfigurationError):
            await client.call_woocommerce("GET", "/products")

    @pytest.mark.asyncio
    async def test_request_uses_rest_base_and_basic_auth(self, mock_settings):
        client = WooCommerceClient(mock_settings)

        with patch(PATCH_TARGET) as MockAsyncClient:
            mock_ctx = _patch_http(MockAsyncClient, [_response(json_data={"id": 1})])
            result = await client.call_woocommerce("PUT", "/products/1", json={"stock_quantity": 3})

        assert result == {"id": 1}
        kwargs = mock_ctx.request.call_args.kwargs
        assert kwargs["url"] == "https://shop.test/wp-json/wc/v3/products/1"
        assert kwargs["auth"] == ("ck_test", "cs_test")
        assert kwargs["json"] == {"stock_quantity": 3}

    @pytest.mark.asyncio
    async def test_error_status_raises(self, mock_settings):
        client = WooCommerceClient(mock_settings)

        with patch(PATCH_TARGET) as MockAsyncClient:
            _patch_http(MockAsyncClient, [_response(status_code=404, text="not found")])
            with pytest.raises(ExternalAPIError) as exc_info:
                await client.call_woocommerce("GET", "/products/99")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_timeout(self, mock_settings):
        client = WooCommerceClient(mock_settings)

        with patch(PATCH_TARGET) as MockAsyncClient:
            _patch_http(MockAsyncClient, side_effect=httpx.ConnectTimeout("slow"))
            with pytest.raises(ConnectionTimeoutError):
                await client.call_woocommerce("GET", "/products")

    @pytest.mark.asyncio
    async def test_empty_body_returns_empty_dict(self, mock_settings):
        client = WooCommerceClient(mock_settings)

        with patch(PATCH_TARGET) as MockAsyncClient:
            _patch_http(MockAsyncClient, [_response(text="")])
            assert await client.call_woocommerce("DELETE", "/products/1") == {}

    @pytest.mark.asyncio
    async def test_html_body_on_success_is_invalid_response(self, mock_settings):
        client = WooCommerceClient(mock_settings)
        resp = _response(text="<html>Briefly unavailable for scheduled maintenance</html>")
        resp.json.side_effect = ValueError("Expecting value")

        with patch(PATCH_TARGET) as MockAsyncClient:
            _patch_http(MockAsyncClient, [resp])
            with pytest.raises(InvalidResponseError):
                await client.call_woocommerce("PUT", "/products/1", json={"stock_quantity": 1})


class TestGetAll:

    @pytest.mark.asyncio
    async def test_follows_total_pages_header(self, mock_settings):
        client = WooCommerceClient(mock_settings)
        pages = [
            _response(json_data=[{"id": 1}, {"id": 2}], headers={"X-WP-TotalPages": "2"}),
            _response(json_data=[{"id": 3}], headers={"X-WP-TotalPages": "2"}),
        ]

        with patch(PATCH_TARGET) as MockAsyncClient:
            mock_ctx = _patch_http(MockAsyncClient, pages)
            rows = await client.get_all("/products", params={"status": "publish"})

        assert [r["id"] for r in rows] == [1, 2, 3]
        params = [c.kwargs["params"] for c in mock_ctx.request.call_args_list]
        assert params == [
            {"status": "publish", "per_page": 2, "page": 1},
            {"status": "publish", "per_page": 2, "page": 2},
        ]

    @pytest.mark.asyncio
    async def test_short_page_ends_without_header(self, mock_settings):
        client = WooCommerceClient(mock_settings)
        pages = [
            _response(json_data=[{"id": 1}, {"id": 2}]),
            _response(json_data=[{"id": 3}]),
        ]

        with patch(PATCH_TARGET) as MockAsyncClient:
            mock_ctx = _patch_http(MockAsyncClient, pages)
            rows = await client.get_all("/products")

        assert len(rows) == 3
        assert mock_ctx.request.await_count == 2
