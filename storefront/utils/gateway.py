# storefront/utils/gateway.py
import httpx
import logging
from typing import Any, Iterable, Optional

from storefront.config import settings
from storefront.schemas.cart import CartItem
from storefront.schemas.product import ProductBase
from storefront.utils import normalizer

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """An authority call failed at the transport, status or decoding level."""

    def __init__(self, operation: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


class AuthorityGateway:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        # Initialize configuration; transport is swappable for tests
        self.base_url = base_url or settings.API_BASE_URL
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT_SECONDS
        self.transport = transport

    async def _request(self, operation: str, method: str, path: str, payload: Optional[dict] = None) -> Any:
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.request(method, path, json=payload)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                # Log detailed error information before re-raising
                try:
                    resp_text = e.response.text
                except Exception:
                    resp_text = str(e)
                logger.error(f"Authority {operation} error: {e.response.status_code} {resp_text}")
                raise GatewayError(operation, f"Failed to {operation}", e.response.status_code) from e
            except httpx.RequestError as e:
                logger.error(f"Authority {operation} error: {e!r}")
                raise GatewayError(operation, f"Failed to {operation}") from e

            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                logger.error(f"Authority {operation} returned undecodable body: {response.text[:200]}")
                raise GatewayError(operation, f"Failed to {operation}", response.status_code) from e

    # User endpoints
    async def get_or_create_user(self, telegram_id: int, username: str, is_admin: bool) -> Any:
        return await self._request(
            "get user", "POST", "/users", normalizer.encode_user(telegram_id, username, is_admin)
        )

    # Product endpoints
    async def list_products(self) -> Any:
        return await self._request("fetch products", "GET", "/products")

    async def create_product(self, product: ProductBase) -> Any:
        return await self._request("add product", "POST", "/products", normalizer.encode_product(product))

    async def delete_product(self, product_id: str) -> Any:
        return await self._request("delete product", "DELETE", f"/products/{product_id}")

    # Order endpoints
    async def list_all_orders(self) -> Any:
        return await self._request("fetch orders", "GET", "/orders")

    async def list_user_orders(self, user_id: int) -> Any:
        return await self._request("fetch user orders", "GET", f"/orders/user/{user_id}")

    async def create_order(self, user_id: int, items: Iterable[CartItem], total_amount: float) -> Any:
        return await self._request(
            "create order", "POST", "/orders", normalizer.encode_order(user_id, items, total_amount)
        )

    async def update_order_status(self, order_id: str, status: str) -> Any:
        return await self._request("update order status", "PATCH", f"/orders/{order_id}", {"status": status})


gateway = AuthorityGateway()
