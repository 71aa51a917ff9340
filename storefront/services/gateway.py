"""HTTP clients for the remote storefront REST service.

Non-success responses are mapped to typed errors instead of handing the raw
payload to the caller; transport failures become ``NetworkError``.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from storefront.config import settings
from storefront.errors import GatewayError, NetworkError, OrderCreationError, PaymentFinalizationError
from storefront.models import Product

logger = logging.getLogger(__name__)


def _detail(response: httpx.Response) -> str:
    """Short human-readable reason from an error response."""
    try:
        data = response.json()
    except ValueError:
        return response.text.strip()[:200]
    if isinstance(data, dict):
        for k in ("message", "error", "detail"):
            if data.get(k):
                return str(data[k])
    return str(data)[:200]


class _RestClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout
        self._transport = transport

    def _get_async_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            async with self._get_async_client() as client:
                return await client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise NetworkError(e) from e


class OrderGateway(_RestClient):
    async def create_order(self, user_id: Any, product_id: Any, quantity: int) -> Any:
        """Create one pending order for a single cart line; returns the new order id."""
        payload = {
            "user": {"id": user_id},
            "product": {"id": product_id},
            "quantity": quantity,
        }
        response = await self._request("POST", "/orders", json=payload)
        if not response.is_success:
            detail = _detail(response)
            logger.warning("Order for product %s rejected: %s %s", product_id, response.status_code, detail)
            raise OrderCreationError(product_id, response.status_code, detail)
        try:
            return response.json()["id"]
        except (ValueError, KeyError, TypeError) as e:
            raise OrderCreationError(product_id, response.status_code, "response has no order id") from e

    async def complete_order(self, order_id: Any) -> None:
        response = await self._request("POST", f"/orders/{order_id}/complete")
        if not response.is_success:
            detail = _detail(response)
            logger.warning("Completing order %s failed: %s %s", order_id, response.status_code, detail)
            raise PaymentFinalizationError(order_id, response.status_code, detail)

    async def get_order(self, order_id: Any) -> Dict[str, Any]:
        response = await self._request("GET", f"/orders/{order_id}")
        if not response.is_success:
            raise GatewayError(f"order {order_id} lookup failed", response.status_code, _detail(response))
        return response.json()


class CatalogGateway(_RestClient):
    async def list_products(self) -> List[Product]:
        response = await self._request("GET", "/products")
        if not response.is_success:
            raise GatewayError("product list unavailable", response.status_code, _detail(response))
        try:
            items = response.json()
            if not isinstance(items, list):
                raise TypeError(f"expected a list, got {type(items).__name__}")
            return [Product.from_api(item) for item in items]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Malformed product list: %s", e)
            raise GatewayError("product list is malformed", response.status_code, cause=e) from e
