from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from storefront.config import settings
from storefront.errors import GatewayError
from storefront.models import Product
from storefront.services.gateway import CatalogGateway

logger = logging.getLogger(__name__)


class CatalogSnapshot:
    """Latest product list seen from the catalog service.

    The cart trusts the stock values of this snapshot; ``refresh`` bounds how
    stale they can get.
    """

    def __init__(self, gateway: CatalogGateway):
        self.gateway = gateway
        self.updated_at: Optional[datetime] = None
        self.error: Optional[str] = None
        self._products: Dict[Any, Product] = {}

    @property
    def products(self) -> List[Product]:
        return list(self._products.values())

    def find(self, product_id: Any) -> Optional[Product]:
        product = self._products.get(product_id)
        if product is None and isinstance(product_id, str) and product_id.isdigit():
            product = self._products.get(int(product_id))
        return product

    async def fetch(self) -> List[Product]:
        try:
            products = await self.gateway.list_products()
        except GatewayError as e:
            # оставляем прошлый снимок
            self.error = str(e)
            logger.warning("Catalog refresh failed: %s", e)
            raise
        self._products = {p.id: p for p in products}
        self.updated_at = datetime.now()
        self.error = None
        return products

    async def refresh(self, interval: Optional[float] = None) -> None:
        """Poll the catalog until cancelled."""
        interval = interval if interval is not None else settings.catalog_refresh
        while True:
            try:
                await self.fetch()
            except GatewayError:
                pass  # already logged, next tick retries
            await asyncio.sleep(interval)
