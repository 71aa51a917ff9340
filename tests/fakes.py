from typing import Any, List, Optional

from storefront.errors import OrderCreationError


class FakeOrderGateway:
    """In-memory stand-in for the order REST endpoints."""

    def __init__(self, order_ids=None, fail_at=(), complete_error: Optional[Exception] = None):
        self.calls: List[tuple] = []
        self.completed: List[Any] = []
        self._ids = iter(order_ids or range(501, 1000))
        self.fail_at = set(fail_at)
        self.complete_error = complete_error

    async def create_order(self, user_id, product_id, quantity):
        idx = len(self.calls)
        self.calls.append((user_id, product_id, quantity))
        if idx in self.fail_at:
            raise OrderCreationError(product_id, 500, "backend said no")
        return next(self._ids)

    async def complete_order(self, order_id):
        self.completed.append(order_id)
        if self.complete_error is not None:
            raise self.complete_error

    async def get_order(self, order_id):
        return {"id": order_id, "status": "COMPLETED" if order_id in self.completed else "PENDING"}


async def no_sleep(_delay):
    return None
