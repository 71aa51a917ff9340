from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from storefront.errors import GatewayError
from storefront.models import CartLine

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    submitted_count: int = 0
    last_order_id: Any = None
    order_ids: List[Any] = field(default_factory=list)
    error: Optional[GatewayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def submit_orders(lines: Iterable[CartLine], user_id: Any, gateway) -> SubmissionResult:
    """
    One order per cart line, strictly one after another.
    Stops on the first failure; orders already created are kept (no rollback).
    """
    result = SubmissionResult()
    for line in lines:
        try:
            order_id = await gateway.create_order(user_id, line.product_id, line.quantity)
        except GatewayError as e:
            logger.warning(
                "Order submission stopped at product %s after %s line(s): %s",
                line.product_id,
                result.submitted_count,
                e,
            )
            result.error = e
            return result

        result.submitted_count += 1
        result.last_order_id = order_id
        result.order_ids.append(order_id)
        logger.info("Order %s created for product %s x%s", order_id, line.product_id, line.quantity)

    return result
